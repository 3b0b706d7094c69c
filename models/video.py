from enum import Enum as PyEnum
from typing import TYPE_CHECKING
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base
from .base_models import ReactableMixin, non_negative_counters

# Import for type checking to avoid circular imports
if TYPE_CHECKING:
    from models.user import User
    from models.comment import Comment


class VideoCategory(str, PyEnum):
    ENTERTAINMENT = "entertainment"
    MUSIC = "music"
    EDUCATION = "education"
    SPORTS = "sports"
    GAMING = "gaming"
    TECHNOLOGY = "technology"
    TRAVEL = "travel"
    COMEDY = "comedy"
    NEWS = "news"


video_category_enum = Enum(
    VideoCategory,
    name='video_category_enum',
    values_callable=lambda categories: [c.value for c in categories],
    validate_strings=True,
)


class Video(ReactableMixin, Base):
    """Uploaded video with its metadata and engagement counters."""

    __tablename__ = 'videos'
    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
        *non_negative_counters('videos'),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False, comment='Video title')
    description = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    video_url = Column(String(512), nullable=False, comment='URL of the uploaded video file')
    thumbnail_url = Column(String(512), nullable=False, comment='URL of the thumbnail image')
    duration = Column(String(16), nullable=False, default='0:00')
    views = Column(Integer, default=0, server_default="0", nullable=False)
    category = Column(video_category_enum, nullable=False, default=VideoCategory.ENTERTAINMENT)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User", back_populates="videos")
    comments = relationship("Comment", back_populates="video", passive_deletes=True)

    def __repr__(self):
        return f"<Video {self.id} {self.title!r}>"
