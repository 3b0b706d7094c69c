from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Column, Integer, String, DateTime, Text, CheckConstraint
from sqlalchemy.orm import relationship

from database import Base

# Import for type checking to avoid circular imports
if TYPE_CHECKING:
    from .video import Video
    from .comment import Comment
    from .reaction import Reaction
    from .subscription import Subscription


class User(Base):
    """User model; every user is also a channel others can subscribe to."""
    __tablename__ = 'users'
    __table_args__ = (
        CheckConstraint("subscribers >= 0", name="ck_users_subscribers_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    avatar = Column(String(255), nullable=False, default="/uploads/avatars/default-avatar.png")
    description = Column(Text, nullable=True)
    subscribers = Column(Integer, default=0, server_default="0", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships - using string-based references to avoid circular imports
    videos = relationship("Video", back_populates="owner")
    comments = relationship("Comment", back_populates="owner")
    reactions = relationship("Reaction", back_populates="user")
    subscriptions = relationship(
        "Subscription",
        foreign_keys="Subscription.subscriber_id",
        back_populates="subscriber",
    )

    def __repr__(self):
        return f"<User {self.id} {self.username}>"
