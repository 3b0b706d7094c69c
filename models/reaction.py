from dataclasses import dataclass
from datetime import datetime
from enum import Enum as PyEnum
from typing import Type, Union

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship

from database import Base
from .video import Video
from .comment import Comment


class ReactionKind(str, PyEnum):
    LIKE = "like"
    DISLIKE = "dislike"


class TargetType(str, PyEnum):
    """Kinds of entities a user can react to."""
    VIDEO = "video"
    COMMENT = "comment"

    @property
    def model(self) -> Type[Union[Video, Comment]]:
        return Video if self is TargetType.VIDEO else Comment

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class ReactionTarget:
    """Reference to one reactable entity: its type plus primary key."""
    type: TargetType
    id: int

    @classmethod
    def video(cls, video_id: int) -> "ReactionTarget":
        return cls(TargetType.VIDEO, video_id)

    @classmethod
    def comment(cls, comment_id: int) -> "ReactionTarget":
        return cls(TargetType.COMMENT, comment_id)

    @property
    def model(self):
        return self.type.model

    @property
    def column(self):
        """Reaction column holding this target's key."""
        return Reaction.video_id if self.type is TargetType.VIDEO else Reaction.comment_id

    def __str__(self):
        return f"{self.type.value}:{self.id}"


reaction_kind_enum = Enum(
    ReactionKind,
    name='reaction_kind_enum',
    values_callable=lambda kinds: [k.value for k in kinds],
    validate_strings=True,
    create_constraint=True,
)


class Reaction(Base):
    """
    One user's like or dislike of exactly one video or comment.

    Uniqueness of (user, target) is enforced by the database, one unique
    key per target column. NULLs never collide, so a video reaction and a
    comment reaction from the same user coexist.
    """
    __tablename__ = 'reactions'
    __table_args__ = (
        UniqueConstraint('user_id', 'video_id', name='uq_reactions_user_video'),
        UniqueConstraint('user_id', 'comment_id', name='uq_reactions_user_comment'),
        CheckConstraint(
            '(video_id IS NULL AND comment_id IS NOT NULL) OR (video_id IS NOT NULL AND comment_id IS NULL)',
            name='ck_reactions_single_target'
        ),
        Index('ix_reactions_video_kind', 'video_id', 'kind'),
        Index('ix_reactions_comment_kind', 'comment_id', 'kind'),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    video_id = Column(Integer, ForeignKey('videos.id', ondelete='CASCADE'), nullable=True)
    comment_id = Column(Integer, ForeignKey('comments.id', ondelete='CASCADE'), nullable=True)
    kind = Column(reaction_kind_enum, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="reactions")

    @property
    def target(self) -> ReactionTarget:
        if self.video_id is not None:
            return ReactionTarget.video(self.video_id)
        return ReactionTarget.comment(self.comment_id)

    def __repr__(self):
        return f"<Reaction {self.user_id} -> {self.target} {self.kind.value}>"
