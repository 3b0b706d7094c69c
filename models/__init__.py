"""
Models package for the application.

This package contains all SQLAlchemy models for the application.
"""

# Import all models here to make them available when importing from models
from .user import User
from .video import Video, VideoCategory
from .comment import Comment
from .reaction import Reaction, ReactionKind, ReactionTarget, TargetType
from .subscription import Subscription

__all__ = [
    'User',
    'Video',
    'VideoCategory',
    'Comment',
    'Reaction',
    'ReactionKind',
    'ReactionTarget',
    'TargetType',
    'Subscription',
]
