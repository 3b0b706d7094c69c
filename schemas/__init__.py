from .user import UserBase, UserCreate, UserLogin, UserSummary, UserResponse, AuthResponse
from .token import MessageResponse
from .video import VideoCreate, VideoResponse, VideoSort
from .comment import CommentCreate, CommentResponse
from .reaction import LikeStatus, VideoReactionResponse, CommentReactionResponse
from .subscription import SubscriptionStatus

__all__ = [
    # User models
    'UserBase', 'UserCreate', 'UserLogin', 'UserSummary', 'UserResponse', 'AuthResponse',
    # Message models
    'MessageResponse',
    # Video models
    'VideoCreate', 'VideoResponse', 'VideoSort',
    # Comment models
    'CommentCreate', 'CommentResponse',
    # Reaction models
    'LikeStatus', 'VideoReactionResponse', 'CommentReactionResponse',
    # Subscription models
    'SubscriptionStatus',
]
