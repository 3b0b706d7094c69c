from pydantic import BaseModel

from .video import VideoResponse
from .comment import CommentResponse


class LikeStatus(BaseModel):
    """The current user's reaction to a target; at most one flag is set."""
    liked: bool = False
    disliked: bool = False


class VideoReactionResponse(BaseModel):
    message: str
    video: VideoResponse


class CommentReactionResponse(BaseModel):
    message: str
    comment: CommentResponse
