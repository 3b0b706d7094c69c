from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from models.video import VideoCategory
from .user import UserSummary


class VideoSort(str, Enum):
    """Orderings supported by video search."""
    RELEVANCE = "relevance"
    DATE = "date"
    VIEWS = "views"
    RATING = "rating"


class VideoCreate(BaseModel):
    """Metadata submitted together with the uploaded video and thumbnail."""
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    category: VideoCategory = VideoCategory.ENTERTAINMENT
    tags: List[str] = Field(default_factory=list)


class VideoResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    video_url: str
    thumbnail_url: str
    duration: str
    views: int
    category: VideoCategory
    tags: List[str] = Field(default_factory=list)
    likes: int
    dislikes: int
    created_at: datetime
    updated_at: datetime
    user: UserSummary = Field(validation_alias="owner")

    model_config = {"from_attributes": True, "populate_by_name": True}
