from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .user import UserSummary


class CommentCreate(BaseModel):
    """Schema for adding a comment or a reply."""
    content: str = Field(..., max_length=1000)

    @field_validator('content')
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Comment content is required')
        return v


class CommentResponse(BaseModel):
    id: int
    content: str
    video_id: int
    is_reply: bool
    parent_id: Optional[int] = None
    likes: int
    dislikes: int
    created_at: datetime
    user: UserSummary = Field(validation_alias="owner")

    model_config = {"from_attributes": True, "populate_by_name": True}
