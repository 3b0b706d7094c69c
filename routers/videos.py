from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from core.exceptions import AppError, InternalError, ValidationError
from database import get_db
from models import ReactionKind, ReactionTarget, User, VideoCategory
from routers.auth import get_current_user
from schemas.comment import CommentCreate, CommentResponse
from schemas.reaction import LikeStatus, VideoReactionResponse
from schemas.token import MessageResponse
from schemas.video import VideoCreate, VideoResponse, VideoSort
from services.reaction_service import ReactionService, ReactionStatus
from services.video_service import VideoService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Videos"])

# Static paths are declared before /{video_id} so they are matched first


@router.post(
    "",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a new video"
)
async def upload_video(
    title: str = Form(...),
    description: Optional[str] = Form(None),
    category: VideoCategory = Form(VideoCategory.ENTERTAINMENT),
    tags: Optional[str] = Form(None, description="Comma separated tags"),
    video: Optional[UploadFile] = File(None, description="Video file (video/*)"),
    thumbnail: Optional[UploadFile] = File(None, description="Thumbnail image (image/*)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Upload a video with its thumbnail.

    - **title**: required, at most 100 characters
    - **description**: at most 5000 characters
    - **category**: one of the supported categories (default: entertainment)
    - **tags**: comma separated list
    """
    if video is None or thumbnail is None or not video.filename or not thumbnail.filename:
        raise ValidationError("Video and thumbnail are required")

    try:
        data = VideoCreate(
            title=title.strip(),
            description=description.strip() if description else None,
            category=category,
            tags=[tag.strip() for tag in tags.split(',') if tag.strip()] if tags else [],
        )
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"])

    created = await VideoService(db).create_video(current_user, data, video, thumbnail)
    return VideoResponse.model_validate(created)


@router.get("", response_model=List[VideoResponse], summary="Get all videos (paginated)")
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    videos = await VideoService(db).list_videos(page=page, limit=limit)
    return [VideoResponse.model_validate(v) for v in videos]


@router.get("/search", response_model=List[VideoResponse], summary="Search videos")
async def search_videos(
    q: Optional[str] = Query(None, description="Search terms"),
    sort: VideoSort = Query(VideoSort.RELEVANCE),
    db: Session = Depends(get_db)
):
    if not q or not q.strip():
        raise ValidationError("Search query is required")
    videos = await VideoService(db).search_videos(q, sort)
    return [VideoResponse.model_validate(v) for v in videos]


@router.get("/user/{user_id}", response_model=List[VideoResponse], summary="Get videos by user")
async def get_user_videos(user_id: int, db: Session = Depends(get_db)):
    videos = await VideoService(db).get_user_videos(user_id)
    return [VideoResponse.model_validate(v) for v in videos]


@router.get("/{video_id}", response_model=VideoResponse, summary="Get a single video")
async def get_video(video_id: int = Path(..., description="Video ID"), db: Session = Depends(get_db)):
    """Get a video by ID. Every call counts as a view."""
    video = await VideoService(db).get_video(video_id)
    return VideoResponse.model_validate(video)


@router.get("/{video_id}/recommended", response_model=List[VideoResponse], summary="Get recommended videos")
async def get_recommended(video_id: int, db: Session = Depends(get_db)):
    videos = await VideoService(db).get_recommended(video_id)
    return [VideoResponse.model_validate(v) for v in videos]


async def _react(video_id: int, kind: ReactionKind, db: Session, current_user: User) -> VideoReactionResponse:
    try:
        outcome = await ReactionService(db).react(current_user, ReactionTarget.video(video_id), kind)
        return VideoReactionResponse(
            message=outcome.message,
            video=VideoResponse.model_validate(outcome.entity)
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error applying {kind.value} to video {video_id} for user {current_user.id}: {str(e)}")
        raise InternalError() from e


@router.post("/{video_id}/like", response_model=VideoReactionResponse, summary="Like a video")
async def like_video(
    video_id: int = Path(..., description="Video ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Like a video, remove an existing like, or turn a dislike into a like."""
    return await _react(video_id, ReactionKind.LIKE, db, current_user)


@router.post("/{video_id}/dislike", response_model=VideoReactionResponse, summary="Dislike a video")
async def dislike_video(
    video_id: int = Path(..., description="Video ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Dislike a video, remove an existing dislike, or turn a like into a dislike."""
    return await _react(video_id, ReactionKind.DISLIKE, db, current_user)


@router.get("/{video_id}/like-status", response_model=LikeStatus, summary="Get the user's like status")
async def get_like_status(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reaction = await ReactionService(db).get_status(current_user, ReactionTarget.video(video_id))
    return LikeStatus(liked=reaction is ReactionStatus.LIKE, disliked=reaction is ReactionStatus.DISLIKE)


@router.get("/{video_id}/comments", response_model=List[CommentResponse], summary="Get comments for a video")
async def get_comments(video_id: int, db: Session = Depends(get_db)):
    comments = await VideoService(db).get_comments(video_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post(
    "/{video_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment to a video"
)
async def add_comment(
    comment_data: CommentCreate,
    video_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    comment = await VideoService(db).add_comment(video_id, current_user, comment_data.content)
    return CommentResponse.model_validate(comment)


@router.delete("/{video_id}", response_model=MessageResponse, summary="Delete a video")
async def delete_video(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete one of your videos together with its comments and reactions."""
    await VideoService(db).delete_video(video_id, current_user)
    return MessageResponse(message="Video removed")
