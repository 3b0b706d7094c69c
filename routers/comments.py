from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List
import logging

from core.exceptions import AppError, InternalError
from database import get_db
from models import ReactionKind, ReactionTarget, User
from routers.auth import get_current_user
from schemas.comment import CommentCreate, CommentResponse
from schemas.reaction import CommentReactionResponse, LikeStatus
from schemas.token import MessageResponse
from services.comment_service import CommentService
from services.reaction_service import ReactionService, ReactionStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Comments"])


@router.get("/{comment_id}/replies", response_model=List[CommentResponse], summary="Get replies to a comment")
async def get_replies(comment_id: int, db: Session = Depends(get_db)):
    replies = await CommentService(db).get_replies(comment_id)
    return [CommentResponse.model_validate(r) for r in replies]


@router.post(
    "/{comment_id}/replies",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Reply to a comment"
)
async def add_reply(
    comment_data: CommentCreate,
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reply = await CommentService(db).add_reply(comment_id, current_user, comment_data.content)
    return CommentResponse.model_validate(reply)


async def _react(comment_id: int, kind: ReactionKind, db: Session, current_user: User) -> CommentReactionResponse:
    try:
        outcome = await ReactionService(db).react(current_user, ReactionTarget.comment(comment_id), kind)
        return CommentReactionResponse(
            message=outcome.message,
            comment=CommentResponse.model_validate(outcome.entity)
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error applying {kind.value} to comment {comment_id} for user {current_user.id}: {str(e)}")
        raise InternalError() from e


@router.post("/{comment_id}/like", response_model=CommentReactionResponse, summary="Like a comment")
async def like_comment(
    comment_id: int = Path(..., description="Comment ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await _react(comment_id, ReactionKind.LIKE, db, current_user)


@router.post("/{comment_id}/dislike", response_model=CommentReactionResponse, summary="Dislike a comment")
async def dislike_comment(
    comment_id: int = Path(..., description="Comment ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await _react(comment_id, ReactionKind.DISLIKE, db, current_user)


@router.get("/{comment_id}/like-status", response_model=LikeStatus, summary="Get the user's like status")
async def get_like_status(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reaction = await ReactionService(db).get_status(current_user, ReactionTarget.comment(comment_id))
    return LikeStatus(liked=reaction is ReactionStatus.LIKE, disliked=reaction is ReactionStatus.DISLIKE)


@router.delete("/{comment_id}", response_model=MessageResponse, summary="Delete a comment")
async def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete one of your comments, its replies and every reaction on them."""
    await CommentService(db).delete_comment(comment_id, current_user)
    return MessageResponse(message="Comment removed")
