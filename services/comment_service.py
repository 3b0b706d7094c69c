import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from core.exceptions import InternalError, NotFound, Unauthorized
from models import Comment, User
from services.reaction_service import ReactionService

logger = logging.getLogger(__name__)


class CommentService:
    """Service for comment threads and comment removal."""

    def __init__(self, db: Session):
        self.db = db

    def _get_or_404(self, comment_id: int) -> Comment:
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            raise NotFound("Comment not found", comment_id=comment_id)
        return comment

    async def get_replies(self, comment_id: int) -> List[Comment]:
        return self.db.query(Comment).options(joinedload(Comment.owner)).filter(
            Comment.parent_id == comment_id,
            Comment.is_reply.is_(True)
        ).order_by(Comment.created_at.asc(), Comment.id.asc()).all()

    async def add_reply(self, comment_id: int, author: User, content: str) -> Comment:
        parent = self._get_or_404(comment_id)
        reply = Comment(
            content=content,
            user_id=author.id,
            video_id=parent.video_id,
            is_reply=True,
            parent_id=parent.id,
        )
        self.db.add(reply)
        self.db.commit()
        self.db.refresh(reply)
        return reply

    async def delete_comment(self, comment_id: int, current_user: User) -> int:
        """
        Delete a comment, every reply below it, and every reaction on the
        removed comments.

        Returns:
            Number of reaction rows removed
        """
        comment = self._get_or_404(comment_id)
        if comment.user_id != current_user.id:
            raise Unauthorized("Not authorized to delete this comment")

        doomed = self._thread_ids(comment.id)

        reactions = ReactionService(self.db)
        try:
            removed = reactions.purge_comments(doomed)
            self.db.query(Comment).filter(Comment.id.in_(doomed)).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting comment {comment_id}: {str(e)}")
            raise InternalError() from e

        self.db.expunge(comment)
        logger.info(f"User {current_user.id} deleted comment {comment_id} ({len(doomed) - 1} replies, {removed} reactions)")
        return removed

    def _thread_ids(self, comment_id: int) -> List[int]:
        """Ids of a comment and all replies below it, parents before children."""
        ids = [comment_id]
        frontier = [comment_id]
        while frontier:
            frontier = [
                cid for (cid,) in self.db.query(Comment.id).filter(Comment.parent_id.in_(frontier))
            ]
            ids.extend(frontier)
        return ids
