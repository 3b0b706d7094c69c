import logging
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy import String, cast, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from core.exceptions import InternalError, NotFound, Unauthorized
from models import Comment, ReactionTarget, User, Video
from schemas.video import VideoCreate, VideoSort
from services.reaction_service import ReactionService
from utils.media_handler import MediaHandler

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
RECOMMENDED_LIMIT = 15
RECOMMENDED_CANDIDATES = 500


class VideoService:
    """Service for handling video-related operations."""

    def __init__(self, db: Session, media_handler: Optional[MediaHandler] = None):
        self.db = db
        self.media_handler = media_handler or MediaHandler()

    def _query(self):
        return self.db.query(Video).options(joinedload(Video.owner))

    def _get_or_404(self, video_id: int) -> Video:
        video = self._query().filter(Video.id == video_id).first()
        if not video:
            raise NotFound("Video not found", video_id=video_id)
        return video

    async def create_video(
        self,
        owner: User,
        data: VideoCreate,
        video_file: UploadFile,
        thumbnail_file: UploadFile
    ) -> Video:
        """
        Store the uploaded files and create the video record.

        Args:
            owner: The uploading user
            data: Validated title, description, category and tags
            video_file: The video upload (video/* content type)
            thumbnail_file: The thumbnail upload (image/* content type)

        Returns:
            The created Video
        """
        self.media_handler.validate(video_file, 'video')
        self.media_handler.validate(thumbnail_file, 'thumbnail')

        video_url = await self.media_handler.save(video_file, 'video')
        try:
            thumbnail_url = await self.media_handler.save(thumbnail_file, 'thumbnail')
        except Exception:
            self.media_handler.remove(video_url)
            raise

        video = Video(
            title=data.title,
            description=data.description,
            category=data.category,
            tags=data.tags,
            user_id=owner.id,
            video_url=video_url,
            thumbnail_url=thumbnail_url,
        )
        try:
            self.db.add(video)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.media_handler.remove(video_url)
            self.media_handler.remove(thumbnail_url)
            logger.error(f"Error creating video for user {owner.id}: {str(e)}")
            raise InternalError("Server error during video upload") from e

        logger.info(f"User {owner.id} uploaded video {video.id}")
        return self._get_or_404(video.id)

    async def list_videos(self, page: int = 1, limit: int = 20) -> List[Video]:
        return self._query().order_by(Video.created_at.desc(), Video.id.desc()) \
            .offset((page - 1) * limit).limit(limit).all()

    async def get_user_videos(self, user_id: int) -> List[Video]:
        return self._query().filter(Video.user_id == user_id) \
            .order_by(Video.created_at.desc(), Video.id.desc()).all()

    async def get_video(self, video_id: int, count_view: bool = True) -> Video:
        """Return a video, counting the request as a view."""
        video = self._get_or_404(video_id)
        if count_view:
            self.db.execute(
                update(Video)
                .where(Video.id == video_id)
                .values(views=Video.views + 1)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            self.db.refresh(video)
        return video

    async def search_videos(self, query: str, sort: VideoSort = VideoSort.RELEVANCE) -> List[Video]:
        """
        Find videos whose title, description or tags contain any query term.

        Relevance ranks title matches above tag matches above description
        matches; the other orderings are newest, most viewed and most liked.
        """
        terms = [term.lower() for term in query.split() if term.strip()]
        if not terms:
            return []

        conditions = []
        for term in terms:
            pattern = f"%{term}%"
            conditions.extend([
                Video.title.ilike(pattern),
                Video.description.ilike(pattern),
                cast(Video.tags, String).ilike(pattern),
            ])
        q = self._query().filter(or_(*conditions))

        if sort == VideoSort.DATE:
            return q.order_by(Video.created_at.desc(), Video.id.desc()).limit(SEARCH_LIMIT).all()
        if sort == VideoSort.VIEWS:
            return q.order_by(Video.views.desc(), Video.id.desc()).limit(SEARCH_LIMIT).all()
        if sort == VideoSort.RATING:
            return q.order_by(Video.likes.desc(), Video.id.desc()).limit(SEARCH_LIMIT).all()

        candidates = q.order_by(Video.created_at.desc(), Video.id.desc()).all()
        candidates.sort(key=lambda video: self._relevance(video, terms), reverse=True)
        return candidates[:SEARCH_LIMIT]

    @staticmethod
    def _relevance(video: Video, terms: List[str]) -> int:
        title = video.title.lower()
        description = (video.description or '').lower()
        tags = [tag.lower() for tag in video.tags or []]
        score = 0
        for term in terms:
            if term in title:
                score += 3
            if any(term in tag for tag in tags):
                score += 2
            if term in description:
                score += 1
        return score

    async def get_recommended(self, video_id: int) -> List[Video]:
        """Videos sharing the category or a tag with ``video_id``, most viewed first."""
        video = self._get_or_404(video_id)
        tags = set(video.tags or [])
        candidates = self._query().filter(Video.id != video.id) \
            .order_by(Video.views.desc(), Video.id.desc()) \
            .limit(RECOMMENDED_CANDIDATES).all()
        related = [
            other for other in candidates
            if other.category == video.category or tags.intersection(other.tags or [])
        ]
        return related[:RECOMMENDED_LIMIT]

    async def get_comments(self, video_id: int) -> List[Comment]:
        return self.db.query(Comment).options(joinedload(Comment.owner)).filter(
            Comment.video_id == video_id,
            Comment.is_reply.is_(False)
        ).order_by(Comment.created_at.desc(), Comment.id.desc()).all()

    async def add_comment(self, video_id: int, author: User, content: str) -> Comment:
        video = self._get_or_404(video_id)
        comment = Comment(content=content, user_id=author.id, video_id=video.id)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    async def delete_video(self, video_id: int, current_user: User) -> int:
        """
        Delete a video with its comments and every reaction on them.

        Returns:
            Number of reaction rows removed
        """
        video = self._get_or_404(video_id)
        if video.user_id != current_user.id:
            raise Unauthorized("Not authorized to delete this video")

        reactions = ReactionService(self.db)
        try:
            comment_count = self.db.query(Comment.id).filter(Comment.video_id == video.id).count()
            removed = reactions.purge_comments(select(Comment.id).where(Comment.video_id == video.id))
            removed += reactions.purge_target(ReactionTarget.video(video.id))

            self.db.query(Comment).filter(Comment.video_id == video.id).delete(synchronize_session=False)
            self.db.query(Video).filter(Video.id == video.id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting video {video_id}: {str(e)}")
            raise InternalError() from e

        self.db.expunge(video)
        logger.info(
            f"User {current_user.id} deleted video {video_id} "
            f"({comment_count} comments, {removed} reactions)"
        )
        return removed
