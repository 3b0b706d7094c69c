import logging
from typing import Optional, Tuple

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import NotFound, ReactionConflict
from models import Reaction, ReactionKind, ReactionTarget, TargetType

logger = logging.getLogger(__name__)


class ReactionStore:
    """
    Persistence of reaction rows keyed by (user, target).

    Nothing here commits: every write is flushed into the caller's
    transaction so the reaction engine can pair it with the matching
    counter update. Writes that lose a race against a concurrent request
    for the same (user, target) raise ``ReactionConflict``.
    """

    def __init__(self, db: Session):
        self.db = db

    def find(self, user_id: int, target: ReactionTarget) -> Optional[Reaction]:
        return self.db.query(Reaction).filter(
            Reaction.user_id == user_id,
            target.column == target.id
        ).populate_existing().first()

    def create(self, user_id: int, target: ReactionTarget, kind: ReactionKind) -> Reaction:
        reaction = Reaction(user_id=user_id, kind=kind)
        if target.type is TargetType.VIDEO:
            reaction.video_id = target.id
        else:
            reaction.comment_id = target.id

        self.db.add(reaction)
        try:
            self.db.flush()
        except IntegrityError as e:
            # Another request created the row after our find()
            raise ReactionConflict(user_id=user_id, target=str(target), kind=kind.value) from e
        return reaction

    def update_kind(
        self,
        reaction_id: int,
        new_kind: ReactionKind,
        expected_kind: Optional[ReactionKind] = None
    ) -> Reaction:
        """
        Switch a reaction to ``new_kind``.

        When ``expected_kind`` is given the row is only updated if it still
        holds that kind, so a concurrent flip or delete is detected.
        """
        stmt = update(Reaction).where(Reaction.id == reaction_id)
        if expected_kind is not None:
            stmt = stmt.where(Reaction.kind == expected_kind)
        result = self.db.execute(
            stmt.values(kind=new_kind).execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ReactionConflict(reaction_id=reaction_id, kind=new_kind.value)

        reaction = self.db.get(Reaction, reaction_id, populate_existing=True)
        if reaction is None:
            raise NotFound("Reaction not found", reaction_id=reaction_id)
        return reaction

    def delete(self, reaction_id: int) -> None:
        result = self.db.execute(
            delete(Reaction)
            .where(Reaction.id == reaction_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ReactionConflict(reaction_id=reaction_id)

        reaction = self.db.identity_map.get(self.db.identity_key(Reaction, reaction_id))
        if reaction is not None:
            self.db.expunge(reaction)

    def delete_all_for_target(self, target: ReactionTarget) -> int:
        result = self.db.execute(
            delete(Reaction)
            .where(target.column == target.id)
            .execution_options(synchronize_session=False)
        )
        logger.debug(f"Deleted {result.rowcount} reactions for {target}")
        return result.rowcount

    def delete_all_for_comments(self, comment_ids) -> int:
        """
        Delete the reactions on every comment in ``comment_ids`` with one
        statement. Accepts a list of ids or a select of comment ids.
        """
        result = self.db.execute(
            delete(Reaction)
            .where(Reaction.comment_id.in_(comment_ids))
            .execution_options(synchronize_session=False)
        )
        logger.debug(f"Deleted {result.rowcount} comment reactions")
        return result.rowcount

    def count_for_target(self, target: ReactionTarget) -> Tuple[int, int]:
        """Return ``(likes, dislikes)`` counted from the reaction rows."""
        rows = self.db.query(Reaction.kind, func.count(Reaction.id)).filter(
            target.column == target.id
        ).group_by(Reaction.kind).all()
        counts = {kind: count for kind, count in rows}
        return counts.get(ReactionKind.LIKE, 0), counts.get(ReactionKind.DISLIKE, 0)
