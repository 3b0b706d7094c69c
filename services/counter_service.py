import logging
from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from core.exceptions import CounterUnderflow, NotFound
from models import Reaction, ReactionKind, ReactionTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Counters:
    likes: int
    dislikes: int


class CounterService:
    """Maintains the denormalized like/dislike counters of reaction targets."""

    def __init__(self, db: Session):
        self.db = db

    def adjust(self, target: ReactionTarget, like_delta: int, dislike_delta: int) -> Counters:
        """
        Apply signed deltas to the target's counters in one SQL statement.

        The increment happens in the database (``likes = likes + :delta``),
        so concurrent adjustments from different users compose without lost
        updates. The WHERE clause refuses any change that would leave a
        counter below zero.

        Raises:
            NotFound: If the target row no longer exists
            CounterUnderflow: If a counter would become negative
        """
        model = target.model
        result = self.db.execute(
            update(model)
            .where(
                model.id == target.id,
                model.likes + like_delta >= 0,
                model.dislikes + dislike_delta >= 0,
            )
            .values(
                likes=model.likes + like_delta,
                dislikes=model.dislikes + dislike_delta,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            current = self._read(target)
            if current is None:
                raise NotFound(f"{target.type.label} not found", target=str(target))
            logger.error(
                f"Counter underflow on {target}: likes={current.likes} dislikes={current.dislikes} "
                f"like_delta={like_delta} dislike_delta={dislike_delta}"
            )
            raise CounterUnderflow(
                target=str(target),
                like_delta=like_delta,
                dislike_delta=dislike_delta,
            )

        return self._read(target)

    def recount(self, target: ReactionTarget) -> Counters:
        """
        Reset the target's counters from its reaction rows.

        Counting and writing happen in one UPDATE whose values are
        subqueries over ``reactions``, so a reaction committed by another
        request can never fall between the count and the write.
        """
        model = target.model
        result = self.db.execute(
            update(model)
            .where(model.id == target.id)
            .values(
                likes=self._count_rows(target, ReactionKind.LIKE),
                dislikes=self._count_rows(target, ReactionKind.DISLIKE),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFound(f"{target.type.label} not found", target=str(target))
        return self._read(target)

    @staticmethod
    def _count_rows(target: ReactionTarget, kind: ReactionKind):
        return select(func.count(Reaction.id)).where(
            target.column == target.id,
            Reaction.kind == kind,
        ).scalar_subquery()

    def _read(self, target: ReactionTarget):
        model = target.model
        row = self.db.execute(
            select(model.likes, model.dislikes).where(model.id == target.id)
        ).first()
        if row is None:
            return None
        return Counters(likes=row.likes, dislikes=row.dislikes)
