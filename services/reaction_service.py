"""
Like/dislike state machine shared by videos and comments.

A user holds at most one reaction per target. Submitting a reaction moves
the (user, target) pair through this table:

    existing  requested  action           likes  dislikes
    none      like       create like        +1
    none      dislike    create dislike              +1
    like      like       delete             -1
    dislike   dislike    delete                      -1
    like      dislike    switch             -1       +1
    dislike   like       switch             +1       -1

The reaction write and the counter update are committed together, so the
counters on the target always equal the number of reaction rows of each
kind.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from core.exceptions import AppError, InternalError, ReactionConflict, Unauthorized, ValidationError
from models import Comment, ReactionKind, ReactionTarget, TargetType, User, Video
from services.counter_service import CounterService, Counters
from services.reaction_store import ReactionStore
from services.target_resolver import TargetResolver

logger = logging.getLogger(__name__)


class ReactionStatus(str, Enum):
    """A user's current stance toward a target."""
    NONE = "none"
    LIKE = "like"
    DISLIKE = "dislike"

    @classmethod
    def of(cls, kind: Optional[ReactionKind]) -> "ReactionStatus":
        return cls.NONE if kind is None else cls(kind.value)


class ReactionAction(str, Enum):
    CREATE = "create"
    DELETE = "delete"
    SWITCH = "switch"


class Transition(NamedTuple):
    action: ReactionAction
    previous: Optional[ReactionKind]
    requested: ReactionKind
    like_delta: int
    dislike_delta: int

    @property
    def status(self) -> ReactionStatus:
        if self.action is ReactionAction.DELETE:
            return ReactionStatus.NONE
        return ReactionStatus.of(self.requested)

    def message(self, target_type: TargetType) -> str:
        if self.action is ReactionAction.CREATE:
            verb = "liked" if self.requested is ReactionKind.LIKE else "disliked"
            return f"{target_type.label} {verb}"
        if self.action is ReactionAction.DELETE:
            return f"{self.requested.value.capitalize()} removed"
        return f"Changed {self.previous.value} to {self.requested.value}"


def _delta(kind: ReactionKind, amount: int) -> tuple:
    return (amount, 0) if kind is ReactionKind.LIKE else (0, amount)


def plan_transition(existing: Optional[ReactionKind], requested: ReactionKind) -> Transition:
    """Compute the reaction write and counter deltas for a request."""
    if existing is None:
        return Transition(ReactionAction.CREATE, None, requested, *_delta(requested, 1))

    if existing == requested:
        return Transition(ReactionAction.DELETE, existing, requested, *_delta(requested, -1))

    removed_likes, removed_dislikes = _delta(existing, -1)
    added_likes, added_dislikes = _delta(requested, 1)
    return Transition(
        ReactionAction.SWITCH,
        existing,
        requested,
        removed_likes + added_likes,
        removed_dislikes + added_dislikes,
    )


@dataclass
class ReactionOutcome:
    target: ReactionTarget
    entity: Union[Video, Comment]
    transition: Transition
    counters: Counters

    @property
    def status(self) -> ReactionStatus:
        return self.transition.status

    @property
    def message(self) -> str:
        return self.transition.message(self.target.type)


class ReactionService:
    """Service applying like/dislike requests to videos and comments."""

    def __init__(self, db: Session, max_retries: Optional[int] = None):
        self.db = db
        self.store = ReactionStore(db)
        self.counters = CounterService(db)
        self.resolver = TargetResolver(db)
        self.max_retries = settings.REACTION_CONFLICT_RETRIES if max_retries is None else max_retries

    @staticmethod
    def parse_kind(kind: Union[ReactionKind, str]) -> ReactionKind:
        try:
            return ReactionKind(kind)
        except ValueError:
            raise ValidationError(f"Invalid reaction type: {kind}")

    async def react(
        self,
        user: Optional[User],
        target: ReactionTarget,
        kind: Union[ReactionKind, str]
    ) -> ReactionOutcome:
        """
        Apply a like or dislike from ``user`` to ``target``.

        Args:
            user: The authenticated user reacting
            target: The video or comment being reacted to
            kind: 'like' or 'dislike'

        Returns:
            ReactionOutcome with the transition taken and the new counters

        Raises:
            Unauthorized: If there is no user
            ValidationError: If kind is not a reaction kind
            NotFound: If the target does not exist
            InternalError: If the transaction could not be applied
        """
        if user is None:
            raise Unauthorized("Not authorized")
        requested = self.parse_kind(kind)

        attempt = 0
        while True:
            try:
                outcome = self._apply(user.id, target, requested)
                self.db.commit()
            except ReactionConflict as e:
                self.db.rollback()
                if attempt < self.max_retries:
                    attempt += 1
                    logger.warning(
                        f"Reaction race for user {user.id} on {target} ({requested.value}), "
                        f"retrying ({attempt}/{self.max_retries})"
                    )
                    continue
                logger.error(
                    f"Reaction race for user {user.id} on {target} ({requested.value}) "
                    f"not resolved after {attempt} retries: {e.context}"
                )
                raise InternalError(user_id=user.id, target=str(target), kind=requested.value) from e
            except AppError:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception(f"Reaction failed for user {user.id} on {target} ({requested.value})")
                raise InternalError(user_id=user.id, target=str(target), kind=requested.value) from e

            logger.info(
                f"User {user.id} {outcome.transition.action.value} {requested.value} on {target}: "
                f"likes={outcome.counters.likes} dislikes={outcome.counters.dislikes}"
            )
            return outcome

    def _apply(self, user_id: int, target: ReactionTarget, requested: ReactionKind) -> ReactionOutcome:
        entity = self.resolver.resolve(target)
        existing = self.store.find(user_id, target)
        transition = plan_transition(existing.kind if existing else None, requested)

        if transition.action is ReactionAction.CREATE:
            self.store.create(user_id, target, requested)
        elif transition.action is ReactionAction.DELETE:
            self.store.delete(existing.id)
        else:
            self.store.update_kind(existing.id, requested, expected_kind=existing.kind)

        counters = self.counters.adjust(target, transition.like_delta, transition.dislike_delta)
        return ReactionOutcome(target=target, entity=entity, transition=transition, counters=counters)

    async def get_status(self, user: Optional[User], target: ReactionTarget) -> ReactionStatus:
        """Return the user's current reaction to ``target``."""
        if user is None:
            raise Unauthorized("Not authorized")
        self.resolver.resolve(target)
        reaction = self.store.find(user.id, target)
        return ReactionStatus.of(reaction.kind if reaction else None)

    def purge_target(self, target: ReactionTarget) -> int:
        """
        Delete every reaction on ``target``.

        Used by the deletion flows before the target row itself is removed;
        the caller commits.
        """
        return self.store.delete_all_for_target(target)

    def purge_comments(self, comment_ids) -> int:
        """Delete every reaction on the given comments; the caller commits."""
        return self.store.delete_all_for_comments(comment_ids)
