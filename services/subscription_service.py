from typing import List
from sqlalchemy import delete, update
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
import logging

from core.exceptions import CounterUnderflow, NotFound, ValidationError
from models import Subscription, User, Video

logger = logging.getLogger(__name__)

FEED_LIMIT = 50


class SubscriptionService:
    """Service for channel subscriptions and the subscriber counter."""

    def __init__(self, db: Session):
        self.db = db

    def _adjust_subscribers(self, channel_id: int, delta: int) -> None:
        result = self.db.execute(
            update(User)
            .where(User.id == channel_id, User.subscribers + delta >= 0)
            .values(subscribers=User.subscribers + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise CounterUnderflow(channel_id=channel_id, delta=delta)

    async def subscribe(self, subscriber: User, channel_id: int) -> Subscription:
        """
        Subscribe ``subscriber`` to the channel of user ``channel_id``.

        Raises:
            ValidationError: If subscribing to oneself or already subscribed
            NotFound: If the channel does not exist
        """
        if subscriber.id == channel_id:
            raise ValidationError("You cannot subscribe to yourself")

        if not self.db.query(User.id).filter(User.id == channel_id).first():
            raise NotFound("Channel not found", channel_id=channel_id)

        if self.db.query(Subscription.id).filter(
            Subscription.subscriber_id == subscriber.id,
            Subscription.channel_id == channel_id
        ).first():
            raise ValidationError("Already subscribed to this channel")

        subscription = Subscription(subscriber_id=subscriber.id, channel_id=channel_id)
        try:
            self.db.add(subscription)
            self.db.flush()
            self._adjust_subscribers(channel_id, 1)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError("Already subscribed to this channel")
        except CounterUnderflow:
            self.db.rollback()
            raise

        logger.info(f"User {subscriber.id} subscribed to channel {channel_id}")
        return subscription

    async def unsubscribe(self, subscriber: User, channel_id: int) -> None:
        result = self.db.execute(
            delete(Subscription)
            .where(
                Subscription.subscriber_id == subscriber.id,
                Subscription.channel_id == channel_id
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise ValidationError("Not subscribed to this channel")

        try:
            self._adjust_subscribers(channel_id, -1)
            self.db.commit()
        except CounterUnderflow:
            self.db.rollback()
            logger.error(f"Subscriber counter underflow for channel {channel_id}")
            raise
        logger.info(f"User {subscriber.id} unsubscribed from channel {channel_id}")

    async def is_subscribed(self, subscriber: User, channel_id: int) -> bool:
        return self.db.query(Subscription.id).filter(
            Subscription.subscriber_id == subscriber.id,
            Subscription.channel_id == channel_id
        ).first() is not None

    async def get_subscriptions(self, subscriber: User) -> List[User]:
        return self.db.query(User).join(Subscription, Subscription.channel_id == User.id).filter(
            Subscription.subscriber_id == subscriber.id
        ).order_by(Subscription.created_at.desc(), Subscription.id.desc()).all()

    async def get_feed(self, subscriber: User) -> List[Video]:
        channel_ids = self.db.query(Subscription.channel_id).filter(
            Subscription.subscriber_id == subscriber.id
        )
        return self.db.query(Video).options(joinedload(Video.owner)).filter(
            Video.user_id.in_(channel_ids.scalar_subquery())
        ).order_by(Video.created_at.desc(), Video.id.desc()).limit(FEED_LIMIT).all()
