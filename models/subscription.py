from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, CheckConstraint
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import relationship

from database import Base

# Import for type checking to avoid circular imports
if TYPE_CHECKING:
    from .user import User

class Subscription(Base):
    """A user subscribed to another user's channel."""
    __tablename__ = 'subscriptions'
    __table_args__ = (
        UniqueConstraint('subscriber_id', 'channel_id', name='uq_subscriptions_subscriber_channel'),
        CheckConstraint('subscriber_id <> channel_id', name='ck_subscriptions_not_self'),
    )

    id = Column(Integer, primary_key=True, index=True)
    subscriber_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    subscriber = relationship("User", foreign_keys=[subscriber_id], back_populates="subscriptions")
    channel = relationship("User", foreign_keys=[channel_id])

    def __repr__(self):
        return f"<Subscription {self.subscriber_id} -> {self.channel_id}>"
