"""
Services package for the application.

This package contains the service classes that hold the business logic
behind the routers: reactions, videos, comments, users and subscriptions.
"""
from .reaction_service import ReactionService, ReactionOutcome, ReactionStatus
from .reaction_store import ReactionStore
from .counter_service import CounterService, Counters
from .target_resolver import TargetResolver

__all__ = [
    'ReactionService',
    'ReactionOutcome',
    'ReactionStatus',
    'ReactionStore',
    'CounterService',
    'Counters',
    'TargetResolver',
]
