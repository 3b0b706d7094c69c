from sqlalchemy import Column, Integer, CheckConstraint


class ReactableMixin:
    """
    Denormalized like/dislike counters for entities users can react to.

    The values are a projection of the ``reactions`` table and are only
    changed through ``CounterService`` inside a reaction transaction.
    """
    likes = Column(Integer, default=0, server_default="0", nullable=False)
    dislikes = Column(Integer, default=0, server_default="0", nullable=False)


def non_negative_counters(table: str) -> tuple:
    """Check constraints keeping the reaction counters of ``table`` >= 0."""
    return (
        CheckConstraint("likes >= 0", name=f"ck_{table}_likes_non_negative"),
        CheckConstraint("dislikes >= 0", name=f"ck_{table}_dislikes_non_negative"),
    )
