"""
Rebuild the like/dislike counters of every video and comment from the
reaction rows and report any target whose stored counters had drifted.

    python reconcile_counters.py
"""
import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from core.logging_config import setup_logging
from database import SessionLocal, init_models
from models import Comment, ReactionTarget, Video
from services.counter_service import CounterService, Counters

logger = logging.getLogger(__name__)


def reconcile_counters(db: Session) -> List[Tuple[ReactionTarget, Counters, Counters]]:
    """
    Recount every target and commit the corrected counters.

    Returns:
        (target, stored counters, recounted counters) for each target that drifted
    """
    service = CounterService(db)
    drifted = []

    targets = [ReactionTarget.video(vid) for vid, in db.query(Video.id).all()]
    targets += [ReactionTarget.comment(cid) for cid, in db.query(Comment.id).all()]

    for target in targets:
        model = target.model
        likes, dislikes = db.query(model.likes, model.dislikes).filter(model.id == target.id).one()
        stored = Counters(likes=likes, dislikes=dislikes)
        recounted = service.recount(target)
        if stored != recounted:
            logger.warning(f"Counter drift on {target}: stored={stored} recounted={recounted}")
            drifted.append((target, stored, recounted))

    db.commit()
    logger.info(f"Checked {len(targets)} targets, fixed {len(drifted)}")
    return drifted


if __name__ == "__main__":
    setup_logging()
    init_models()
    session = SessionLocal()
    try:
        reconcile_counters(session)
    finally:
        session.close()
        SessionLocal.remove()
