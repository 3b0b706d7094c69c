import asyncio

from sqlalchemy import event

from models import ReactionKind, ReactionTarget, User, Video
from reconcile_counters import reconcile_counters
from services.counter_service import Counters
from services.reaction_service import ReactionService
from services.reaction_store import ReactionStore


def test_reconcile_fixes_drift(test_db, create_user, create_video, create_comment):
    video = create_video()
    comment = create_comment(video_id=video.id)
    service = ReactionService(test_db)
    for _ in range(2):
        asyncio.run(service.react(create_user(), ReactionTarget.video(video.id), ReactionKind.LIKE))
    asyncio.run(service.react(create_user(), ReactionTarget.comment(comment.id), ReactionKind.DISLIKE))

    test_db.refresh(video)
    video.likes = 7
    video.dislikes = 1
    test_db.commit()

    drifted = reconcile_counters(test_db)

    assert drifted == [(ReactionTarget.video(video.id), Counters(7, 1), Counters(2, 0))]
    test_db.refresh(video)
    assert (video.likes, video.dislikes) == (2, 0)


def test_reconcile_clean_database(test_db, create_video):
    create_video()
    assert reconcile_counters(test_db) == []


def test_reconcile_keeps_like_committed_during_recount(file_engine, file_sessionmaker, seed_video):
    """A like committed just before the counter write is still counted."""
    video_id, (user_id,) = seed_video(file_sessionmaker, 1)
    target = ReactionTarget.video(video_id)
    fired = []

    @event.listens_for(file_engine, "before_cursor_execute")
    def like_before_counter_write(conn, cursor, statement, parameters, context, executemany):
        if fired or not statement.lstrip().upper().startswith("UPDATE VIDEOS"):
            return
        fired.append(True)
        db = file_sessionmaker()
        try:
            asyncio.run(ReactionService(db).react(db.get(User, user_id), target, ReactionKind.LIKE))
        finally:
            db.close()

    session = file_sessionmaker()
    try:
        reconcile_counters(session)
    finally:
        session.close()
    event.remove(file_engine, "before_cursor_execute", like_before_counter_write)

    db = file_sessionmaker()
    try:
        video = db.get(Video, video_id)
        assert fired == [True]
        assert (video.likes, video.dislikes) == ReactionStore(db).count_for_target(target) == (1, 0)
    finally:
        db.close()
