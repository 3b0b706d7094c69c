import os
import sys
import tempfile

# Point the app at throwaway storage before config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_ROOT", tempfile.mkdtemp(prefix="vidshare-uploads-"))

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.security import create_access_token, get_password_hash
from database import Base, get_db
from models import Comment, User, Video, VideoCategory

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Fixtures
@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(test_db):
    """Create a test client whose requests each get a session on the test database."""
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


# Model factories
@pytest.fixture
def create_user(test_db):
    """Factory to create a test user."""
    counter = {"n": 0}

    def _create_user(**kwargs):
        counter["n"] += 1
        user_data = {
            "username": f"testuser{counter['n']}",
            "email": f"test{counter['n']}@example.com",
            "hashed_password": get_password_hash("testpass"),
        }
        user_data.update(kwargs)

        user = User(**user_data)
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user
    return _create_user


@pytest.fixture
def create_video(test_db, create_user):
    """Factory to create a test video."""
    def _create_video(**kwargs):
        if 'user_id' not in kwargs:
            kwargs['user_id'] = create_user().id

        video_data = {
            "title": "Test Video",
            "description": "A video for testing",
            "video_url": "/uploads/videos/test.mp4",
            "thumbnail_url": "/uploads/thumbnails/test.png",
            "category": VideoCategory.ENTERTAINMENT,
            "tags": [],
            **kwargs
        }

        video = Video(**video_data)
        test_db.add(video)
        test_db.commit()
        test_db.refresh(video)
        return video
    return _create_video


@pytest.fixture
def create_comment(test_db, create_user, create_video):
    """Factory to create a test comment or, with ``parent_id``, a reply."""
    def _create_comment(**kwargs):
        if 'video_id' not in kwargs:
            kwargs['video_id'] = create_video().id
        if 'user_id' not in kwargs:
            kwargs['user_id'] = create_user().id
        if kwargs.get('parent_id') is not None:
            kwargs.setdefault('is_reply', True)

        comment = Comment(content="Test comment", **kwargs)
        test_db.add(comment)
        test_db.commit()
        test_db.refresh(comment)
        return comment
    return _create_comment


# Authentication helpers
@pytest.fixture
def auth_headers():
    """Return bearer headers for a user."""
    def _auth_headers(user):
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


# File databases: every session gets its own connection and sees the others' commits
def _file_engine(path, serialized=False):
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    if serialized:
        # Take the write lock when a transaction starts so SQLite queues writers
        @event.listens_for(engine, "connect")
        def do_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def file_engine(tmp_path):
    engine = _file_engine(tmp_path / "vidshare.db")
    yield engine
    engine.dispose()


@pytest.fixture
def file_sessionmaker(file_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=file_engine)


@pytest.fixture
def serialized_sessionmaker(tmp_path):
    """Sessions whose transactions run one at a time, for threaded tests."""
    engine = _file_engine(tmp_path / "serialized.db", serialized=True)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def seed_video():
    """Factory creating a video and ``users`` reacting users through ``Session``."""
    def _seed_video(Session, users):
        db = Session()
        try:
            owner = User(username="owner", email="owner@example.com", hashed_password="x")
            reactors = [
                User(username=f"user{i}", email=f"user{i}@example.com", hashed_password="x")
                for i in range(users)
            ]
            db.add_all([owner] + reactors)
            db.flush()
            video = Video(
                title="Race",
                user_id=owner.id,
                video_url="/uploads/videos/race.mp4",
                thumbnail_url="/uploads/thumbnails/race.png",
            )
            db.add(video)
            db.commit()
            return video.id, [u.id for u in reactors]
        finally:
            db.close()
    return _seed_video
