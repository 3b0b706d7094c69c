import os

from config import settings
from database import Base, engine

UPLOAD_SUBDIRS = ("videos", "thumbnails", "avatars")


def create_tables():
    Base.metadata.create_all(bind=engine)


def create_upload_dirs():
    for subdir in UPLOAD_SUBDIRS:
        os.makedirs(os.path.join(settings.UPLOAD_ROOT, subdir), exist_ok=True)
