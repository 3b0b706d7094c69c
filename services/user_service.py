from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import UploadFile
import logging

from core.exceptions import NotFound, Unauthorized, ValidationError
from core.security import get_password_hash, verify_password, create_access_token
from models.user import User
from schemas.user import UserCreate
from utils.media_handler import MediaHandler

logger = logging.getLogger(__name__)

class UserService:
    """Service for registration, login and profile management."""

    def __init__(self, db: Session, media_handler: Optional[MediaHandler] = None):
        self.db = db
        self._media_handler = media_handler

    @property
    def media_handler(self) -> MediaHandler:
        if self._media_handler is None:
            self._media_handler = MediaHandler()
        return self._media_handler

    async def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found", user_id=user_id)
        return user

    async def register(self, data: UserCreate) -> User:
        """
        Create a new account.

        Raises:
            ValidationError: If the email or the username is already in use
        """
        if self.db.query(User).filter(User.email == data.email).first():
            raise ValidationError("User with this email already exists", field="email")
        if self.db.query(User).filter(User.username == data.username).first():
            raise ValidationError("Username is already taken", field="username")

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise ValidationError("User with this email or username already exists")
        self.db.refresh(user)
        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.hashed_password):
            raise ValidationError("Invalid credentials")
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token({"sub": str(user.id)})

    async def update_profile(
        self,
        user: User,
        username: Optional[str] = None,
        description: Optional[str] = None,
        avatar: Optional[UploadFile] = None
    ) -> User:
        """Update the username, description and avatar of ``user``."""
        if user is None:
            raise Unauthorized()

        if username:
            username = username.strip()
            if not 3 <= len(username) <= 30:
                raise ValidationError("Username must be between 3 and 30 characters")
            existing = self.db.query(User).filter(User.username == username).first()
            if existing and existing.id != user.id:
                raise ValidationError("Username is already taken")
            user.username = username

        if description:
            description = description.strip()
            if len(description) > 1000:
                raise ValidationError("Description must be at most 1000 characters")
            user.description = description

        if avatar is not None and avatar.filename:
            user.avatar = await self.media_handler.save(avatar, 'avatar')

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError("Username is already taken")
        self.db.refresh(user)
        return user
