import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.security import decode_access_token
from database import get_db
from models import User
from schemas.user import UserCreate, UserLogin, UserResponse, AuthResponse
from services.user_service import UserService

# Initialize logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

# Security
security = HTTPBearer(auto_error=False)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the current authenticated user from the JWT token.

    Args:
        credentials: HTTP Authorization credentials containing the token
        db: Database session

    Returns:
        User: The authenticated user

    Raises:
        HTTPException: If the token is missing, invalid, expired, or the user is gone
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _credentials_exception()

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _credentials_exception()

    user_id = payload.get("sub")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise _credentials_exception()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _credentials_exception()
    return user


def _auth_response(user: User, token: str) -> AuthResponse:
    return AuthResponse(**UserResponse.model_validate(user).model_dump(), token=token)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user"
)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user and return the profile with an access token.

    - **username**: 3 to 30 characters
    - **email**: a valid email address
    - **password**: at least 6 characters
    """
    service = UserService(db)
    user = await service.register(user_data)
    return _auth_response(user, service.issue_token(user))


@router.post("/login", response_model=AuthResponse, summary="Authenticate user & get token")
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    service = UserService(db)
    user = await service.authenticate(credentials.email, credentials.password)
    logger.info(f"User {user.id} logged in")
    return _auth_response(user, service.issue_token(user))


@router.get("/me", response_model=UserResponse, summary="Get current user")
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user
