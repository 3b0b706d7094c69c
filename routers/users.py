from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models import User
from routers.auth import get_current_user
from schemas.subscription import SubscriptionStatus
from schemas.token import MessageResponse
from schemas.user import UserResponse, UserSummary
from schemas.video import VideoResponse
from services.subscription_service import SubscriptionService
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.put("/profile", response_model=UserResponse, summary="Update your profile")
async def update_profile(
    username: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = await UserService(db).update_profile(
        current_user,
        username=username,
        description=description,
        avatar=avatar
    )
    return UserResponse.model_validate(user)


@router.get("/subscriptions/list", response_model=List[UserSummary], summary="Channels you are subscribed to")
async def list_subscriptions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    channels = await SubscriptionService(db).get_subscriptions(current_user)
    return [UserSummary.model_validate(c) for c in channels]


@router.get("/feed/subscriptions", response_model=List[VideoResponse], summary="Latest videos from your subscriptions")
async def subscription_feed(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    videos = await SubscriptionService(db).get_feed(current_user)
    return [VideoResponse.model_validate(v) for v in videos]


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user's profile")
async def get_user(user_id: int, db: Session = Depends(get_db)):
    user = await UserService(db).get_user(user_id)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/subscribe", response_model=MessageResponse, summary="Subscribe to a channel")
async def subscribe(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await SubscriptionService(db).subscribe(current_user, user_id)
    return MessageResponse(message="Subscribed successfully")


@router.post("/{user_id}/unsubscribe", response_model=MessageResponse, summary="Unsubscribe from a channel")
async def unsubscribe(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await SubscriptionService(db).unsubscribe(current_user, user_id)
    return MessageResponse(message="Unsubscribed successfully")


@router.get("/{user_id}/subscription-status", response_model=SubscriptionStatus, summary="Check a subscription")
async def subscription_status(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    subscribed = await SubscriptionService(db).is_subscribed(current_user, user_id)
    return SubscriptionStatus(is_subscribed=subscribed)
