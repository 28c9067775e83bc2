"""
Profile endpoints

The auth provider calls the sign-up hook after a user is created; repeated
calls for the same user return the existing profile.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
import uuid

from techmate.core.database import get_db
from techmate.services.reference_service import get_or_create_profile

router = APIRouter()


class ProfileSignupRequest(BaseModel):
    user_id: uuid.UUID
    email: str
    name: Optional[str] = None  # from the user's sign-up metadata


class ProfileResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    email: str
    avatar_url: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


@router.post("/signup", response_model=ProfileResponse)
async def profile_signup(
    request: ProfileSignupRequest,
    db: Session = Depends(get_db)
):
    """Resolve the profile of a newly signed-up user, creating it on first call"""
    return get_or_create_profile(db, request.user_id, request.email, name=request.name)
