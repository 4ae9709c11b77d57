"""Profile router - hourly rate, currency and idle reminder settings."""
from fastapi import APIRouter, Depends

from worktracker.database import get_database
from worktracker.models.user import ProfileUpdate, UserProfile
from worktracker.routers.auth import get_current_user_id
from worktracker.services.profile_service import ProfileService
from worktracker.services.session import SessionRegistry, get_session_registry
from worktracker.utils.clock import get_clock


router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get the current user's profile (defaults when none is stored)."""
    return await ProfileService(db).get_profile(user_id)


@router.put("", response_model=UserProfile)
async def save_profile(
    profile_update: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """
    Save the current user's profile.

    A running tracking session picks up the new idle threshold immediately.
    """
    profile = await ProfileService(db, clock).save_profile(user_id, profile_update)

    session = registry.get(user_id)
    if session is not None:
        session.set_idle_minutes(profile.settings.idle_minutes)

    return profile
