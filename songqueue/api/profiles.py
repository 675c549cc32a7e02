"""
Profile API endpoints
Reviewer settings: reviewer mode, handle, skip pricing and music links
"""
from fastapi import APIRouter, Depends

from songqueue.models import Profile
from songqueue.schemas import ProfileResponse, ProfileUpdate
from songqueue.core import get_current_user, get_profile_service
from songqueue.services import ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/me", response_model=ProfileResponse)
async def get_profile(current_user: Profile = Depends(get_current_user)):
    """Get current user's profile and reviewer settings"""
    return current_user


@router.put("/me", response_model=ProfileResponse)
async def update_profile(
    changes: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Update current user's settings

    Only the fields present in the body are changed. Turning on reviewer mode
    requires an artist name and a TikTok handle.

    Args:
        changes: Partial profile update

    Returns:
        ProfileResponse: The saved profile
    """
    return profiles.update(current_user, changes)
