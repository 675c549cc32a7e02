"""
Authentication API endpoints
Exchange an identity-provider access token for a SongQueue session token
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status

from songqueue.models import Profile
from songqueue.schemas import OAuthSessionRequest, Token, ProfileResponse
from songqueue.core import get_current_user, get_profile_service
from songqueue.services import ProfileService, SupabaseAuthClient, get_auth_client
from songqueue.utils import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/session", response_model=Token)
async def create_session(
    request: OAuthSessionRequest,
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Start a session after the OAuth redirect

    The client completes the provider's OAuth flow and posts the resulting
    access token here. The identity behind it is resolved with the provider,
    the profile is created or refreshed, and a session JWT is returned.

    Raises:
        HTTPException: 401 if the provider rejects the token
    """
    identity = await auth_client.get_identity(request.access_token)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed. Please try again.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile = profiles.upsert_identity(identity)
    logger.info(f"Session started for user {profile.id}")

    return Token(access_token=create_access_token({"sub": profile.id, "email": profile.email}))


@router.get("/me", response_model=ProfileResponse)
async def get_me(current_user: Profile = Depends(get_current_user)):
    """Get the profile of the authenticated user"""
    return current_user
