"""
FastAPI dependencies for authentication and service wiring
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from songqueue.database import get_db
from songqueue.models import Profile
from songqueue.services import (
    QueueManager, ReviewService, ProfileService, PaymentVerifier, get_event_hub
)
from songqueue.utils.security import verify_token

# HTTP Bearer token scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Profile:
    """
    Get current authenticated user's profile from the session JWT

    Raises:
        HTTPException: If token is invalid or profile not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile is None:
        raise credentials_exception

    return profile


async def get_current_reviewer(
    current_user: Profile = Depends(get_current_user)
) -> Profile:
    """
    Verify that current user has reviewer mode enabled

    Raises:
        HTTPException: If user is not a reviewer
    """
    if not current_user.is_reviewer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Reviewer mode is not enabled for this account"
        )

    return current_user


def get_payment_verifier() -> PaymentVerifier:
    return PaymentVerifier()


def get_queue_manager(
    db: Session = Depends(get_db),
    payment_verifier: PaymentVerifier = Depends(get_payment_verifier)
) -> QueueManager:
    return QueueManager(db, event_hub=get_event_hub(), payment_verifier=payment_verifier)


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db)
