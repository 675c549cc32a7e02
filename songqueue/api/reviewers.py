"""
Reviewer directory API endpoints
"""
from fastapi import APIRouter, Depends, Query
from typing import List

from songqueue.schemas import ReviewerSummary, PublicProfileResponse, SkipPriceResponse, HistoryItemResponse
from songqueue.core import get_profile_service, get_review_service
from songqueue.services import ProfileService, ReviewService

router = APIRouter(prefix="/reviewers", tags=["Reviewers"])


@router.get("", response_model=List[ReviewerSummary])
async def list_reviewers(
    online_only: bool = Query(False, description="Only reviewers with reviewer mode enabled"),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    List reviewers with queue length, completed reviews and skip pricing
    """
    return profiles.list_reviewers(online_only=online_only)


@router.get("/{reviewer_id}/skip-price", response_model=SkipPriceResponse)
async def get_skip_price(
    reviewer_id: str,
    profiles: ProfileService = Depends(get_profile_service)
):
    """Skip-the-line price quote for a reviewer"""
    return profiles.skip_price(reviewer_id)


@router.get("/{reviewer_id}/history", response_model=List[HistoryItemResponse])
async def get_history(
    reviewer_id: str,
    reviews: ReviewService = Depends(get_review_service)
):
    """
    Reviewed submissions of a reviewer, most recent first, with their reviews
    """
    return reviews.history(reviewer_id)


@router.get("/{handle}", response_model=PublicProfileResponse)
async def get_reviewer_by_handle(
    handle: str,
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Look up a reviewer page by TikTok handle ('@' optional)
    """
    return profiles.get_reviewer_by_handle(handle)
