"""
Review API endpoints
"""
from fastapi import APIRouter, Depends, status
from typing import List

from songqueue.models import Profile
from songqueue.schemas import ReviewCreate, ReviewResponse, RatingResponse
from songqueue.core import get_current_reviewer, get_review_service
from songqueue.services import ReviewService

router = APIRouter(tags=["Reviews"])


@router.post(
    "/queue/{submission_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_review(
    submission_id: str,
    review: ReviewCreate,
    current_reviewer: Profile = Depends(get_current_reviewer),
    reviews: ReviewService = Depends(get_review_service)
):
    """
    Rate a submission in the reviewer's queue or history

    A rating of 0 (nothing selected yet) is rejected with 422.
    """
    return reviews.add_review(current_reviewer.id, submission_id, review.rating, review.comment)


@router.get("/submissions/{submission_id}/reviews", response_model=List[ReviewResponse])
async def list_reviews(
    submission_id: str,
    reviews: ReviewService = Depends(get_review_service)
):
    """Reviews of a submission, newest first"""
    return reviews.list_reviews(submission_id)


@router.get("/submissions/{submission_id}/rating", response_model=RatingResponse)
async def get_rating(
    submission_id: str,
    reviews: ReviewService = Depends(get_review_service)
):
    """Average rating of a submission (0 when unrated)"""
    return RatingResponse(
        submission_id=submission_id,
        average_rating=reviews.average_rating(submission_id),
        review_count=reviews.review_count(submission_id)
    )
