"""
Review Service
Ratings, review listings, aggregate scores and the reviewer history
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from songqueue.exceptions import NotFoundError, ValidationError
from songqueue.models import Review, Submission, SubmissionStatus
from songqueue.schemas.submission import HistoryItemResponse

logger = logging.getLogger(__name__)


def mean_rating(ratings: Iterable[int]) -> float:
    """
    Arithmetic mean rounded half-up to one decimal place

    Returns:
        float: Mean rating, or 0 when there are no ratings
    """
    ratings = list(ratings)
    if not ratings:
        return 0.0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class ReviewService:
    """Review store access for a database session"""

    MIN_RATING = 1
    MAX_RATING = 5

    def __init__(self, db: Session):
        self.db = db

    def add_review(self, reviewer_id: str, submission_id: str, rating: int, comment: str = "") -> Review:
        """
        Record a rating against one of the reviewer's submissions

        Args:
            reviewer_id: Reviewer writing the review
            submission_id: Submission being rated (pending or reviewed)
            rating: 1-5; 0 means the reviewer has not picked a rating yet
            comment: Free text, may be empty

        Raises:
            ValidationError: If the rating is outside 1-5
            NotFoundError: If the submission is not in this reviewer's queue or history
        """
        if rating == 0:
            raise ValidationError("Please select a rating before submitting")
        if not self.MIN_RATING <= rating <= self.MAX_RATING:
            raise ValidationError(f"Rating must be between {self.MIN_RATING} and {self.MAX_RATING}")

        submission = self.db.query(Submission).filter(
            Submission.id == submission_id,
            Submission.reviewer_id == reviewer_id,
            Submission.status.in_([SubmissionStatus.PENDING, SubmissionStatus.REVIEWED])
        ).first()
        if submission is None:
            raise NotFoundError(f"Submission {submission_id} not found for reviewer {reviewer_id}")

        review = Review(
            submission_id=submission_id,
            reviewer_id=reviewer_id,
            rating=rating,
            comment=(comment or "").strip()
        )
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)

        logger.info(f"Review {review.id} ({rating}/5) saved for submission {submission_id}")
        return review

    def list_reviews(self, submission_id: str) -> List[Review]:
        """Reviews of a submission, newest first"""
        return (
            self.db.query(Review)
            .filter(Review.submission_id == submission_id)
            .order_by(Review.created_at.desc())
            .all()
        )

    def average_rating(self, submission_id: str) -> float:
        """Mean rating of a submission; 0 when it has no reviews"""
        ratings = self.db.query(Review.rating).filter(Review.submission_id == submission_id).all()
        return mean_rating(rating for (rating,) in ratings)

    def review_count(self, submission_id: str) -> int:
        return self.db.query(func.count(Review.id)).filter(Review.submission_id == submission_id).scalar() or 0

    def reviewer_stats(self, reviewer_ids: List[str]) -> Dict[str, Dict[str, float]]:
        """
        Review totals per reviewer

        Returns:
            Dict mapping reviewer id to {'reviews_completed', 'average_rating'}
        """
        if not reviewer_ids:
            return {}

        rows = (
            self.db.query(Review.reviewer_id, Review.rating)
            .filter(Review.reviewer_id.in_(reviewer_ids))
            .all()
        )
        ratings: Dict[str, List[int]] = {reviewer_id: [] for reviewer_id in reviewer_ids}
        for reviewer_id, rating in rows:
            ratings[reviewer_id].append(rating)

        return {
            reviewer_id: {
                "reviews_completed": len(values),
                "average_rating": mean_rating(values)
            }
            for reviewer_id, values in ratings.items()
        }

    def history(self, reviewer_id: str) -> List[HistoryItemResponse]:
        """
        Reviewed submissions of a reviewer, most recently reviewed first

        Only submissions with status 'reviewed' are part of the history.
        """
        submissions = (
            self.db.query(Submission)
            .filter(
                Submission.reviewer_id == reviewer_id,
                Submission.status == SubmissionStatus.REVIEWED
            )
            .order_by(Submission.updated_at.desc())
            .all()
        )

        items = []
        for submission in submissions:
            item = HistoryItemResponse.model_validate(submission)
            item.average_rating = mean_rating(review.rating for review in submission.reviews)
            items.append(item)
        return items
