"""
Unit tests for ReviewService and rating aggregation
"""
import pytest

from songqueue.exceptions import NotFoundError, ValidationError
from songqueue.schemas import SubmissionCreate
from songqueue.services import QueueManager, ReviewService
from songqueue.services.review_service import mean_rating


class TestMeanRating:
    """Test rating averages"""

    def test_mean_of_three(self):
        """Test [3, 5, 4] averages to 4.0"""
        assert mean_rating([3, 5, 4]) == 4.0

    def test_no_ratings(self):
        """Test empty ratings average to 0"""
        assert mean_rating([]) == 0

    def test_rounds_half_up(self):
        """Test one decimal, halves rounded up"""
        assert mean_rating([4, 5]) == 4.5
        assert mean_rating([1, 2, 2, 2]) == 1.8
        assert mean_rating([4, 4, 4, 3]) == 3.8


class TestReviewService:
    """Test storing and reading reviews"""

    @pytest.fixture(autouse=True)
    def setup(self, db_session, make_profile, song):
        self.db = db_session
        self.reviewer = make_profile("dj", is_reviewer=True)
        self.artist = make_profile("artist")
        self.queue = QueueManager(db_session)
        self.service = ReviewService(db_session)
        self.submission = self.queue.enqueue(
            self.reviewer.id, self.artist.id, SubmissionCreate(**song("A"))
        )

    def test_average_of_reviews(self):
        """Test stored ratings average as expected"""
        for rating in (3, 5, 4):
            self.service.add_review(self.reviewer.id, self.submission.id, rating, "nice")

        assert self.service.average_rating(self.submission.id) == 4.0
        assert self.service.review_count(self.submission.id) == 3

    def test_unrated_submission(self):
        """Test submissions without reviews average 0"""
        assert self.service.average_rating(self.submission.id) == 0
        assert self.service.list_reviews(self.submission.id) == []

    def test_zero_rating_rejected(self):
        """Test a missing rating is refused and nothing is stored"""
        with pytest.raises(ValidationError) as exc:
            self.service.add_review(self.reviewer.id, self.submission.id, 0)
        assert "select a rating" in exc.value.message
        assert self.service.review_count(self.submission.id) == 0

    def test_out_of_range_rejected(self):
        """Test ratings above 5"""
        with pytest.raises(ValidationError):
            self.service.add_review(self.reviewer.id, self.submission.id, 6)

    def test_other_reviewer_cannot_review(self, make_profile):
        """Test reviewers can only rate their own queue"""
        other = make_profile("other", is_reviewer=True)
        with pytest.raises(NotFoundError):
            self.service.add_review(other.id, self.submission.id, 4)

    def test_removed_submission_cannot_be_reviewed(self):
        """Test removed submissions are closed"""
        self.queue.remove(self.reviewer.id, self.submission.id)
        with pytest.raises(NotFoundError):
            self.service.add_review(self.reviewer.id, self.submission.id, 4)

    def test_comment_is_trimmed(self):
        """Test comment whitespace"""
        review = self.service.add_review(self.reviewer.id, self.submission.id, 5, "  great hook  ")
        assert review.comment == "great hook"

    def test_history_contains_reviewed_only(self, song):
        """Test history lists reviewed submissions with their average"""
        other = self.queue.enqueue(self.reviewer.id, self.artist.id, SubmissionCreate(**song("B")))
        self.service.add_review(self.reviewer.id, self.submission.id, 5)
        self.service.add_review(self.reviewer.id, self.submission.id, 4)
        self.queue.mark_reviewed(self.reviewer.id, self.submission.id)

        history = self.service.history(self.reviewer.id)

        assert [item.id for item in history] == [self.submission.id]
        assert history[0].average_rating == 4.5
        assert len(history[0].reviews) == 2
        assert other.id not in [item.id for item in history]

    def test_reviewer_stats(self):
        """Test totals per reviewer"""
        self.service.add_review(self.reviewer.id, self.submission.id, 2)
        self.service.add_review(self.reviewer.id, self.submission.id, 5)

        stats = self.service.reviewer_stats([self.reviewer.id, self.artist.id])

        assert stats[self.reviewer.id] == {"reviews_completed": 2, "average_rating": 3.5}
        assert stats[self.artist.id] == {"reviews_completed": 0, "average_rating": 0.0}
