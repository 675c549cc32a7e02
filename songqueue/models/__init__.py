"""
Database models for SongQueue API
"""
from songqueue.models.profile import Profile
from songqueue.models.submission import Submission, SubmissionStatus
from songqueue.models.review import Review
from songqueue.models.skip_payment import SkipPayment

__all__ = ["Profile", "Submission", "SubmissionStatus", "Review", "SkipPayment"]
