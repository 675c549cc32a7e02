"""
Pydantic schemas for SongQueue API
"""
from songqueue.schemas.auth import OAuthSessionRequest, Token, Identity
from songqueue.schemas.profile import (
    ProfileUpdate, PublicProfileResponse, ProfileResponse, SkipPriceResponse, ReviewerSummary
)
from songqueue.schemas.review import ReviewCreate, ReviewResponse, RatingResponse
from songqueue.schemas.submission import (
    SubmissionBase, SubmissionCreate, SubmissionResponse, HistoryItemResponse
)
from songqueue.schemas.queue import (
    MoveRequest, SkipLineRequest, QueueResponse, QueueEvent
)

__all__ = [
    # Auth schemas
    "OAuthSessionRequest", "Token", "Identity",
    # Profile schemas
    "ProfileUpdate", "PublicProfileResponse", "ProfileResponse", "SkipPriceResponse", "ReviewerSummary",
    # Review schemas
    "ReviewCreate", "ReviewResponse", "RatingResponse",
    # Submission schemas
    "SubmissionBase", "SubmissionCreate", "SubmissionResponse", "HistoryItemResponse",
    # Queue schemas
    "MoveRequest", "SkipLineRequest", "QueueResponse", "QueueEvent"
]
