"""
Pydantic schemas for Submission model
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from songqueue.schemas.review import ReviewResponse


class SubmissionBase(BaseModel):
    """Descriptive fields shared by create and response schemas"""
    artist_name: str = Field(..., max_length=255)
    tiktok_name: str = Field(..., max_length=100)
    song_title: str = Field(..., max_length=255)
    song_link: str = Field(..., max_length=500)
    song_story: str
    genre: Optional[str] = Field(None, max_length=100)
    featuring: Optional[str] = Field(None, max_length=255)
    artwork_url: Optional[str] = Field(None, max_length=500, description="URL returned by the upload endpoint")
    audio_url: Optional[str] = Field(None, max_length=500, description="URL returned by the upload endpoint")


class SubmissionCreate(SubmissionBase):
    """Schema for submitting a song to a reviewer"""
    agreed_to_terms: bool = False


class SubmissionResponse(SubmissionBase):
    """Schema for submission response"""
    id: str
    reviewer_id: str
    user_id: str
    status: str
    queue_position: Optional[int] = None
    skipped_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class HistoryItemResponse(SubmissionResponse):
    """Reviewed submission with its reviews"""
    reviews: List[ReviewResponse] = []
    average_rating: float = 0
