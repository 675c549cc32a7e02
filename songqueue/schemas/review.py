"""
Pydantic schemas for Review model
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ReviewCreate(BaseModel):
    """Schema for rating a submission; 0 means no rating chosen yet"""
    rating: int = Field(..., ge=0, le=5)
    comment: str = ""


class ReviewResponse(BaseModel):
    """Schema for review response"""
    id: str
    submission_id: str
    reviewer_id: str
    rating: int
    comment: str
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class RatingResponse(BaseModel):
    """Aggregate rating of a submission"""
    submission_id: str
    average_rating: float
    review_count: int
