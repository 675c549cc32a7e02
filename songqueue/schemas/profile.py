"""
Pydantic schemas for profiles and the reviewer directory
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ProfileUpdate(BaseModel):
    """Settings a user may change on their own profile"""
    is_reviewer: Optional[bool] = None
    artist_name: Optional[str] = Field(None, max_length=255)
    tiktok_handle: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, max_length=500)
    cashapp: Optional[str] = Field(None, max_length=100)
    apple_pay: Optional[str] = Field(None, max_length=100)
    sei_wallet: Optional[str] = Field(None, max_length=100)
    free_skips: Optional[int] = None
    skip_price_usd: Optional[float] = None
    skip_price_sei: Optional[float] = None
    dexsta_profile: Optional[str] = Field(None, max_length=500)
    spotify_profile: Optional[str] = Field(None, max_length=500)
    soundcloud_profile: Optional[str] = Field(None, max_length=500)
    youtube_profile: Optional[str] = Field(None, max_length=500)


class PublicProfileResponse(BaseModel):
    """Profile fields visible to everyone (reviewer pages)"""
    id: str
    username: Optional[str] = None
    artist_name: Optional[str] = None
    tiktok_handle: Optional[str] = None
    reviewer_name: Optional[str] = None
    reviewer_url: Optional[str] = None
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_reviewer: bool = False
    cashapp: Optional[str] = None
    apple_pay: Optional[str] = None
    sei_wallet: Optional[str] = None
    free_skips: int = 0
    skip_price_usd: float = 0
    skip_price_sei: float = 0
    dexsta_profile: Optional[str] = None
    spotify_profile: Optional[str] = None
    soundcloud_profile: Optional[str] = None
    youtube_profile: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class ProfileResponse(PublicProfileResponse):
    """Full profile of the current user"""
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class SkipPriceResponse(BaseModel):
    """Skip-the-line pricing quote for a reviewer"""
    reviewer_id: str
    skip_price_usd: float
    skip_price_sei: float
    free_skips: int


class ReviewerSummary(BaseModel):
    """Reviewer directory entry"""
    id: str
    username: Optional[str] = None
    tiktok_handle: str
    reviewer_name: str
    reviewer_url: str
    profile_image_url: Optional[str] = None
    is_online: bool
    queue_length: int
    reviews_completed: int
    average_rating: float
    skip_price_usd: float
    skip_price_sei: float
    free_skips: int
