"""
Profile model - one row per authenticated user

A profile becomes a reviewer once `is_reviewer` is switched on; the skip
pricing columns are read by the skip-the-line flow.
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, Numeric
from sqlalchemy.sql import func

from songqueue.database import Base


class Profile(Base):
    """User profile and reviewer settings"""
    __tablename__ = "profiles"

    # Same id as the identity provider's user id
    id = Column(String(36), primary_key=True, index=True)
    email = Column(String(255), index=True)
    username = Column(String(255))
    artist_name = Column(String(255))
    tiktok_handle = Column(String(100), unique=True, index=True)
    reviewer_name = Column(String(100))
    reviewer_url = Column(String(100))
    bio = Column(Text)
    profile_image_url = Column(String(500))
    is_reviewer = Column(Boolean, nullable=False, default=False)

    # Skip-the-line payment handles and pricing
    cashapp = Column(String(100))
    apple_pay = Column(String(100))
    sei_wallet = Column(String(100))
    free_skips = Column(Integer, nullable=False, default=0)
    skip_price_usd = Column(Numeric(10, 2), nullable=False, default=0)
    skip_price_sei = Column(Numeric(18, 6), nullable=False, default=0)

    # Music links
    dexsta_profile = Column(String(500))
    spotify_profile = Column(String(500))
    soundcloud_profile = Column(String(500))
    youtube_profile = Column(String(500))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Profile {self.tiktok_handle or self.id}>"
