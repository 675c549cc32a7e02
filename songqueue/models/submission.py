"""
Submission model - one artist's song directed at one reviewer
"""
from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from songqueue.database import Base


class SubmissionStatus:
    """Allowed values of Submission.status"""
    PENDING = "pending"
    REVIEWED = "reviewed"
    REMOVED = "removed"

    ALL = (PENDING, REVIEWED, REMOVED)


class Submission(Base):
    """Song submission waiting in (or retired from) a reviewer's queue"""
    __tablename__ = "submissions"
    __table_args__ = (
        # Positions are only unique among a reviewer's pending rows
        Index(
            "uq_submissions_pending_position",
            "reviewer_id",
            "queue_position",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    reviewer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    artist_name = Column(String(255), nullable=False)
    tiktok_name = Column(String(100), nullable=False)
    song_title = Column(String(255), nullable=False)
    genre = Column(String(100))
    song_story = Column(Text, nullable=False)
    song_link = Column(String(500), nullable=False)
    featuring = Column(String(255))
    artwork_url = Column(String(500))
    audio_url = Column(String(500))
    status = Column(String(20), nullable=False, default=SubmissionStatus.PENDING, index=True)
    # Status values: 'pending', 'reviewed', 'removed'
    queue_position = Column(Integer)
    skipped_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    reviewer = relationship("Profile", foreign_keys=[reviewer_id])
    submitter = relationship("Profile", foreign_keys=[user_id])
    reviews = relationship(
        "Review",
        back_populates="submission",
        order_by="Review.created_at.desc()",
        cascade="all, delete-orphan"
    )

    @property
    def submitter_id(self) -> str:
        return self.user_id

    def __repr__(self):
        return f"<Submission {self.song_title} - {self.status}@{self.queue_position}>"
