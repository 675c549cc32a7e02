"""
Skip payment model - ledger of redeemed skip-the-line payments
"""
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func
import uuid

from songqueue.database import Base


class SkipPayment(Base):
    """A payment proof (or free-skip credit) consumed by exactly one skip"""
    __tablename__ = "skip_payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    # Payment reference from the proof; unique so a proof is redeemed once
    reference = Column(String(255), unique=True, nullable=False, index=True)
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=False, index=True)
    reviewer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    method = Column(String(20), nullable=False)  # 'usd', 'sei' or 'free'
    amount = Column(Numeric(18, 6), nullable=False, default=0)
    redeemed_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<SkipPayment {self.reference} - {self.method}>"
