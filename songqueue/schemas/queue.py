"""
Pydantic schemas for queue operations
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal, List

from songqueue.schemas.submission import SubmissionResponse


class MoveRequest(BaseModel):
    """Move a submission one step; either a direction or the neighbour's position"""
    direction: Optional[Literal["up", "down"]] = None
    target_position: Optional[int] = None

    @model_validator(mode="after")
    def check_one_of(self):
        if (self.direction is None) == (self.target_position is None):
            raise ValueError("Provide exactly one of 'direction' or 'target_position'")
        return self


class SkipLineRequest(BaseModel):
    """Skip-the-line request; a signed payment proof or a free-skip credit"""
    payment_proof: Optional[str] = Field(None, description="Signed proof issued by the payment provider")
    use_free_skip: bool = False


class QueueResponse(BaseModel):
    """Reviewer queue in display order"""
    reviewer_id: str
    total: int
    submissions: List[SubmissionResponse]


class QueueEvent(BaseModel):
    """Typed change event pushed to queue subscribers"""
    type: str
    reviewer_id: str
    submission_id: Optional[str] = None
    status: Optional[str] = None
    queue_position: Optional[int] = None
    sequence: int
