"""
Queue API endpoints
- Public read of a reviewer's queue
- Reviewer actions: move, complete, remove
- Artist action: skip the line
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from songqueue.database import get_db
from songqueue.exceptions import NotFoundError
from songqueue.models import Profile, Submission
from songqueue.schemas import MoveRequest, SkipLineRequest, QueueResponse, SubmissionResponse
from songqueue.core import get_current_user, get_current_reviewer, get_queue_manager
from songqueue.services import QueueManager

router = APIRouter(tags=["Queue"])


@router.get("/reviewers/{reviewer_id}/queue", response_model=QueueResponse)
async def get_queue(
    reviewer_id: str,
    queue: QueueManager = Depends(get_queue_manager)
):
    """
    Get a reviewer's pending submissions in review order

    The first entry is the next song to be reviewed. Unknown reviewers have an
    empty queue.
    """
    submissions = queue.list_queue(reviewer_id)
    return QueueResponse(reviewer_id=reviewer_id, total=len(submissions), submissions=submissions)


@router.post("/queue/{submission_id}/move", response_model=QueueResponse)
async def move_submission(
    submission_id: str,
    request: MoveRequest,
    current_reviewer: Profile = Depends(get_current_reviewer),
    queue: QueueManager = Depends(get_queue_manager)
):
    """
    Move a submission one step up or down

    Either give a direction, or the target_position currently held by the
    neighbour to swap with. Moving the head up or the tail down is rejected
    with 409.
    """
    target_position = request.target_position
    if request.direction is not None:
        target_position = queue.neighbour_position(current_reviewer.id, submission_id, request.direction)

    submissions = queue.reorder(current_reviewer.id, submission_id, target_position)
    return QueueResponse(reviewer_id=current_reviewer.id, total=len(submissions), submissions=submissions)


@router.post("/queue/{submission_id}/complete", response_model=SubmissionResponse)
async def complete_submission(
    submission_id: str,
    current_reviewer: Profile = Depends(get_current_reviewer),
    queue: QueueManager = Depends(get_queue_manager)
):
    """Mark a pending submission as reviewed"""
    return queue.mark_reviewed(current_reviewer.id, submission_id)


@router.delete("/queue/{submission_id}", response_model=SubmissionResponse)
async def remove_submission(
    submission_id: str,
    current_reviewer: Profile = Depends(get_current_reviewer),
    queue: QueueManager = Depends(get_queue_manager)
):
    """Remove a pending submission from the queue (status becomes 'removed')"""
    return queue.remove(current_reviewer.id, submission_id)


@router.post("/queue/{submission_id}/skip", response_model=SubmissionResponse)
async def skip_line(
    submission_id: str,
    request: SkipLineRequest,
    current_user: Profile = Depends(get_current_user),
    queue: QueueManager = Depends(get_queue_manager),
    db: Session = Depends(get_db)
):
    """
    Move the caller's own submission to the front of the waiting line

    Requires a signed payment proof from the payment provider, or a free skip
    credit offered by the reviewer. Returns 402 when payment is missing or
    invalid; the queue is left untouched in that case. A submission that is
    already next in line cannot skip and gets 409.
    """
    submission = db.query(Submission).filter(
        Submission.id == submission_id,
        Submission.user_id == current_user.id
    ).first()
    if submission is None:
        raise NotFoundError(f"Submission {submission_id} not found")

    return queue.skip_line(
        submission.reviewer_id,
        submission_id,
        payment_proof=request.payment_proof,
        use_free_skip=request.use_free_skip
    )
