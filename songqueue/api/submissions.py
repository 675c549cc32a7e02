"""
Submission API endpoints
Artists submit songs to a reviewer's queue and look up their past submissions
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from songqueue.database import get_db
from songqueue.models import Profile, Submission
from songqueue.schemas import SubmissionCreate, SubmissionResponse
from songqueue.core import get_current_user, get_queue_manager, get_profile_service
from songqueue.services import QueueManager, ProfileService

router = APIRouter(tags=["Submissions"])


@router.post(
    "/reviewers/{reviewer_id}/submissions",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED
)
async def submit_song(
    reviewer_id: str,
    payload: SubmissionCreate,
    current_user: Profile = Depends(get_current_user),
    queue: QueueManager = Depends(get_queue_manager),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Submit a song to a reviewer; it lands at the tail of the queue

    Artwork and audio must be uploaded first via /uploads; pass the returned
    URLs in artwork_url / audio_url.

    Args:
        reviewer_id: Profile id of the reviewer
        payload: Song details

    Returns:
        SubmissionResponse: The pending submission with its queue position
    """
    submission = queue.enqueue(reviewer_id, current_user.id, payload)
    profiles.fill_artist_details(current_user, payload.artist_name, payload.tiktok_name)
    return submission


@router.get("/submissions/mine", response_model=List[SubmissionResponse])
async def get_my_submissions(
    q: Optional[str] = Query(None, description="Filter by song title fragment"),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get all submissions made by the current user, newest first

    Args:
        q: Optional case-insensitive song title fragment

    Returns:
        List: The user's submissions
    """
    query = db.query(Submission).filter(Submission.user_id == current_user.id)
    if q:
        query = query.filter(Submission.song_title.ilike(f"%{q.strip()}%"))

    return query.order_by(Submission.created_at.desc()).all()
