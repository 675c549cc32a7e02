"""
Upload API endpoints
Stores song artwork and audio and returns a public URL
"""
import logging
from fastapi import APIRouter, Depends, UploadFile, File, status
from pydantic import BaseModel

from songqueue.models import Profile
from songqueue.core import get_current_user
from songqueue.utils import save_upload_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])


class UploadResponse(BaseModel):
    """Stored file details"""
    success: bool = True
    url: str
    filename: str
    original_name: str
    size: int
    type: str


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    current_user: Profile = Depends(get_current_user)
):
    """
    Upload an image, audio or video file (max 50MB)

    Args:
        file: Uploaded file

    Returns:
        UploadResponse: Public URL to reference from a submission or profile
    """
    stored = await save_upload_file(file)
    logger.info(f"User {current_user.id} uploaded {stored['filename']} ({stored['size']} bytes)")
    return UploadResponse(**stored)
