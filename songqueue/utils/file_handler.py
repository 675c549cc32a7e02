"""
File handling utilities for artwork and audio uploads
"""
import os
import secrets
import time
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
from songqueue.config import settings
from songqueue.exceptions import FileTooLarge, InvalidFileType, IOFailure, ValidationError

CHUNK_SIZE = 1024 * 1024


def validate_media_type(content_type: Optional[str]) -> str:
    """
    Validate the declared media type against the allow-list

    Args:
        content_type: MIME type sent with the upload

    Returns:
        str: The media type, lower-cased

    Raises:
        InvalidFileType: If the type is not image, audio or video
    """
    media_type = (content_type or "").lower()
    if not any(media_type.startswith(prefix) for prefix in settings.allowed_media_type_prefixes):
        raise InvalidFileType("Invalid file type. Only images, audio, and video files are allowed.")
    return media_type


def validate_file_size(file_size: int) -> None:
    """
    Validate file size

    Raises:
        FileTooLarge: If file size exceeds maximum
    """
    if file_size > settings.MAX_FILE_SIZE:
        max_size_mb = settings.MAX_FILE_SIZE // (1024 * 1024)
        raise FileTooLarge(f"File too large. Maximum size is {max_size_mb}MB.")


def generate_unique_filename(original_filename: str) -> str:
    """
    Generate a unique filename to avoid collisions

    Args:
        original_filename: Original filename from upload

    Returns:
        str: '<millis>_<random>.<ext>'
    """
    name = os.path.basename(original_filename or "")
    extension = name.rsplit('.', 1)[-1].lower() if '.' in name else "bin"
    return f"{int(time.time() * 1000)}_{secrets.token_hex(6)}.{extension}"


async def save_upload_file(upload_file: UploadFile) -> dict:
    """
    Save uploaded file to the upload directory

    Args:
        upload_file: FastAPI UploadFile object

    Returns:
        dict: url, filename, original_name, size and type of the stored file

    Raises:
        ValidationError: If no file was sent
        InvalidFileType: If the media type is not allowed
        FileTooLarge: If the file exceeds MAX_FILE_SIZE
        IOFailure: If the file could not be written
    """
    if upload_file is None or not upload_file.filename:
        raise ValidationError("No file uploaded")

    media_type = validate_media_type(upload_file.content_type)

    upload_dir = Path(settings.UPLOAD_DIR)
    unique_filename = generate_unique_filename(upload_file.filename)
    file_path = upload_dir / unique_filename

    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        file_size = 0
        with open(file_path, 'wb') as f:
            while True:
                chunk = await upload_file.read(CHUNK_SIZE)
                if not chunk:
                    break
                file_size += len(chunk)
                validate_file_size(file_size)
                f.write(chunk)
    except FileTooLarge:
        delete_file(str(file_path))
        raise
    except OSError as e:
        delete_file(str(file_path))
        raise IOFailure(f"Failed to save file: {str(e)}")

    return {
        "url": f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{unique_filename}",
        "filename": unique_filename,
        "original_name": upload_file.filename,
        "size": file_size,
        "type": media_type
    }


def delete_file(file_path: str) -> bool:
    """
    Delete a file from disk

    Args:
        file_path: Path to file to delete

    Returns:
        bool: True if deleted successfully, False otherwise
    """
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            return True
        return False
    except OSError:
        return False
