"""
Utility functions for SongQueue API
"""
from songqueue.utils.security import create_access_token, verify_token
from songqueue.utils.file_handler import (
    validate_media_type, validate_file_size,
    generate_unique_filename, save_upload_file, delete_file
)

__all__ = [
    "create_access_token", "verify_token",
    "validate_media_type", "validate_file_size",
    "generate_unique_filename", "save_upload_file", "delete_file"
]
