"""
Core functionality for SongQueue API
"""
from songqueue.core.dependencies import (
    get_current_user, get_current_reviewer,
    get_queue_manager, get_review_service, get_profile_service, get_payment_verifier
)

__all__ = [
    "get_current_user", "get_current_reviewer",
    "get_queue_manager", "get_review_service", "get_profile_service", "get_payment_verifier"
]
