"""
Services for SongQueue API
"""
from songqueue.services.queue_manager import QueueManager
from songqueue.services.review_service import ReviewService
from songqueue.services.profile_service import ProfileService
from songqueue.services.payment_verifier import PaymentVerifier
from songqueue.services.notifications import QueueEventHub, get_event_hub
from songqueue.services.auth_provider import SupabaseAuthClient, get_auth_client

__all__ = [
    "QueueManager", "ReviewService", "ProfileService", "PaymentVerifier",
    "QueueEventHub", "get_event_hub", "SupabaseAuthClient", "get_auth_client"
]
