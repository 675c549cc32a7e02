"""
Supabase Auth client
Resolves an OAuth access token issued by the identity provider to a user identity
"""
import logging
from typing import Any, Dict, Optional

import httpx

from songqueue.config import settings
from songqueue.exceptions import IOFailure
from songqueue.schemas.auth import Identity

logger = logging.getLogger(__name__)


class SupabaseAuthClient:
    """Minimal client for the provider's /auth/v1/user endpoint"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        self.base_url = (base_url if base_url is not None else settings.SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.SUPABASE_ANON_KEY
        self.timeout = timeout or settings.OAUTH_TIMEOUT

    async def get_identity(self, access_token: str) -> Optional[Identity]:
        """
        Fetch the user behind an access token

        Args:
            access_token: Token returned by the OAuth code exchange

        Returns:
            Optional[Identity]: The identity, or None if the provider rejects the token

        Raises:
            IOFailure: If the provider is not configured or unreachable
        """
        if not self.base_url:
            raise IOFailure("Identity provider is not configured")

        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token}"
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            if e.response.status_code in (400, 401, 403, 404):
                logger.warning(f"Identity provider rejected access token: {e.response.status_code}")
                return None
            logger.error(f"Identity provider error: {e.response.status_code}")
            raise IOFailure(f"Identity provider returned {e.response.status_code}")

        except httpx.RequestError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise IOFailure("Identity provider is unreachable")

        return self._parse_identity(data)

    @staticmethod
    def _parse_identity(data: Dict[str, Any]) -> Optional[Identity]:
        user_id = data.get("id")
        if not user_id:
            return None

        metadata = data.get("user_metadata") or {}
        username = (
            metadata.get("user_name")
            or metadata.get("preferred_username")
            or metadata.get("full_name")
            or metadata.get("name")
        )
        email = data.get("email") or metadata.get("email")
        if not username and email:
            username = email.split("@")[0]

        return Identity(id=str(user_id), email=email, username=username)


# Singleton instance
_auth_client = None


def get_auth_client() -> SupabaseAuthClient:
    """Get singleton instance of SupabaseAuthClient"""
    global _auth_client
    if _auth_client is None:
        _auth_client = SupabaseAuthClient()
    return _auth_client
