"""
Clerk backend API client: user lookup and public metadata updates
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

import config
from app.services.errors import NotFoundError, UpstreamServiceError

logger = logging.getLogger(__name__)


@dataclass
class ProviderUser:
    """The subset of a Clerk user this platform reads"""
    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    public_metadata: Dict[str, Any] = field(default_factory=dict)


class AuthProviderClient:

    def __init__(self, secret_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.secret_key = secret_key if secret_key is not None else config.CLERK_SECRET_KEY
        self.base_url = (base_url or config.CLERK_API_URL).rstrip("/")
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.secret_key:
            logger.error("CLERK_SECRET_KEY is not set")
            raise UpstreamServiceError("Auth provider not configured", status_code=500)

        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.request(
                method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"Clerk API request {method} {path} failed: {str(e)}")
            raise UpstreamServiceError(f"Failed to reach auth provider: {str(e)}")

        if response.status_code == 404:
            raise NotFoundError("User not found at auth provider")
        if not response.ok:
            logger.error(f"Clerk API error: {response.status_code} {response.text}")
            raise UpstreamServiceError(f"Auth provider error: {response.status_code}")
        return response.json()

    @staticmethod
    def _to_provider_user(data: Dict[str, Any]) -> ProviderUser:
        email = ""
        addresses = data.get("email_addresses") or []
        primary_id = data.get("primary_email_address_id")
        for address in addresses:
            if primary_id is None or address.get("id") == primary_id:
                email = address.get("email_address", "")
                break

        return ProviderUser(
            id=data["id"],
            email=email,
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            public_metadata=data.get("public_metadata") or {},
        )

    def get_user(self, user_id: str) -> ProviderUser:
        return self._to_provider_user(self._request("GET", f"/users/{user_id}"))

    def update_user_metadata(self, user_id: str, public_metadata: Dict[str, Any]) -> ProviderUser:
        """Merge ``public_metadata`` into the user's metadata at Clerk"""
        data = self._request(
            "PATCH", f"/users/{user_id}/metadata", json={"public_metadata": public_metadata}
        )
        return self._to_provider_user(data)


def get_auth_provider() -> AuthProviderClient:
    return AuthProviderClient()
