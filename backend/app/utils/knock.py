"""
Knock notification service client.

Knock keeps its own copy of each recipient ("identify") and delivers
messages by triggering named workflows for a list of recipient IDs.
Recipient IDs are the users' external auth IDs.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

import config
from app.services.errors import UpstreamServiceError

logger = logging.getLogger(__name__)


class KnockClient:
    """
    Thin HTTP wrapper around the Knock REST API
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else config.KNOCK_SECRET_API_KEY
        self.base_url = (base_url or config.KNOCK_API_URL).rstrip("/")
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def identify_user(
        self,
        user_id: str,
        name: str,
        email: str,
        organization: Optional[str] = None,
        company: Optional[str] = None,
        user_type: Optional[str] = None,
    ) -> bool:
        """
        Upsert a recipient in Knock.

        Returns:
            True when Knock accepted the identity, False otherwise. Never raises.
        """
        if not self.is_configured:
            logger.error("KNOCK_SECRET_API_KEY is not set")
            return False

        body: Dict[str, Any] = {"name": name, "email": email}
        if organization:
            body["organization"] = organization
        if company:
            body["company"] = company
        if user_type:
            body["user_type"] = user_type

        try:
            response = requests.put(
                f"{self.base_url}/users/{user_id}",
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error identifying user {user_id} with Knock: {str(e)}")
            return False

        if not response.ok:
            logger.error(f"Knock user identification error: {response.status_code} {response.text}")
            return False

        logger.info(f"Successfully identified user {user_id} with Knock")
        return True

    def trigger_workflow(self, workflow: str, recipients: List[str], data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Trigger a Knock workflow for the given recipients.

        Raises:
            UpstreamServiceError: if the key is missing (500), the request cannot be
                sent (502) or Knock answers with a non-2xx status (that status).
        """
        if not self.is_configured:
            logger.error("KNOCK_SECRET_API_KEY is not set")
            raise UpstreamServiceError("Knock API key not configured", status_code=500)

        try:
            response = requests.post(
                f"{self.base_url}/workflows/{workflow}/trigger",
                json={"recipients": recipients, "data": data},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Knock workflow {workflow} request failed: {str(e)}")
            raise UpstreamServiceError(f"Failed to reach notification service: {str(e)}")

        if not response.ok:
            logger.error(f"Knock API error: {response.status_code} {response.text}")
            raise UpstreamServiceError(
                f"Notification service error: {response.status_code}",
                status_code=response.status_code,
            )

        logger.info(f"Triggered Knock workflow {workflow} for {len(recipients)} recipient(s)")
        try:
            return response.json()
        except ValueError:
            return {}


def get_knock_client() -> KnockClient:
    return KnockClient()
