"""
Error taxonomy shared by the service layer. Handlers registered in main.py
turn these into structured JSON responses.
"""
from typing import Any, Dict, Optional


class PlatformError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None,
                 payload: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.payload}


class AuthenticationError(PlatformError):
    status_code = 401
    default_message = "Unauthorized"


class PermissionDeniedError(PlatformError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(PlatformError):
    status_code = 404
    default_message = "Not found"


class ConflictError(PlatformError):
    status_code = 409
    default_message = "Conflict"


class UpstreamServiceError(PlatformError):
    """A call to an external service failed; status_code is the upstream status when known"""
    status_code = 502
    default_message = "Upstream service error"
