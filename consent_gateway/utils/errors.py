"""
Gateway error taxonomy. Each error knows its HTTP status and client payload.
"""
from typing import Any, Dict, Optional

_NO_DETAILS = object()


class GatewayError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Any = _NO_DETAILS, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> Dict[str, Any]:
        body = {"error": self.message}
        if self.details is not _NO_DETAILS:
            body["details"] = self.details
        return body


class BadRequest(GatewayError):
    status_code = 400


class OriginRejected(GatewayError):
    status_code = 403


class MethodNotAllowed(GatewayError):
    status_code = 405


class ConfigurationMissing(GatewayError):
    status_code = 500


class UpstreamAuthError(GatewayError):
    status_code = 500


class UpstreamOperationError(GatewayError):
    """Downstream consent call failed; status is passed through to the client."""
    status_code = 502


class UpstreamShapeError(GatewayError):
    status_code = 500
