"""
Response utilities for gateway responses and Lambda proxy output.
"""
import json
from typing import Any, Dict, Optional

from models import OutgoingResponse


def build_response(data: Any = None, *, status: int = 200, headers: Optional[Dict[str, str]] = None,
                   error: Optional[str] = None) -> OutgoingResponse:
    """Build a JSON gateway response. `error` wins over `data`."""
    merged = {"Content-Type": "application/json"}
    merged.update(headers or {})
    body = {"error": error} if error else data
    return OutgoingResponse(status_code=status, headers=merged, body=body)


def empty_response(*, status: int = 200, headers: Optional[Dict[str, str]] = None) -> OutgoingResponse:
    return OutgoingResponse(status_code=status, headers=dict(headers or {}), body=None)


def to_lambda_response(response: OutgoingResponse) -> Dict[str, Any]:
    """Serialize a gateway response into the API Gateway proxy shape."""
    body = "" if response.body is None else json.dumps(response.body, default=str)
    return {
        "statusCode": response.status_code,
        "headers": dict(response.headers),
        "body": body,
    }
