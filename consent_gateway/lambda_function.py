"""
Main Lambda function handler - Entry point for the Consent Gateway API.

Brokers OAuth-protected calls to the consent provider on behalf of a
browser client:

- POST /register (or {"action": "register"}): open a consent collection session
- POST /update   (or {"action": "update"}):   open a privacy center session
- POST /token    (or {"action": "token"}):    return a raw OAuth token
- OPTIONS *:                                  CORS preflight

Architecture:
- Entry Point: lambda_handler normalizes API Gateway events
- Handlers: CORS / method / body checks and the request pipeline
- Services: OAuth exchange, token cache, consent API calls
- Models: Request, action and token types; secret lookup
- Utils: CORS policy, errors, responses
"""
from typing import Any, Dict, Optional

from config import load_settings
from handlers import GatewayHandler
from logging_config import create_logger
from models import IncomingRequest
from utils import build_response, to_lambda_response

logger = create_logger("consent_gateway.lambda_handler")

_gateway: Optional[GatewayHandler] = None


def get_gateway() -> GatewayHandler:
    """Process-wide gateway (and token cache), created on first use."""
    global _gateway
    if _gateway is None:
        settings = load_settings()
        _gateway = GatewayHandler(settings)
        logger.info("Consent Gateway initialized")
        logger.info(f"Base URL: {settings.base_url}")
        logger.info(f"CORS mode: {settings.cors_mode} ({len(settings.allowed_origins)} allowed origins)")
        logger.info(f"Client credentials configured: {settings.has_credentials}")
    return _gateway


def reset_gateway() -> None:
    global _gateway
    if _gateway is not None:
        _gateway.close()
    _gateway = None


def _header(headers: Dict[str, Any], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted:
            return value
    return None


def build_incoming_request(event: Dict[str, Any]) -> IncomingRequest:
    """Normalize a REST (v1) or HTTP API (v2) proxy event."""
    request_context = event.get("requestContext") or {}
    http_context = request_context.get("http") or {}
    headers = event.get("headers") or {}

    return IncomingRequest(
        method=(event.get("httpMethod") or http_context.get("method") or "").upper(),
        origin=_header(headers, "origin") or None,
        raw_body=event.get("body"),
        path=event.get("path") or event.get("rawPath") or http_context.get("path"),
    )


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for the Consent Gateway.

    Args:
        event: Lambda proxy event with HTTP request data
        context: Lambda context object

    Returns:
        HTTP response with status code, headers, and JSON body
    """
    event = event or {}
    try:
        request = build_incoming_request(event)
        response = get_gateway().handle(request, is_base64=bool(event.get("isBase64Encoded")))
    except Exception as e:
        logger.exception("Unhandled error in lambda_handler")
        return to_lambda_response(build_response(status=500, error=str(e) or "Internal server error"))
    logger.info(f"{request.method} {request.path or '/'} -> {response.status_code}")
    return to_lambda_response(response)
