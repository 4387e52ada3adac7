"""
Turns a parsed request body into a validated consent action.
"""
import math
from typing import Any, Dict, Optional

from config import Settings
from models import ConsentAction, RegisterAction, UpdateAction, RawTokenAction
from utils import BadRequest

ACTIONS = ("register", "update", "token")

# Last path segment -> action, for per-endpoint routing
ROUTE_ACTIONS = {
    "register": "register",
    "consent-register": "register",
    "update": "update",
    "consent-update": "update",
    "token": "token",
    "gettoken": "token",
}


def action_from_path(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    segment = path.rstrip("/").rsplit("/", 1)[-1].lower()
    return ROUTE_ACTIONS.get(segment)


def _text(body: Dict[str, Any], key: str) -> str:
    value = body.get(key)
    if value is None or isinstance(value, (dict, list, bool)):
        return ""
    return str(value).strip()


def _positive_int(value: Any, default: int, field_name: str) -> int:
    if isinstance(value, bool):
        raise BadRequest(f"{field_name} must be a positive integer")
    if value is None or value == "" or value == 0:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{field_name} must be a positive integer")
    if not math.isfinite(number) or number <= 0 or number != int(number):
        raise BadRequest(f"{field_name} must be a positive integer")
    return int(number)


def _parse_register(body: Dict[str, Any], settings: Settings) -> RegisterAction:
    name = _text(body, "name")
    email = _text(body, "email")
    phone = _text(body, "phone")
    if not name or not email or not phone:
        raise BadRequest("Missing required fields", details="name, email and phone are required")

    profile_id = _text(body, "consentProfileId") or settings.consent_profile_id
    if not profile_id:
        raise BadRequest("consentProfileId is required")

    return RegisterAction(
        name=name,
        email=email,
        phone=phone,
        consent_profile_id=profile_id,
        consent_profile_version=_positive_int(
            body.get("consentProfileVersion"), settings.consent_profile_version, "consentProfileVersion"
        ),
        public_url_expiry=_positive_int(body.get("publicUrlExpiry"), settings.public_url_expiry, "publicUrlExpiry"),
        session_expiry=_positive_int(body.get("sessionExpiry"), settings.session_expiry, "sessionExpiry"),
    )


def _parse_update(body: Dict[str, Any], settings: Settings) -> UpdateAction:
    principal_id = _text(body, "principalId")
    if not principal_id:
        raise BadRequest("principalId is required for update")

    return UpdateAction(
        principal_id=principal_id,
        preference_url_type=_text(body, "preferenceUrlType") or settings.preference_url_type,
        public_url_expiry=_positive_int(body.get("publicUrlExpiry"), settings.public_url_expiry, "publicUrlExpiry"),
        session_expiry=_positive_int(body.get("sessionExpiry"), settings.session_expiry, "sessionExpiry"),
    )


def parse_consent_action(body: Dict[str, Any], settings: Settings,
                         route_action: Optional[str] = None) -> ConsentAction:
    """
    Build the consent action for a request.

    A routed endpoint (/register, /update, /token) decides the action;
    otherwise the body's "action" field does, defaulting to "register".
    """
    action = route_action or str(body.get("action") or "register").strip().lower()

    if action == "register":
        return _parse_register(body, settings)
    if action == "update":
        return _parse_update(body, settings)
    if action == "token":
        return RawTokenAction()
    raise BadRequest("Invalid action. Use 'register', 'update' or 'token'.")
