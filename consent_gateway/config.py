"""
Gateway configuration, read once from the environment at cold start.
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from logging_config import create_logger

logger = create_logger("consent_gateway.config")

# ========= DEFAULTS =========
DEFAULT_BASE_URL = "https://sandbox-gateway.leegality.com"
DEFAULT_OAUTH_SCOPE = "auth consent-runner"
DEFAULT_CONSENT_PROFILE_ID = "ba39e63a-460e-43c9-88b0-70ddf7d282c7"
DEFAULT_PROFILE_VERSION = 1
DEFAULT_URL_EXPIRY = 60
DEFAULT_PREFERENCE_URL_TYPE = "PRIVACY"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_SAFETY_MARGIN_SECONDS = 60

CORS_MODES = ("strict", "tolerant", "open")

DEFAULT_ALLOWED_ORIGINS = (
    "https://leegality.webflow.io",
    "https://www.leegality.com",
    "https://consentin.webflow.io",
    "https://consent.in",
    "https://www.consent.in",
    "https://customer-onboarding-app.netlify.app",
    "https://digital-lending-app.figma.site",
    "https://digital-lending.figma.site",
    "https://*.figma.site",
    "https://yournaukri-hr-demo.netlify.app",
    "https://car-insurance-app.figma.site",
)

# ========= ENDPOINTS =========
TOKEN_PATH = "/auth/oauth2/token"
REGISTER_PATH = "/consent-runner/api/v1/consents/client/register"
UPDATE_PATH = "/consent-runner/api/v1/consents/client/update"


@dataclass(frozen=True)
class Settings:
    client_id: Optional[str] = None
    client_secret: Optional[str] = field(default=None, repr=False)
    base_url: str = DEFAULT_BASE_URL
    oauth_scope: str = DEFAULT_OAUTH_SCOPE
    consent_profile_id: Optional[str] = DEFAULT_CONSENT_PROFILE_ID
    consent_profile_version: int = DEFAULT_PROFILE_VERSION
    public_url_expiry: int = DEFAULT_URL_EXPIRY
    session_expiry: int = DEFAULT_URL_EXPIRY
    preference_url_type: str = DEFAULT_PREFERENCE_URL_TYPE
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    cors_mode: str = "strict"
    http_timeout: float = DEFAULT_TIMEOUT_SECONDS
    token_safety_margin: int = DEFAULT_SAFETY_MARGIN_SECONDS
    cpid_random_suffix: bool = False
    raw_token_enabled: bool = True

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_int(value: Optional[str], default: int, name: str) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}, using {default}")
        return default


def _as_float(value: Optional[str], default: float, name: str) -> float:
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={value!r}, using {default}")
        return default


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip().rstrip("/") for item in value.split(",") if item.strip())


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build the immutable gateway settings from environment variables.

    Client credentials come from LEEGALITY_CLIENT_ID / LEEGALITY_CLIENT_SECRET.
    When both are absent and LEEGALITY_SECRET_ID is set, they are read once
    from AWS Secrets Manager instead.
    """
    env = os.environ if environ is None else environ

    client_id = env.get("LEEGALITY_CLIENT_ID") or None
    client_secret = env.get("LEEGALITY_CLIENT_SECRET") or None
    secret_id = env.get("LEEGALITY_SECRET_ID")
    if not (client_id or client_secret) and secret_id:
        from models import load_client_credentials
        client_id, client_secret = load_client_credentials(secret_id)

    cors_mode = (env.get("CORS_MODE") or "strict").strip().lower()
    if cors_mode not in CORS_MODES:
        logger.warning(f"Unknown CORS_MODE={cors_mode!r}, falling back to 'strict'")
        cors_mode = "strict"

    base_url = (env.get("LEEGALITY_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")

    return Settings(
        client_id=client_id,
        client_secret=client_secret,
        base_url=base_url,
        oauth_scope=env.get("LEEGALITY_OAUTH_SCOPE") or DEFAULT_OAUTH_SCOPE,
        consent_profile_id=env.get("CONSENT_PROFILE_ID") or DEFAULT_CONSENT_PROFILE_ID,
        consent_profile_version=_as_int(
            env.get("CONSENT_PROFILE_VERSION"), DEFAULT_PROFILE_VERSION, "CONSENT_PROFILE_VERSION"
        ),
        public_url_expiry=_as_int(
            env.get("DEFAULT_PUBLIC_URL_EXPIRY"), DEFAULT_URL_EXPIRY, "DEFAULT_PUBLIC_URL_EXPIRY"
        ),
        session_expiry=_as_int(
            env.get("DEFAULT_SESSION_EXPIRY"), DEFAULT_URL_EXPIRY, "DEFAULT_SESSION_EXPIRY"
        ),
        preference_url_type=env.get("DEFAULT_PREFERENCE_URL_TYPE") or DEFAULT_PREFERENCE_URL_TYPE,
        allowed_origins=_split_csv(env.get("CORS_ALLOWED_ORIGINS")) or DEFAULT_ALLOWED_ORIGINS,
        cors_mode=cors_mode,
        http_timeout=_as_float(
            env.get("HTTP_TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS, "HTTP_TIMEOUT_SECONDS"
        ),
        token_safety_margin=_as_int(
            env.get("TOKEN_SAFETY_MARGIN_SECONDS"), DEFAULT_SAFETY_MARGIN_SECONDS, "TOKEN_SAFETY_MARGIN_SECONDS"
        ),
        cpid_random_suffix=_as_bool(env.get("CPID_RANDOM_SUFFIX"), False),
        raw_token_enabled=_as_bool(env.get("ENABLE_RAW_TOKEN_ENDPOINT"), True),
    )
