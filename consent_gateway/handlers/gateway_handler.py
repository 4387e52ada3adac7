"""
Consent gateway request pipeline.

validate (CORS / method / body) -> authenticate (cached OAuth token)
-> call (register / update) -> reshape -> respond
"""
import base64
import binascii
import json
from typing import Any, Dict, Optional

import requests

from config import Settings
from handlers.action_parser import action_from_path, parse_consent_action
from logging_config import create_logger
from models import (
    IncomingRequest,
    OutgoingResponse,
    RegisterAction,
    UpdateAction,
    RawTokenAction,
    OAuthToken,
    UpstreamResult
)
from services import (
    ConsentApiClient,
    OAuthClient,
    TokenCache,
    create_session,
    REGISTER_ERROR,
    UPDATE_ERROR
)
from utils import (
    GatewayError,
    BadRequest,
    OriginRejected,
    MethodNotAllowed,
    ConfigurationMissing,
    UpstreamOperationError,
    UpstreamShapeError,
    CorsPolicy,
    build_response,
    empty_response,
    generate_cpid
)

logger = create_logger("handlers.gateway_handler")

ALLOW = "POST, OPTIONS"


def decode_raw_body(raw_body: Optional[str], is_base64: bool = False) -> Optional[str]:
    if raw_body is None or not is_base64:
        return raw_body
    try:
        return base64.b64decode(raw_body).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise BadRequest("Invalid JSON body")


def parse_json_body(raw_body: Optional[str]) -> Dict[str, Any]:
    if raw_body is None or not raw_body.strip():
        return {}
    try:
        body = json.loads(raw_body)
    except (json.JSONDecodeError, TypeError):
        raise BadRequest("Invalid JSON body")
    if not isinstance(body, dict):
        raise BadRequest("Invalid JSON body", details="Request body must be a JSON object")
    return body


def _data_field(body: Any, key: str) -> Optional[str]:
    data = body.get("data") if isinstance(body, dict) else None
    value = data.get(key) if isinstance(data, dict) else None
    return value or None


class GatewayHandler:
    def __init__(self, settings: Settings, token_cache: Optional[TokenCache] = None,
                 consent_client: Optional[ConsentApiClient] = None,
                 cors_policy: Optional[CorsPolicy] = None,
                 session: Optional[requests.Session] = None):
        self.settings = settings
        self.cors = cors_policy or CorsPolicy(settings.allowed_origins, settings.cors_mode)
        self._session = session or create_session()
        if token_cache is None:
            oauth_client = OAuthClient(
                base_url=settings.base_url,
                client_id=settings.client_id,
                client_secret=settings.client_secret,
                scope=settings.oauth_scope,
                timeout=settings.http_timeout,
                session=self._session,
            )
            token_cache = TokenCache(oauth_client, safety_margin=settings.token_safety_margin)
        self.token_cache = token_cache
        self.consent_client = consent_client or ConsentApiClient(
            settings.base_url, settings.http_timeout, session=self._session
        )

    def close(self) -> None:
        self.token_cache.clear()
        self._session.close()

    # ---------- entry point ----------
    def handle(self, request: IncomingRequest, is_base64: bool = False) -> OutgoingResponse:
        """Run the pipeline; every outcome, including crashes, becomes a response."""
        method = (request.method or "").upper()
        origin = request.origin or None
        cors_headers = {}
        try:
            allowed = self.cors.is_allowed(origin)
            logger.info(f"{method} {request.path or '/'} origin={origin or '-'} allowed={allowed}")

            if method == "OPTIONS":
                return empty_response(status=200, headers=self.cors.headers(origin, allowed, preflight=True))

            cors_headers = self.cors.headers(origin, allowed)
            if method != "POST":
                return self._error(MethodNotAllowed("Method not allowed"), {**cors_headers, "Allow": ALLOW})
            if not allowed:
                logger.warning(f"Rejected origin {origin}")
                return self._error(OriginRejected("Origin not allowed"), cors_headers)

            body = parse_json_body(decode_raw_body(request.raw_body, is_base64))
            action = parse_consent_action(body, self.settings, action_from_path(request.path))
            logger.info(f"Action: {action.kind}")

            if isinstance(action, RawTokenAction) and not self.settings.raw_token_enabled:
                raise GatewayError("Token endpoint is disabled", status_code=403)
            if not self.settings.has_credentials:
                logger.error("LEEGALITY_CLIENT_ID / LEEGALITY_CLIENT_SECRET not configured")
                raise ConfigurationMissing("Client credentials are missing.")

            return build_response(self._dispatch(action), status=200, headers=cors_headers)
        except GatewayError as e:
            return self._error(e, cors_headers)
        except Exception as e:
            logger.exception("Unhandled error in gateway handler")
            return build_response(status=500, headers=cors_headers, error=str(e) or e.__class__.__name__)

    def _error(self, error: GatewayError, headers: Dict[str, str]) -> OutgoingResponse:
        if error.status_code >= 500:
            logger.error(f"{error.status_code} {error.message}")
        else:
            logger.info(f"{error.status_code} {error.message}")
        return build_response(error.to_body(), status=error.status_code, headers=headers)

    # ---------- actions ----------
    def _dispatch(self, action) -> Any:
        token = self.token_cache.get_token()
        if isinstance(action, RegisterAction):
            return self._register(action, token)
        if isinstance(action, UpdateAction):
            return self._update(action, token)
        return self._raw_token(token)

    def _check_upstream(self, result: UpstreamResult, error: str, token: OAuthToken) -> None:
        if result.ok:
            return
        if result.status_code == 401:
            self.token_cache.invalidate(token)
        logger.warning(f"{error}: upstream status {result.status_code}")
        raise UpstreamOperationError(error, details=result.body, status_code=result.status_code)

    def _register(self, action: RegisterAction, token: OAuthToken) -> Dict[str, Any]:
        cpid = generate_cpid(action.email, self.settings.cpid_random_suffix)
        payload = {
            "consentProfileId": action.consent_profile_id,
            "consentProfileVersion": action.consent_profile_version,
            "principal": {
                "id": cpid,
                "email": action.email,
                "name": action.name,
                "phone": action.phone,
            },
            "publicUrlExpiry": action.public_url_expiry,
            "sessionExpiry": action.session_expiry,
        }
        result = self.consent_client.register(token.access_token, payload)
        self._check_upstream(result, REGISTER_ERROR, token)

        consent_url = _data_field(result.body, "consentCollectUrl")
        if not consent_url:
            raise UpstreamShapeError("No consentCollectUrl returned", details=result.body)

        return {
            "consentUrl": consent_url,
            "cpid": cpid,
            "profileId": action.consent_profile_id,
            "profileVersion": action.consent_profile_version,
        }

    def _update(self, action: UpdateAction, token: OAuthToken) -> Dict[str, Any]:
        payload = {
            "principalId": action.principal_id,
            "preferenceUrlType": action.preference_url_type,
            "publicUrlExpiry": action.public_url_expiry,
            "sessionExpiry": action.session_expiry,
        }
        result = self.consent_client.update(token.access_token, payload)
        self._check_upstream(result, UPDATE_ERROR, token)

        privacy_center_url = _data_field(result.body, "privacyCenterUrl")
        if not privacy_center_url:
            raise UpstreamShapeError("No privacyCenterUrl returned", details=result.body)

        return {"privacyCenterUrl": privacy_center_url, "principalId": action.principal_id}

    def _raw_token(self, token: OAuthToken) -> Dict[str, Any]:
        payload = dict(token.payload)
        if "expires_in" in payload:
            payload["expires_in"] = self.token_cache.remaining_seconds(token)
        return payload
