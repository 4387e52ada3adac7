"""
OAuth2 client-credentials exchange against the consent provider.
"""
import base64
from typing import Any, Dict, Optional

import requests

from config import TOKEN_PATH
from logging_config import create_logger
from services.http_session import create_session, decode_body
from utils import UpstreamAuthError

logger = create_logger("services.oauth_client")

TOKEN_ERROR = "Failed to obtain access token"


def basic_auth_header(client_id: str, client_secret: str) -> str:
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


class OAuthClient:
    def __init__(self, base_url: str, client_id: Optional[str], client_secret: Optional[str],
                 scope: str, timeout: float, session: Optional[requests.Session] = None):
        self.token_url = f"{base_url.rstrip('/')}{TOKEN_PATH}"
        self._client_id = client_id
        self._client_secret = client_secret
        self.scope = scope
        self.timeout = timeout
        self.session = session or create_session()

    def fetch_token(self) -> Dict[str, Any]:
        """
        Run one client-credentials exchange and return the token payload.

        Raises UpstreamAuthError when the endpoint cannot be reached, answers
        with a non-2xx status, or its body carries no access_token.
        """
        try:
            response = self.session.post(
                self.token_url,
                headers={
                    "Authorization": basic_auth_header(self._client_id or "", self._client_secret or ""),
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials", "scope": self.scope},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error(f"Token endpoint timed out after {self.timeout}s")
            raise UpstreamAuthError(TOKEN_ERROR, details="Token endpoint timed out")
        except requests.RequestException as e:
            logger.error(f"Token endpoint unreachable: {e.__class__.__name__}")
            raise UpstreamAuthError(TOKEN_ERROR, details=str(e))

        payload = decode_body(response)
        if not response.ok:
            logger.warning(f"Token exchange failed with status {response.status_code}")
            raise UpstreamAuthError(TOKEN_ERROR, details=payload)
        if not isinstance(payload, dict) or not payload.get("access_token"):
            logger.warning("Token exchange returned no access_token")
            raise UpstreamAuthError(TOKEN_ERROR, details=payload)

        logger.info(f"Token exchange succeeded (expires_in={payload.get('expires_in')})")
        return payload
