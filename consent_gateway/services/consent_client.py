"""
Consent runner API calls (register / update).
"""
from typing import Any, Dict, Optional

import requests

from config import REGISTER_PATH, UPDATE_PATH
from logging_config import create_logger
from models import UpstreamResult
from services.http_session import create_session, decode_body
from utils import UpstreamOperationError

logger = create_logger("services.consent_client")

REGISTER_ERROR = "Consent registration failed"
UPDATE_ERROR = "Consent update failed"


class ConsentApiClient:
    def __init__(self, base_url: str, timeout: float, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or create_session()

    def register(self, access_token: str, payload: Dict[str, Any]) -> UpstreamResult:
        return self._post(REGISTER_PATH, access_token, payload, REGISTER_ERROR)

    def update(self, access_token: str, payload: Dict[str, Any]) -> UpstreamResult:
        return self._post(UPDATE_PATH, access_token, payload, UPDATE_ERROR)

    def _post(self, path: str, access_token: str, payload: Dict[str, Any], error: str) -> UpstreamResult:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(
                url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {access_token}",
                },
                json=payload,
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error(f"POST {path} timed out after {self.timeout}s")
            raise UpstreamOperationError(error, details="Upstream request timed out", status_code=504)
        except requests.RequestException as e:
            logger.error(f"POST {path} failed: {e.__class__.__name__}")
            raise UpstreamOperationError(error, details=str(e), status_code=502)

        logger.info(f"POST {path} -> {response.status_code}")
        return UpstreamResult(status_code=response.status_code, body=decode_body(response))
