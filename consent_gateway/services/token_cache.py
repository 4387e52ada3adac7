"""
Process-wide OAuth token cache with single-flight refresh.
"""
import threading
from typing import Any, Callable, Dict, Optional

from logging_config import create_logger
from models import OAuthToken
from utils import now_epoch

logger = create_logger("services.token_cache")


def _expires_in(payload: Dict[str, Any]) -> float:
    try:
        return max(float(payload.get("expires_in")), 0.0)
    except (TypeError, ValueError):
        return 0.0


class TokenCache:
    """
    Memoizes the client-credentials token until `safety_margin` seconds
    before it expires.

    Warm reads take no lock. Refreshes are serialized, so callers that miss
    at the same time share the result of a single exchange, including its
    failure: callers queued behind a failed exchange re-raise its error
    rather than each starting their own.
    """

    def __init__(self, oauth_client, safety_margin: float = 60, clock: Callable[[], float] = now_epoch):
        self._oauth_client = oauth_client
        self._safety_margin = safety_margin
        self._clock = clock
        self._lock = threading.Lock()
        self._token: Optional[OAuthToken] = None
        self._exchanges = 0
        self._last_error: Optional[Exception] = None

    def _warm(self) -> Optional[OAuthToken]:
        token = self._token
        if token is not None and token.is_fresh(self._clock(), self._safety_margin):
            return token
        return None

    def get_token(self) -> OAuthToken:
        token = self._warm()
        if token is not None:
            return token

        # Changes only if an exchange finished while this caller waited for the lock
        seen = self._exchanges
        with self._lock:
            token = self._warm()
            if token is not None:
                return token
            if self._exchanges != seen and self._last_error is not None:
                logger.info("Sharing failure of the exchange this caller waited on")
                raise self._last_error

            try:
                payload = self._oauth_client.fetch_token()
            except Exception as e:
                self._last_error = e
                raise
            else:
                self._last_error = None
            finally:
                self._exchanges += 1

            token = OAuthToken(
                access_token=payload["access_token"],
                expires_at=self._clock() + _expires_in(payload),
                payload=dict(payload),
            )
            if token.is_fresh(self._clock(), self._safety_margin):
                self._token = token
            else:
                # Too short-lived to reuse
                self._token = None
                logger.info("Token lifetime within safety margin; not caching")
            return token

    def invalidate(self, token: Optional[OAuthToken] = None) -> None:
        """Drop the cached token, or only `token` if it is still the cached one."""
        with self._lock:
            if token is None or self._token is token:
                self._token = None
                logger.info("Cached token invalidated")

    def remaining_seconds(self, token: OAuthToken) -> int:
        return max(int(token.expires_at - self._clock()), 0)

    def clear(self) -> None:
        self.invalidate()
