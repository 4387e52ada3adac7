"""
CORS origin allow-listing and header construction.

Modes:
- strict:   allow-list; preflight from an unknown origin answers "null".
- tolerant: allow-list; preflight from an unknown origin answers "*".
- open:     every origin is accepted and answered with "*".

In strict and tolerant mode a POST from an unknown origin is rejected with
403 and the rejected origin is echoed back so the browser surfaces the error.
"""
import fnmatch
from typing import Dict, Iterable, Optional
from urllib.parse import urlsplit

ALLOW_HEADERS = "Content-Type, Authorization"
ALLOW_METHODS = "POST, OPTIONS"


def _split_origin(value: str):
    parts = urlsplit(value.strip().rstrip("/"))
    return (parts.scheme or "").lower(), (parts.netloc or "").lower()


def origin_matches(origin: str, pattern: str) -> bool:
    """Match an origin against an exact origin or a "scheme://*.domain" pattern."""
    origin_scheme, origin_host = _split_origin(origin)
    pattern_scheme, pattern_host = _split_origin(pattern)
    if not origin_host or origin_scheme != pattern_scheme:
        return False
    if "*" not in pattern_host:
        return origin_host == pattern_host
    # Wildcards only stand for whole subdomain labels
    if any(c in origin_host for c in "/@?#\\"):
        return False
    return fnmatch.fnmatchcase(origin_host, pattern_host)


class CorsPolicy:
    def __init__(self, allowed_origins: Iterable[str], mode: str = "strict"):
        self.allowed_origins = tuple(allowed_origins)
        self.mode = mode

    def is_allowed(self, origin: Optional[str]) -> bool:
        """Absent origin (non-browser caller) is always allowed."""
        if not origin or self.mode == "open":
            return True
        return any(origin_matches(origin, pattern) for pattern in self.allowed_origins)

    def allow_origin_value(self, origin: Optional[str], allowed: bool, preflight: bool = False) -> str:
        if self.mode == "open" or not origin:
            return "*"
        if allowed:
            return origin
        if preflight:
            return "*" if self.mode == "tolerant" else "null"
        return origin

    def headers(self, origin: Optional[str], allowed: bool, preflight: bool = False) -> Dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin_value(origin, allowed, preflight),
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Vary": "Origin",
        }
