"""
Request, action and token types passed between handler and services.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass
class IncomingRequest:
    method: str
    origin: Optional[str] = None
    raw_body: Optional[str] = None
    path: Optional[str] = None


@dataclass
class OutgoingResponse:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None


# ========= CONSENT ACTIONS =========
@dataclass(frozen=True)
class RegisterAction:
    name: str
    email: str
    phone: str
    consent_profile_id: str
    consent_profile_version: int
    public_url_expiry: int
    session_expiry: int

    kind = "register"


@dataclass(frozen=True)
class UpdateAction:
    principal_id: str
    preference_url_type: str
    public_url_expiry: int
    session_expiry: int

    kind = "update"


@dataclass(frozen=True)
class RawTokenAction:
    kind = "token"


ConsentAction = Union[RegisterAction, UpdateAction, RawTokenAction]


@dataclass(frozen=True)
class OAuthToken:
    access_token: str = field(repr=False)
    expires_at: float
    payload: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def is_fresh(self, now: float, margin: float = 0) -> bool:
        return now < self.expires_at - margin


@dataclass(frozen=True)
class UpstreamResult:
    """Status and decoded body of one downstream call (JSON or raw text)."""
    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
