import dataclasses

import pytest

from config import Settings
from handlers import GatewayHandler
from models import IncomingRequest

CLIENT_SECRET = "s3cr3t-value"
ALLOWED_ORIGIN = "https://app.example.com"


class FakeResponse:
    """Just enough of requests.Response for the gateway clients."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Routes POSTs by URL suffix to canned responses (or raises canned exceptions)."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.closed = False

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        for suffix, outcome in self.routes.items():
            if url.endswith(suffix):
                if isinstance(outcome, list):
                    outcome = outcome.pop(0)
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"unexpected POST {url}")

    def close(self):
        self.closed = True

    def urls(self):
        return [url for url, _ in self.calls]


TOKEN_SUFFIX = "/auth/oauth2/token"
REGISTER_SUFFIX = "/consents/client/register"
UPDATE_SUFFIX = "/consents/client/update"


def token_ok(access_token="T", expires_in=3600):
    return FakeResponse(200, {"access_token": access_token, "expires_in": expires_in, "token_type": "Bearer"})


@pytest.fixture
def settings():
    return Settings(
        client_id="cid",
        client_secret=CLIENT_SECRET,
        base_url="https://consent.test",
        consent_profile_id="profile-1",
        consent_profile_version=1,
        allowed_origins=(ALLOWED_ORIGIN, "https://*.figma.site"),
    )


@pytest.fixture
def make_settings(settings):
    def _make(**overrides):
        return dataclasses.replace(settings, **overrides)
    return _make


@pytest.fixture
def make_gateway(settings):
    def _make(routes=None, gateway_settings=None):
        session = FakeSession(routes)
        return GatewayHandler(gateway_settings or settings, session=session), session
    return _make


def post(body=None, origin=ALLOWED_ORIGIN, path="/gateway"):
    return IncomingRequest(method="POST", origin=origin, raw_body=body, path=path)
