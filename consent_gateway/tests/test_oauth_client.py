import base64

import pytest
import requests

from conftest import FakeResponse, FakeSession, TOKEN_SUFFIX, REGISTER_SUFFIX
from services import ConsentApiClient, OAuthClient, basic_auth_header
from utils import UpstreamAuthError, UpstreamOperationError


def make_client(outcome):
    session = FakeSession({TOKEN_SUFFIX: outcome})
    client = OAuthClient(
        base_url="https://consent.test/",
        client_id="cid",
        client_secret="secret",
        scope="auth consent-runner",
        timeout=10,
        session=session,
    )
    return client, session


def test_basic_auth_header():
    expected = base64.b64encode(b"cid:secret").decode()
    assert basic_auth_header("cid", "secret") == f"Basic {expected}"


def test_client_credentials_request_shape():
    client, session = make_client(FakeResponse(200, {"access_token": "T", "expires_in": 3600}))

    payload = client.fetch_token()

    assert payload["access_token"] == "T"
    url, kwargs = session.calls[0]
    assert url == "https://consent.test/auth/oauth2/token"
    assert kwargs["headers"]["Authorization"] == basic_auth_header("cid", "secret")
    assert kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
    assert kwargs["data"] == {"grant_type": "client_credentials", "scope": "auth consent-runner"}
    assert kwargs["timeout"] == 10


def test_non_success_status_raises_with_details():
    client, _ = make_client(FakeResponse(400, {"error": "invalid_scope"}))

    with pytest.raises(UpstreamAuthError) as exc:
        client.fetch_token()

    assert exc.value.status_code == 500
    assert exc.value.to_body() == {"error": "Failed to obtain access token", "details": {"error": "invalid_scope"}}


def test_missing_access_token_raises():
    client, _ = make_client(FakeResponse(200, {"token_type": "Bearer"}))

    with pytest.raises(UpstreamAuthError) as exc:
        client.fetch_token()

    assert exc.value.details == {"token_type": "Bearer"}


def test_non_json_body_raises_with_text():
    client, _ = make_client(FakeResponse(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(UpstreamAuthError) as exc:
        client.fetch_token()

    assert exc.value.details == "<html>Bad Gateway</html>"


def test_unreachable_endpoint_raises():
    client, _ = make_client(requests.ConnectionError("name resolution failed"))

    with pytest.raises(UpstreamAuthError) as exc:
        client.fetch_token()

    assert "name resolution failed" in exc.value.details


def test_consent_client_returns_upstream_result():
    session = FakeSession({REGISTER_SUFFIX: FakeResponse(409, {"message": "duplicate"})})
    client = ConsentApiClient("https://consent.test", timeout=5, session=session)

    result = client.register("T", {"consentProfileId": "p"})

    assert not result.ok
    assert result.status_code == 409
    assert result.body == {"message": "duplicate"}
    assert session.calls[0][1]["json"] == {"consentProfileId": "p"}


def test_consent_client_timeout():
    session = FakeSession({REGISTER_SUFFIX: requests.Timeout()})
    client = ConsentApiClient("https://consent.test", timeout=5, session=session)

    with pytest.raises(UpstreamOperationError) as exc:
        client.register("T", {})

    assert exc.value.status_code == 504
