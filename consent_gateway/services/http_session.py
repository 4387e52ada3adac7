"""
Shared outbound HTTP session and response decoding.
"""
from typing import Any

import requests

USER_AGENT = "consent-gateway/1.0"


def create_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
    return session


def decode_body(response: requests.Response) -> Any:
    """Parsed JSON body, or the raw text when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text
