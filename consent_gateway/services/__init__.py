"""
Services package for outbound calls and token caching.
"""
from .http_session import create_session, decode_body
from .oauth_client import OAuthClient, basic_auth_header, TOKEN_ERROR
from .consent_client import ConsentApiClient, REGISTER_ERROR, UPDATE_ERROR
from .token_cache import TokenCache

__all__ = [
    'create_session',
    'decode_body',
    'OAuthClient',
    'basic_auth_header',
    'TOKEN_ERROR',
    'ConsentApiClient',
    'REGISTER_ERROR',
    'UPDATE_ERROR',
    'TokenCache'
]
