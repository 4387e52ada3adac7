"""
Models package for request/response types and secret access.
"""
from .gateway_models import (
    IncomingRequest,
    OutgoingResponse,
    RegisterAction,
    UpdateAction,
    RawTokenAction,
    OAuthToken,
    UpstreamResult,
    ConsentAction
)
from .secrets_repository import load_client_credentials

__all__ = [
    'IncomingRequest',
    'OutgoingResponse',
    'RegisterAction',
    'UpdateAction',
    'RawTokenAction',
    'OAuthToken',
    'UpstreamResult',
    'ConsentAction',
    'load_client_credentials'
]
