"""
Utilities package for common helper functions.
"""
from .errors import (
    GatewayError,
    BadRequest,
    OriginRejected,
    MethodNotAllowed,
    ConfigurationMissing,
    UpstreamAuthError,
    UpstreamOperationError,
    UpstreamShapeError
)
from .cors_utils import CorsPolicy, origin_matches
from .response_utils import build_response, empty_response, to_lambda_response
from .time_utils import now_epoch, generate_cpid

__all__ = [
    'GatewayError',
    'BadRequest',
    'OriginRejected',
    'MethodNotAllowed',
    'ConfigurationMissing',
    'UpstreamAuthError',
    'UpstreamOperationError',
    'UpstreamShapeError',
    'CorsPolicy',
    'origin_matches',
    'build_response',
    'empty_response',
    'to_lambda_response',
    'now_epoch',
    'generate_cpid'
]
