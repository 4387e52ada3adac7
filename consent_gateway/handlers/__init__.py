"""
Handlers package for request validation and the gateway pipeline.
"""
from .action_parser import action_from_path, parse_consent_action
from .gateway_handler import GatewayHandler, parse_json_body, decode_raw_body

__all__ = [
    'action_from_path',
    'parse_consent_action',
    'GatewayHandler',
    'parse_json_body',
    'decode_raw_body'
]
