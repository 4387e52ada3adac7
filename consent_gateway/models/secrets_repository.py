"""
Client credential lookup in AWS Secrets Manager.
"""
import json
from typing import Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from logging_config import create_logger

logger = create_logger("models.secrets_repository")

CLIENT_ID_KEYS = ("client_id", "clientId", "LEEGALITY_CLIENT_ID")
CLIENT_SECRET_KEYS = ("client_secret", "clientSecret", "LEEGALITY_CLIENT_SECRET")


def _first_present(secret: dict, keys) -> Optional[str]:
    for key in keys:
        value = secret.get(key)
        if value:
            return str(value)
    return None


def load_client_credentials(secret_id: str, client=None) -> Tuple[Optional[str], Optional[str]]:
    """
    Read the OAuth client id and secret from a JSON Secrets Manager secret.

    Returns (None, None) when the secret cannot be read or parsed.
    """
    client = client or boto3.client("secretsmanager")
    try:
        response = client.get_secret_value(SecretId=secret_id)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to read secret {secret_id}: {e}")
        return None, None

    try:
        secret = json.loads(response.get("SecretString") or "{}")
    except json.JSONDecodeError:
        logger.error(f"Secret {secret_id} is not a JSON object")
        return None, None
    if not isinstance(secret, dict):
        logger.error(f"Secret {secret_id} is not a JSON object")
        return None, None

    return _first_present(secret, CLIENT_ID_KEYS), _first_present(secret, CLIENT_SECRET_KEYS)
