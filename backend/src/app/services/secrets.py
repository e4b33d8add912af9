"""Secrets Manager helpers.

Secret values are fetched on every call; the proxies read their
credentials fresh per invocation. Only the boto3 client is reused,
and it holds no request data.
"""

from __future__ import annotations

import base64
import json
from typing import Any
from typing import Optional

import boto3

_CLIENT_CACHE: dict[Optional[str], Any] = {}


def get_secretsmanager_client(region_name: Optional[str] = None) -> Any:
    """Return a cached Secrets Manager client for the region."""
    client = _CLIENT_CACHE.get(region_name)
    if client is None:
        client = boto3.client(  # type: ignore[call-overload]
            "secretsmanager",
            region_name=region_name,
        )
        _CLIENT_CACHE[region_name] = client
    return client


def clear_client_cache() -> None:
    """Clear cached boto3 clients (useful in tests)."""
    _CLIENT_CACHE.clear()


def region_from_arn(secret_arn: str) -> Optional[str]:
    """Return the region of a Secrets Manager ARN, if it is one.

    ``arn:aws:secretsmanager:<region>:<account>:secret:<name>``. Plain
    secret names resolve to the function's own region.
    """
    parts = secret_arn.split(":")
    if len(parts) > 3 and parts[0] == "arn" and parts[2] == "secretsmanager":
        return parts[3] or None
    return None


def get_secret_json(secret_arn: str) -> dict[str, Any]:
    """Fetch a secret from AWS Secrets Manager and parse JSON."""
    client = get_secretsmanager_client(region_from_arn(secret_arn))
    response = client.get_secret_value(SecretId=secret_arn)
    secret_str = response.get("SecretString")
    if not secret_str and response.get("SecretBinary"):
        secret_str = base64.b64decode(response["SecretBinary"]).decode("utf-8")
    if not secret_str:
        raise RuntimeError("Secret value is empty")

    secret_payload = json.loads(secret_str)
    if not isinstance(secret_payload, dict):
        raise RuntimeError("Secret value is not a JSON object")
    return secret_payload
