"""Shared parsing utilities for request handling."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any
from typing import Mapping
from typing import Optional

from app.exceptions import ValidationError


def get_http_method(event: Mapping[str, Any]) -> str:
    """Return the upper-cased HTTP method of a platform event.

    Reads ``httpMethod`` (REST API / Netlify events) and falls back to
    ``requestContext.http.method`` (HTTP API v2 events).
    """
    method = event.get("httpMethod")
    if not method:
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method")
    return str(method or "").upper()


def collect_query_params(event: Mapping[str, Any]) -> dict[str, list[str]]:
    """Collect query parameters from API Gateway events.

    Handles both single and multi-value query string parameters.

    Args:
        event: The API Gateway event dictionary.

    Returns:
        Dictionary mapping parameter names to lists of values.
    """
    params: dict[str, list[str]] = {}
    single = event.get("queryStringParameters") or {}
    multi = event.get("multiValueQueryStringParameters") or {}

    for key, value in single.items():
        if value is None:
            continue
        params.setdefault(key, []).append(value)

    for key, values in multi.items():
        if not values:
            continue
        for value in values:
            if value is None or value in params.get(key, []):
                continue
            params.setdefault(key, []).append(value)

    return params


def first_param(params: dict[str, list[str]], key: str) -> Optional[str]:
    """Return the first non-empty query parameter value for a key.

    Args:
        params: Dictionary of parameter name to list of values.
        key: The parameter name to look up.

    Returns:
        The first value for the key, or None if absent or empty.
    """
    values = params.get(key, [])
    value = values[0] if values else None
    return value or None


def parse_non_negative_int(value: Optional[str]) -> Optional[int]:
    """Parse a non-negative integer from a query string value.

    Returns:
        The parsed integer, or None if the value is missing or is not
        a plain non-negative integer.
    """
    if value is None:
        return None
    stripped = value.strip()
    if not (stripped.isascii() and stripped.isdigit()):
        return None
    return int(stripped)


def decode_body(event: Mapping[str, Any]) -> str:
    """Return the request body as text.

    Bodies flagged with ``isBase64Encoded`` are decoded first.

    Raises:
        ValidationError: If a base64 body cannot be decoded.
    """
    body = event.get("body") or ""
    if event.get("isBase64Encoded") and body:
        try:
            return base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValidationError("Invalid JSON body") from exc
    return body


def parse_json_body(event: Mapping[str, Any]) -> dict[str, Any]:
    """Parse the request body as a JSON object.

    Raises:
        ValidationError: If the body is empty, is not valid JSON, or is a
            JSON value other than an object.
    """
    text = decode_body(event)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError("Invalid JSON body") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON body")
    return payload
