"""Shared response utilities for Lambda handlers.

Every response built here carries permissive CORS headers so that
browser clients can read both successful and error bodies.
"""

from __future__ import annotations

import base64
import json
from dataclasses import asdict
from typing import Any
from typing import Iterable
from typing import Optional

from pydantic import BaseModel

from app.exceptions import AppError
from app.exceptions import MethodNotAllowedError

DEFAULT_BINARY_CONTENT_TYPE = "application/octet-stream"


def get_cors_headers(allowed_methods: Iterable[str]) -> dict[str, str]:
    """Get CORS headers for the response.

    Any origin may call the proxies; they authenticate upstream with
    server-held credentials, not with anything the caller sends.

    Args:
        allowed_methods: HTTP methods the handler serves. OPTIONS is
            always appended.

    Returns:
        Dictionary of CORS headers to include in the response.
    """
    methods = [method for method in allowed_methods if method != "OPTIONS"]
    methods.append("OPTIONS")
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": ", ".join(methods),
    }


def _base_headers(
    allowed_methods: Iterable[str],
    content_type: str = "application/json",
) -> dict[str, str]:
    headers = get_cors_headers(allowed_methods)
    headers["Content-Type"] = content_type
    return headers


def json_response(
    status_code: int,
    body: Any,
    allowed_methods: Iterable[str],
    headers: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Create a JSON API Gateway response.

    Args:
        status_code: HTTP status code.
        body: Response body (dict, Pydantic model, or dataclass).
        allowed_methods: Methods advertised in the CORS headers.
        headers: Optional additional headers to include.

    Returns:
        API Gateway response dictionary.
    """
    response_headers = _base_headers(allowed_methods)
    if headers:
        response_headers.update(headers)

    return {
        "statusCode": status_code,
        "headers": response_headers,
        "body": json.dumps(_serialize_body(body), default=str),
    }


def text_response(
    status_code: int,
    body: str,
    allowed_methods: Iterable[str],
) -> dict[str, Any]:
    """Create a response whose body is already-encoded JSON text.

    The text is passed through unchanged.
    """
    return {
        "statusCode": status_code,
        "headers": _base_headers(allowed_methods),
        "body": body,
    }


def binary_response(
    status_code: int,
    body: bytes,
    allowed_methods: Iterable[str],
    content_type: Optional[str] = None,
) -> dict[str, Any]:
    """Create a base64-encoded binary response.

    ``isBase64Encoded`` tells the platform to decode the body back to
    raw bytes before it is sent to the client.
    """
    return {
        "statusCode": status_code,
        "headers": _base_headers(
            allowed_methods,
            content_type or DEFAULT_BINARY_CONTENT_TYPE,
        ),
        "body": base64.b64encode(body).decode("ascii"),
        "isBase64Encoded": True,
    }


def preflight_response(allowed_methods: Iterable[str]) -> dict[str, Any]:
    """Answer a CORS preflight request with an empty 200."""
    return {
        "statusCode": 200,
        "headers": _base_headers(allowed_methods),
        "body": "",
    }


def error_response(
    status_code: int,
    message: str,
    allowed_methods: Iterable[str],
    detail: Optional[str] = None,
) -> dict[str, Any]:
    """Create an error response.

    Args:
        status_code: HTTP status code.
        message: Error message.
        allowed_methods: Methods advertised in the CORS headers.
        detail: Optional additional detail.

    Returns:
        API Gateway response dictionary.
    """
    body: dict[str, Any] = {"error": message}
    if detail:
        body["detail"] = detail

    return json_response(status_code, body, allowed_methods)


def app_error_response(
    exc: AppError,
    allowed_methods: Iterable[str],
) -> dict[str, Any]:
    """Map an application exception to its response."""
    headers = None
    if isinstance(exc, MethodNotAllowedError):
        headers = {"Allow": ", ".join([*exc.allowed_methods, "OPTIONS"])}
    return json_response(exc.status_code, exc.to_dict(), allowed_methods, headers)


def _serialize_body(body: Any) -> Any:
    """Serialize response body to JSON-compatible format."""
    if isinstance(body, BaseModel):
        return body.model_dump(exclude_unset=True)

    if hasattr(body, "__dataclass_fields__"):
        return asdict(body)

    return body
