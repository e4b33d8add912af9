"""Utility modules for the proxy functions."""

from app.utils.parsers import (
    collect_query_params,
    first_param,
    get_http_method,
    parse_json_body,
    parse_non_negative_int,
)
from app.utils.responses import (
    binary_response,
    error_response,
    json_response,
    preflight_response,
    text_response,
)
from app.utils.logging import (
    configure_logging,
    get_logger,
    redact,
    set_request_context,
    clear_request_context,
)

__all__ = [
    "binary_response",
    "clear_request_context",
    "collect_query_params",
    "configure_logging",
    "error_response",
    "first_param",
    "get_http_method",
    "get_logger",
    "json_response",
    "parse_json_body",
    "parse_non_negative_int",
    "preflight_response",
    "redact",
    "set_request_context",
    "text_response",
]
