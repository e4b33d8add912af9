"""Lambda handler for the Mapillary imagery proxy.

Browser clients call this function instead of Mapillary so that the
Mapillary client token stays on the server.

Query parameters:
    endpoint=images&bbox=<minLon,minLat,maxLon,maxLat>
    endpoint=tiles&zoom=<z>&x=<x>&y=<y>

JSON replies from Mapillary are passed through as text. Anything else
(vector tiles) is returned base64-encoded with ``isBase64Encoded`` set
so the platform restores the raw bytes.
"""

from __future__ import annotations

import time
from typing import Any
from typing import Mapping
from typing import Optional

from app.exceptions import AppError
from app.exceptions import MethodNotAllowedError
from app.exceptions import UpstreamError
from app.exceptions import ValidationError
from app.services.credentials import DEFAULT_MAPILLARY_TIMEOUT_SECONDS
from app.services.credentials import MapillaryCredential
from app.services.credentials import load_mapillary_credential
from app.services.credentials import load_timeout
from app.services.http_client import UpstreamResponse
from app.services.mapillary import ENDPOINT_IMAGES
from app.services.mapillary import ENDPOINT_TILES
from app.services.mapillary import ImageryQuery
from app.services.mapillary import fetch_imagery
from app.utils.logging import clear_request_context
from app.utils.logging import configure_logging
from app.utils.logging import get_logger
from app.utils.logging import log_lambda_event
from app.utils.logging import log_response
from app.utils.logging import redact
from app.utils.logging import set_request_context
from app.utils.parsers import collect_query_params
from app.utils.parsers import first_param
from app.utils.parsers import get_http_method
from app.utils.parsers import parse_non_negative_int
from app.utils.responses import app_error_response
from app.utils.responses import binary_response
from app.utils.responses import json_response
from app.utils.responses import preflight_response
from app.utils.responses import text_response

# Configure logging on module load
configure_logging()
logger = get_logger(__name__)

ALLOWED_METHODS = ("GET",)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Handle a platform request for Mapillary imagery."""

    set_request_context(event, context)
    log_lambda_event(logger, event)
    start_time = time.perf_counter()
    try:
        response = handle_request(event)
        log_response(
            logger,
            response["statusCode"],
            (time.perf_counter() - start_time) * 1000,
        )
        return response
    finally:
        clear_request_context()


def handle_request(event: Mapping[str, Any]) -> dict[str, Any]:
    """Translate one request into a Mapillary call and back."""

    method = get_http_method(event)
    if method == "OPTIONS":
        return preflight_response(ALLOWED_METHODS)

    credential: Optional[MapillaryCredential] = None
    try:
        if method not in ALLOWED_METHODS:
            raise MethodNotAllowedError(method, ALLOWED_METHODS)

        credential = load_mapillary_credential()
        timeout = load_timeout(
            "MAPILLARY_TIMEOUT_SECONDS", DEFAULT_MAPILLARY_TIMEOUT_SECONDS
        )
        query = parse_imagery_query(event)

        logger.info(f"Proxying request to Mapillary: {query.endpoint}")
        upstream = fetch_imagery(query, credential, timeout)
        return build_proxy_response(upstream, credential)
    except AppError as exc:
        logger.warning(f"Request rejected ({exc.status_code}): {exc.message}")
        return app_error_response(exc, ALLOWED_METHODS)
    except Exception as exc:
        secrets = [credential.client_token] if credential else []
        message = redact(str(exc), secrets)
        logger.error(f"Function error: {type(exc).__name__}: {message}")
        return json_response(
            500,
            {"error": "Internal server error", "message": message},
            ALLOWED_METHODS,
        )


def parse_imagery_query(event: Mapping[str, Any]) -> ImageryQuery:
    """Parse query parameters into an imagery query.

    Raises:
        ValidationError: If neither a bbox search nor a complete tile
            coordinate was given.
    """

    params = collect_query_params(event)
    endpoint = first_param(params, "endpoint")

    if endpoint == ENDPOINT_IMAGES:
        bbox = first_param(params, "bbox")
        if bbox:
            return ImageryQuery(endpoint=endpoint, bbox=bbox)
    elif endpoint == ENDPOINT_TILES:
        zoom = parse_non_negative_int(first_param(params, "zoom"))
        x = parse_non_negative_int(first_param(params, "x"))
        y = parse_non_negative_int(first_param(params, "y"))
        if zoom is not None and x is not None and y is not None:
            return ImageryQuery(endpoint=endpoint, zoom=zoom, x=x, y=y)

    raise ValidationError("Invalid endpoint parameters")


def build_proxy_response(
    upstream: UpstreamResponse,
    credential: MapillaryCredential,
) -> dict[str, Any]:
    """Turn the Mapillary reply into the platform response.

    Raises:
        UpstreamError: If Mapillary answered a JSON error.
    """

    if not upstream.is_json:
        return binary_response(
            upstream.status,
            upstream.body,
            ALLOWED_METHODS,
            content_type=upstream.content_type,
        )

    text = upstream.text()
    if not upstream.ok:
        details = redact(text, [credential.client_token])
        logger.error(f"Mapillary API error (HTTP {upstream.status}): {details}")
        raise UpstreamError(
            "Mapillary API request failed",
            upstream.status,
            details=details,
            include_status=True,
        )

    return text_response(upstream.status, text, ALLOWED_METHODS)
