"""Lambda handler for the Strava OAuth token exchange.

The client secret lives only on the server. Clients POST their grant
and receive the resulting tokens, never the secret.

Request body:
    {"grant_type": "authorization_code", "code": "..."}
    {"grant_type": "refresh_token", "refresh_token": "..."}

Response body:
    {"access_token", "refresh_token", "expires_at", "expires_in", "athlete"}
"""

from __future__ import annotations

import json
import time
from typing import Any
from typing import Mapping
from typing import Optional

from pydantic import ValidationError as SchemaValidationError

from app.api.schemas import TokenExchangeRequest
from app.exceptions import AppError
from app.exceptions import MethodNotAllowedError
from app.exceptions import UpstreamError
from app.exceptions import ValidationError
from app.services.credentials import StravaCredentials
from app.services.credentials import load_strava_credentials
from app.services.credentials import load_timeout
from app.services.strava import exchange_token
from app.services.strava import extract_token_fields
from app.services.strava import scrub_error_details
from app.services.strava import upstream_error_message
from app.utils.logging import clear_request_context
from app.utils.logging import configure_logging
from app.utils.logging import get_logger
from app.utils.logging import log_lambda_event
from app.utils.logging import log_response
from app.utils.logging import redact
from app.utils.logging import set_request_context
from app.utils.parsers import get_http_method
from app.utils.parsers import parse_json_body
from app.utils.responses import app_error_response
from app.utils.responses import json_response
from app.utils.responses import preflight_response

# Configure logging on module load
configure_logging()
logger = get_logger(__name__)

ALLOWED_METHODS = ("POST",)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Handle a platform request for a Strava token exchange."""

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
    """Exchange the client's grant with Strava."""

    method = get_http_method(event)
    if method == "OPTIONS":
        return preflight_response(ALLOWED_METHODS)

    credentials: Optional[StravaCredentials] = None
    try:
        if method not in ALLOWED_METHODS:
            raise MethodNotAllowedError(method, ALLOWED_METHODS)

        token_request = parse_token_request(event)
        credentials = load_strava_credentials()
        timeout = load_timeout("STRAVA_TIMEOUT_SECONDS")

        logger.info(f"Exchanging Strava grant: {token_request.grant_type}")
        upstream = exchange_token(token_request, credentials, timeout)
        data = json.loads(upstream.text())

        if not upstream.ok:
            details = scrub_error_details(data, credentials.client_secret)
            logger.error(
                f"Strava API error (HTTP {upstream.status})",
                extra={"details": details},
            )
            raise UpstreamError(
                upstream_error_message(details),
                upstream.status,
                details=details,
            )

        return json_response(200, extract_token_fields(data), ALLOWED_METHODS)
    except AppError as exc:
        logger.warning(f"Request rejected ({exc.status_code}): {exc.message}")
        return app_error_response(exc, ALLOWED_METHODS)
    except Exception as exc:
        secrets = [credentials.client_secret] if credentials else []
        message = redact(str(exc), secrets)
        logger.error(f"Function error: {type(exc).__name__}: {message}")
        return json_response(
            500,
            {"error": "Internal server error", "message": message},
            ALLOWED_METHODS,
        )


def parse_token_request(event: Mapping[str, Any]) -> TokenExchangeRequest:
    """Parse and validate the grant request body.

    Raises:
        ValidationError: If the body is not a JSON object of the expected
            shape, or the grant is missing its required field.
    """

    payload = parse_json_body(event)
    try:
        token_request = TokenExchangeRequest.model_validate(payload)
    except SchemaValidationError as exc:
        raise ValidationError("Invalid JSON body") from exc

    missing = token_request.missing_field()
    if missing:
        raise ValidationError("Missing required parameters", field=missing)
    return token_request
