"""Strava OAuth token exchange."""

from __future__ import annotations

import json
from typing import Any
from typing import Optional

from app.api.schemas import GRANT_AUTHORIZATION_CODE
from app.api.schemas import TokenExchangeRequest
from app.api.schemas import TokenExchangeResponse
from app.services.credentials import StravaCredentials
from app.services.http_client import UpstreamResponse
from app.services.http_client import send_request
from app.utils.logging import redact

TOKEN_URL = "https://www.strava.com/oauth/token"
DEFAULT_ERROR_MESSAGE = "Strava authentication failed"


def build_token_payload(
    request: TokenExchangeRequest,
    credentials: StravaCredentials,
) -> dict[str, Any]:
    """Build the token endpoint body for the requested grant."""
    payload: dict[str, Any] = {
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
        "grant_type": request.grant_type,
    }
    if request.grant_type == GRANT_AUTHORIZATION_CODE:
        payload["code"] = request.code
    else:
        payload["refresh_token"] = request.refresh_token
    return payload


def exchange_token(
    request: TokenExchangeRequest,
    credentials: StravaCredentials,
    timeout: Optional[float] = None,
) -> UpstreamResponse:
    """POST the grant to the Strava token endpoint."""
    body = json.dumps(build_token_payload(request, credentials)).encode("utf-8")
    return send_request(
        "POST",
        TOKEN_URL,
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        body=body,
        timeout=timeout,
    )


def upstream_error_message(data: Any) -> str:
    """Pick the message Strava attached to an error body, if any."""
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return DEFAULT_ERROR_MESSAGE


def scrub_error_details(data: Any, client_secret: str) -> Any:
    """Drop ``client_secret`` keys and mask the secret value in an error body."""
    if isinstance(data, dict):
        return {
            key: scrub_error_details(value, client_secret)
            for key, value in data.items()
            if key != "client_secret"
        }
    if isinstance(data, list):
        return [scrub_error_details(item, client_secret) for item in data]
    if isinstance(data, str):
        return redact(data, [client_secret])
    return data


def extract_token_fields(data: Any) -> TokenExchangeResponse:
    """Keep only the non-secret token fields of a Strava reply.

    Fields Strava did not send stay unset and are left out of the
    serialized response.
    """
    if not isinstance(data, dict):
        raise ValueError("Strava token response is not a JSON object")
    return TokenExchangeResponse.model_validate(data)
