"""Lambda entrypoint for the Strava OAuth token exchange."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from app.api.strava_token_exchange import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the token exchange handler."""

    return _handler(event, context)
