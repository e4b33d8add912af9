"""Lambda entrypoint for the Mapillary imagery proxy."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from app.api.mapillary_proxy import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the imagery proxy handler."""

    return _handler(event, context)
