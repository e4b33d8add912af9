"""Server-held upstream credentials and per-invocation settings.

Everything here is read from the environment on every call. Missing
values raise ConfigurationError, which the handlers turn into a generic
500 without naming the setting.

Environment:
    MAPILLARY_CLIENT_TOKEN     Mapillary client token
    MAPILLARY_SECRET_ARN       Secrets Manager fallback, ``{"client_token": ...}``
    STRAVA_CLIENT_ID           Strava OAuth client id
    STRAVA_CLIENT_SECRET       Strava OAuth client secret
    STRAVA_SECRET_ARN          Secrets Manager fallback,
                               ``{"client_id": ..., "client_secret": ...}``
    MAPILLARY_TIMEOUT_SECONDS  Imagery request timeout (default 45)
    STRAVA_TIMEOUT_SECONDS     Token exchange timeout (default: none)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any
from typing import Optional

from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError

from app.exceptions import ConfigurationError
from app.services.secrets import get_secret_json
from app.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAPILLARY_TIMEOUT_SECONDS = 45.0


@dataclass(frozen=True)
class MapillaryCredential:
    """Client token used to authenticate against the Mapillary API."""

    client_token: str

    def __repr__(self) -> str:
        return "MapillaryCredential(client_token=***)"

    @property
    def authorization_header(self) -> str:
        return f"OAuth {self.client_token}"


@dataclass(frozen=True)
class StravaCredentials:
    """OAuth client credentials registered with Strava."""

    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        return f"StravaCredentials(client_id={self.client_id!r}, client_secret=***)"


def _load_secret(arn_var: str) -> dict[str, Any]:
    secret_arn = os.getenv(arn_var, "").strip()
    if not secret_arn:
        return {}
    try:
        return get_secret_json(secret_arn)
    except (BotoCoreError, ClientError, RuntimeError, ValueError) as exc:
        logger.error(
            f"Unable to read secret referenced by {arn_var}: {type(exc).__name__}"
        )
        raise ConfigurationError(arn_var) from exc


def load_mapillary_credential() -> MapillaryCredential:
    """Return the Mapillary client token for this invocation.

    Raises:
        ConfigurationError: If no token is configured.
    """
    token = os.getenv("MAPILLARY_CLIENT_TOKEN", "").strip()
    if not token:
        token = str(_load_secret("MAPILLARY_SECRET_ARN").get("client_token") or "")
    if not token:
        logger.error("Missing MAPILLARY_CLIENT_TOKEN environment variable")
        raise ConfigurationError("MAPILLARY_CLIENT_TOKEN")
    return MapillaryCredential(client_token=token)


def load_strava_credentials() -> StravaCredentials:
    """Return the Strava OAuth client credentials for this invocation.

    Raises:
        ConfigurationError: If the client id or secret is not configured.
    """
    client_id = os.getenv("STRAVA_CLIENT_ID", "").strip()
    client_secret = os.getenv("STRAVA_CLIENT_SECRET", "").strip()
    if not client_id or not client_secret:
        secret = _load_secret("STRAVA_SECRET_ARN")
        client_id = client_id or str(secret.get("client_id") or "")
        client_secret = client_secret or str(secret.get("client_secret") or "")

    missing = [
        name
        for name, value in (
            ("STRAVA_CLIENT_ID", client_id),
            ("STRAVA_CLIENT_SECRET", client_secret),
        )
        if not value
    ]
    if missing:
        logger.error(f"Missing environment variables: {', '.join(missing)}")
        raise ConfigurationError(missing[0])
    return StravaCredentials(client_id=client_id, client_secret=client_secret)


def load_timeout(var_name: str, default: Optional[float] = None) -> Optional[float]:
    """Read an upstream timeout in seconds.

    Raises:
        ConfigurationError: If the value is not a positive number.
    """
    raw = os.getenv(var_name, "").strip()
    if not raw:
        return default
    try:
        timeout = float(raw)
    except ValueError as exc:
        logger.error(f"Invalid {var_name}: must be a number of seconds")
        raise ConfigurationError(var_name) from exc
    if timeout <= 0:
        logger.error(f"Invalid {var_name}: must be positive")
        raise ConfigurationError(var_name)
    return timeout
