"""Pydantic schemas for the Strava token exchange."""

from __future__ import annotations

from typing import Any
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict

GRANT_AUTHORIZATION_CODE = "authorization_code"
GRANT_REFRESH_TOKEN = "refresh_token"

# Field each supported grant type requires alongside grant_type.
GRANT_REQUIRED_FIELDS = {
    GRANT_AUTHORIZATION_CODE: "code",
    GRANT_REFRESH_TOKEN: "refresh_token",
}


class TokenExchangeRequest(BaseModel):
    """Grant request sent by the client."""

    model_config = ConfigDict(extra="ignore")

    grant_type: Optional[str] = None
    code: Optional[str] = None
    refresh_token: Optional[str] = None

    def missing_field(self) -> Optional[str]:
        """Return the first required field that is absent, if any.

        An unsupported grant type is reported as a missing grant_type.
        """
        required = GRANT_REQUIRED_FIELDS.get(self.grant_type or "")
        if required is None:
            return "grant_type"
        if not getattr(self, required):
            return required
        return None


class TokenExchangeResponse(BaseModel):
    """Token fields returned to the client.

    Anything else Strava sends back is dropped, so the response can
    only ever contain these keys.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    expires_in: Optional[int] = None
    athlete: Optional[dict[str, Any]] = None
