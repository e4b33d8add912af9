"""Outbound HTTP for the proxy functions.

A thin wrapper over ``urllib.request``. Upstream HTTP errors (4xx/5xx)
are returned as ordinary responses carrying their status code; only
transport failures (DNS, TLS, timeouts) raise.
"""

from __future__ import annotations

import urllib.error
import urllib.request
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Mapping
from typing import Optional

from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UpstreamResponse:
    """Status, headers and raw body of an upstream reply."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type") or None

    @property
    def is_json(self) -> bool:
        return "application/json" in (self.content_type or "").lower()

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def _lower_headers(headers: Any) -> dict[str, str]:
    if not headers:
        return {}
    return {str(key).lower(): str(value) for key, value in headers.items()}


def send_request(
    method: str,
    url: str,
    headers: Optional[Mapping[str, str]] = None,
    body: Optional[bytes] = None,
    timeout: Optional[float] = None,
) -> UpstreamResponse:
    """Perform one outbound HTTP request.

    Args:
        method: HTTP method.
        url: Full upstream URL.
        headers: Request headers. They may carry credentials and are
            never logged.
        body: Optional encoded request body.
        timeout: Timeout in seconds, or None for the library default.

    Returns:
        The upstream response, whatever its status code.

    Raises:
        urllib.error.URLError: On transport failure.
        TimeoutError: If the upstream does not answer in time.
    """
    request = urllib.request.Request(
        url,
        data=body,
        headers=dict(headers or {}),
        method=method,
    )
    kwargs: dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        with urllib.request.urlopen(request, **kwargs) as resp:
            return UpstreamResponse(
                status=resp.status,
                body=resp.read(),
                headers=_lower_headers(resp.headers),
            )
    except urllib.error.HTTPError as exc:
        logger.info(f"Upstream answered {method} with HTTP {exc.code}")
        return UpstreamResponse(
            status=exc.code,
            body=exc.read() or b"",
            headers=_lower_headers(exc.headers),
        )
