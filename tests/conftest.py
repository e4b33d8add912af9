"""Pytest configuration and fixtures for backend tests.

This module provides shared fixtures for testing the proxy functions,
including API Gateway events, environment isolation, and a fake
upstream that stands in for ``urllib.request.urlopen``.
"""

from __future__ import annotations

import io
import sys
import urllib.error
from email.message import Message
from pathlib import Path
from typing import Any
from typing import Callable
from typing import Optional
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

# Add backend source to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))


PROXY_ENV_VARS = (
    'MAPILLARY_CLIENT_TOKEN',
    'MAPILLARY_SECRET_ARN',
    'MAPILLARY_TIMEOUT_SECONDS',
    'STRAVA_CLIENT_ID',
    'STRAVA_CLIENT_SECRET',
    'STRAVA_SECRET_ARN',
    'STRAVA_TIMEOUT_SECONDS',
)

MAPILLARY_TOKEN = 'MLY|test-client-token'
STRAVA_CLIENT_ID = '12345'
STRAVA_CLIENT_SECRET = 'strava-client-secret-value'


# --- Environment Fixtures ---


@pytest.fixture(autouse=True)
def clean_proxy_env(monkeypatch):
    """Make sure no real credentials leak into a test."""
    for var in PROXY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def mapillary_env(monkeypatch) -> str:
    """Configure the Mapillary client token."""
    monkeypatch.setenv('MAPILLARY_CLIENT_TOKEN', MAPILLARY_TOKEN)
    return MAPILLARY_TOKEN


@pytest.fixture
def strava_env(monkeypatch) -> tuple[str, str]:
    """Configure the Strava OAuth client credentials."""
    monkeypatch.setenv('STRAVA_CLIENT_ID', STRAVA_CLIENT_ID)
    monkeypatch.setenv('STRAVA_CLIENT_SECRET', STRAVA_CLIENT_SECRET)
    return STRAVA_CLIENT_ID, STRAVA_CLIENT_SECRET


# --- API Event Fixtures ---


@pytest.fixture
def api_gateway_event() -> dict:
    """Base API Gateway event structure."""
    return {
        'httpMethod': 'GET',
        'path': '/proxy',
        'queryStringParameters': {},
        'multiValueQueryStringParameters': {},
        'headers': {},
        'requestContext': {
            'requestId': str(uuid4()),
        },
        'body': None,
        'isBase64Encoded': False,
    }


@pytest.fixture
def make_event(api_gateway_event) -> Callable[..., dict]:
    """Factory for API Gateway events with a method, query and body."""

    def _make(
        method: str = 'GET',
        query: Optional[dict[str, str]] = None,
        body: Optional[str] = None,
        is_base64: bool = False,
    ) -> dict:
        event = dict(api_gateway_event)
        event['httpMethod'] = method
        event['queryStringParameters'] = query
        event['body'] = body
        event['isBase64Encoded'] = is_base64
        return event

    return _make


# --- Upstream Fixtures ---


def _headers(content_type: Optional[str]) -> Message:
    headers = Message()
    if content_type:
        headers['Content-Type'] = content_type
    return headers


class FakeUpstream:
    """Programs the reply of a patched ``urlopen`` and exposes the request."""

    def __init__(self, urlopen: MagicMock) -> None:
        self.urlopen = urlopen

    def reply(
        self,
        status: int = 200,
        body: bytes = b'',
        content_type: Optional[str] = 'application/json',
    ) -> None:
        response = MagicMock()
        response.__enter__.return_value = response
        response.__exit__.return_value = False
        response.status = status
        response.read.return_value = body
        response.headers = _headers(content_type)
        self.urlopen.return_value = response

    def fail(
        self,
        status: int,
        body: bytes = b'',
        content_type: Optional[str] = 'application/json',
    ) -> None:
        self.urlopen.side_effect = urllib.error.HTTPError(
            'https://upstream.test',
            status,
            'upstream error',
            _headers(content_type),
            io.BytesIO(body),
        )

    def raise_error(self, exc: Exception) -> None:
        self.urlopen.side_effect = exc

    @property
    def called(self) -> bool:
        return self.urlopen.called

    @property
    def request(self) -> Any:
        return self.urlopen.call_args.args[0]

    @property
    def timeout(self) -> Optional[float]:
        return self.urlopen.call_args.kwargs.get('timeout')


@pytest.fixture
def upstream(mocker) -> FakeUpstream:
    """Patch outbound HTTP and return a handle to program the reply."""
    return FakeUpstream(mocker.patch('urllib.request.urlopen'))


# --- Mock Fixtures ---


@pytest.fixture
def mock_boto3_client(mocker):
    """Mock boto3 client for AWS service calls."""
    from app.services.secrets import clear_client_cache

    clear_client_cache()
    mock = mocker.patch('boto3.client')
    yield mock
    clear_client_cache()
