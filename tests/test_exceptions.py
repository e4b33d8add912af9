"""Tests for custom exception classes."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

from app.exceptions import (  # noqa: E402
    AppError,
    ConfigurationError,
    MethodNotAllowedError,
    UpstreamError,
    ValidationError,
)


class TestAppError:
    """Tests for base AppError class."""

    def test_default_status_code(self) -> None:
        error = AppError('Something went wrong')
        assert error.status_code == 500
        assert error.message == 'Something went wrong'

    def test_to_dict_without_detail(self) -> None:
        error = AppError('Error message')
        assert error.to_dict() == {'error': 'Error message'}

    def test_to_dict_with_detail(self) -> None:
        error = AppError('Error', detail='Additional info')
        assert error.to_dict() == {'error': 'Error', 'detail': 'Additional info'}


class TestValidationError:
    """Tests for ValidationError class."""

    def test_status_code_is_400(self) -> None:
        error = ValidationError('Invalid endpoint parameters')
        assert error.status_code == 400
        assert error.to_dict() == {'error': 'Invalid endpoint parameters'}

    def test_includes_field_in_detail(self) -> None:
        error = ValidationError('Missing required parameters', field='code')
        assert error.field == 'code'
        assert error.to_dict()['detail'] == 'Field: code'


class TestMethodNotAllowedError:
    """Tests for MethodNotAllowedError class."""

    def test_status_code_is_405(self) -> None:
        error = MethodNotAllowedError('PUT', ('GET',))
        assert error.status_code == 405
        assert error.to_dict() == {'error': 'Method not allowed'}

    def test_stores_methods(self) -> None:
        error = MethodNotAllowedError('DELETE', ['POST'])
        assert error.method == 'DELETE'
        assert error.allowed_methods == ('POST',)


class TestConfigurationError:
    """Tests for ConfigurationError class."""

    def test_status_code_is_500(self) -> None:
        error = ConfigurationError('STRAVA_CLIENT_SECRET')
        assert error.status_code == 500

    def test_public_message_is_generic(self) -> None:
        error = ConfigurationError('MAPILLARY_CLIENT_TOKEN')
        assert error.to_dict() == {'error': 'Server configuration error'}
        assert 'MAPILLARY' not in str(error)

    def test_stores_config_name(self) -> None:
        error = ConfigurationError('STRAVA_CLIENT_ID')
        assert error.config_name == 'STRAVA_CLIENT_ID'


class TestUpstreamError:
    """Tests for UpstreamError class."""

    def test_relays_status_code(self) -> None:
        error = UpstreamError('Bad Request', 400, details={'message': 'Bad Request'})
        assert error.status_code == 400
        assert error.to_dict() == {
            'error': 'Bad Request',
            'details': {'message': 'Bad Request'},
        }

    def test_optionally_includes_status(self) -> None:
        error = UpstreamError('Request failed', 503, details='down', include_status=True)
        assert error.to_dict() == {
            'error': 'Request failed',
            'status': 503,
            'details': 'down',
        }
