"""Tests for utility parser functions."""

from __future__ import annotations

import base64
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

from app.exceptions import ValidationError  # noqa: E402
from app.utils.parsers import (  # noqa: E402
    collect_query_params,
    decode_body,
    first_param,
    get_http_method,
    parse_json_body,
    parse_non_negative_int,
)


class TestGetHttpMethod:
    """Tests for get_http_method."""

    def test_rest_api_event(self) -> None:
        assert get_http_method({'httpMethod': 'get'}) == 'GET'

    def test_http_api_event(self) -> None:
        event = {'requestContext': {'http': {'method': 'POST'}}}
        assert get_http_method(event) == 'POST'

    def test_missing_method(self) -> None:
        assert get_http_method({}) == ''


class TestCollectQueryParams:
    """Tests for collect_query_params."""

    def test_single_values(self) -> None:
        event = {'queryStringParameters': {'endpoint': 'tiles', 'zoom': '14'}}
        assert collect_query_params(event) == {'endpoint': ['tiles'], 'zoom': ['14']}

    def test_multi_values_are_merged_without_duplicates(self) -> None:
        event = {
            'queryStringParameters': {'x': '2'},
            'multiValueQueryStringParameters': {'x': ['2', '5']},
        }
        assert collect_query_params(event) == {'x': ['2', '5']}

    def test_none_parameters(self) -> None:
        event = {'queryStringParameters': None, 'multiValueQueryStringParameters': None}
        assert collect_query_params(event) == {}


class TestFirstParam:
    """Tests for first_param."""

    def test_returns_first_value(self) -> None:
        assert first_param({'bbox': ['a', 'b']}, 'bbox') == 'a'

    def test_missing_key(self) -> None:
        assert first_param({}, 'bbox') is None

    def test_empty_value_is_none(self) -> None:
        assert first_param({'bbox': ['']}, 'bbox') is None


class TestParseNonNegativeInt:
    """Tests for parse_non_negative_int."""

    @pytest.mark.parametrize(('value', 'expected'), [('0', 0), ('14', 14), (' 7 ', 7)])
    def test_valid(self, value, expected) -> None:
        assert parse_non_negative_int(value) == expected

    @pytest.mark.parametrize('value', [None, '', '-1', '1.5', 'abc', '1e3'])
    def test_invalid(self, value) -> None:
        assert parse_non_negative_int(value) is None


class TestParseJsonBody:
    """Tests for decode_body and parse_json_body."""

    def test_plain_body(self) -> None:
        assert parse_json_body({'body': '{"a": 1}'}) == {'a': 1}

    def test_base64_body(self) -> None:
        encoded = base64.b64encode(b'{"a": 1}').decode()
        assert decode_body({'body': encoded, 'isBase64Encoded': True}) == '{"a": 1}'
        assert parse_json_body({'body': encoded, 'isBase64Encoded': True}) == {'a': 1}

    def test_invalid_base64(self) -> None:
        with pytest.raises(ValidationError):
            decode_body({'body': '%%%', 'isBase64Encoded': True})

    @pytest.mark.parametrize('body', [None, '', '{', 'null', '[1, 2]'])
    def test_rejects_non_objects(self, body) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_json_body({'body': body})
        assert exc_info.value.message == 'Invalid JSON body'
