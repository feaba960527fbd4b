"""Tests for parsing the forwarded ``headers`` query parameter."""

import pytest

from m3u8_proxy.dto import parse_forwarded_headers


class TestParseForwardedHeaders:
    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_means_no_headers(self, raw):
        result = parse_forwarded_headers(raw)
        assert result.ok
        assert result.headers == {}

    def test_object_of_strings(self):
        result = parse_forwarded_headers('{"Referer": "https://site.example/", "X-Id": "7"}')
        assert result.ok
        assert result.headers == {"Referer": "https://site.example/", "X-Id": "7"}

    def test_scalars_become_strings(self):
        result = parse_forwarded_headers('{"X-Count": 3, "X-Flag": true}')
        assert result.ok
        assert result.headers == {"X-Count": "3", "X-Flag": "true"}

    @pytest.mark.parametrize(
        "raw",
        [
            "{bad json",
            "[1, 2]",
            '"just a string"',
            '{"X-Nested": {"a": 1}}',
            '{"X-Null": null}',
        ],
    )
    def test_invalid(self, raw):
        result = parse_forwarded_headers(raw)
        assert not result.ok
        assert result.headers == {}
        assert result.error.startswith("Invalid headers format")
