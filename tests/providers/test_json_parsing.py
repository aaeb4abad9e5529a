"""Tests for tolerant JSON extraction."""

import pytest

from trendme.providers.errors import ParsingError
from trendme.providers.parsing import (
    ParseFailure,
    ParseSuccess,
    as_score,
    as_strings,
    parse_json,
    require_json,
)


class TestParseJson:
    """Tests for parse_json strategies."""

    def test_direct(self):
        result = parse_json('{"name": "Mara"}')
        assert isinstance(result, ParseSuccess)
        assert result.value == {"name": "Mara"}
        assert result.strategy == "direct"

    def test_fenced_block(self):
        text = 'Here you go:\n```json\n[{"headline": "A"}]\n```\nEnjoy!'
        result = parse_json(text, expect=list)
        assert isinstance(result, ParseSuccess)
        assert result.strategy == "fenced_block"
        assert result.value == [{"headline": "A"}]

    def test_bracket_scan(self):
        text = 'Sure! The trends are [{"headline": "A"}, {"headline": "B"}] as requested.'
        result = parse_json(text, expect=list)
        assert isinstance(result, ParseSuccess)
        assert result.strategy == "bracket_scan"
        assert len(result.value) == 2

    def test_wrong_shape_is_failure(self):
        result = parse_json('"just a string"', expect=dict)
        assert isinstance(result, ParseFailure)
        assert "unexpected str" in result.reason

    @pytest.mark.parametrize("text", [None, "", "no json here at all"])
    def test_unusable_text(self, text):
        assert isinstance(parse_json(text), ParseFailure)

    def test_require_json_raises_parsing_error(self):
        with pytest.raises(ParsingError) as exc_info:
            require_json("not json", dict, "persona")
        assert exc_info.value.operation == "persona"
        assert not exc_info.value.retryable


class TestCoercion:
    """Tests for field coercion helpers."""

    def test_as_strings_drops_blanks_and_non_strings(self):
        assert as_strings(["a", " ", 3, " b "]) == ["a", "b"]
        assert as_strings("a") == []

    @pytest.mark.parametrize("value,expected", [(90, 90), ("75", 75), (0, 80), (None, 80), ("x", 80)])
    def test_as_score(self, value, expected):
        assert as_score(value, 80) == expected
