"""Unit tests for LLM JSON parsing helpers."""

import pytest

from lens.features.llm.json_utils import (
    extract_first_json_object,
    fix_escape_sequences,
    strip_markdown_fences,
    try_parse_json_object,
)


class TestExtractFirstJsonObject:
    """Tests for extract_first_json_object."""

    @pytest.mark.unit
    def test_object_in_prose(self) -> None:
        """The object is cut out of surrounding text."""
        assert extract_first_json_object('Result: {"a": 1} done') == '{"a": 1}'

    @pytest.mark.unit
    def test_nested_objects(self) -> None:
        """Nested braces are balanced."""
        text = '{"a": {"b": 2}} {"c": 3}'

        assert extract_first_json_object(text) == '{"a": {"b": 2}}'

    @pytest.mark.unit
    def test_braces_in_strings(self) -> None:
        """Braces and escaped quotes inside strings are ignored."""
        text = '{"r": "a } and \\" {", "s": 1} tail'

        assert extract_first_json_object(text) == '{"r": "a } and \\" {", "s": 1}'

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["no braces", '{"open": 1'])
    def test_none_when_unbalanced(self, text: str) -> None:
        """No complete object yields None."""
        assert extract_first_json_object(text) is None


class TestTryParseJsonObject:
    """Tests for try_parse_json_object."""

    @pytest.mark.unit
    def test_parses_object(self) -> None:
        """Valid objects are parsed."""
        assert try_parse_json_object('{"a": 1}') == {"a": 1}

    @pytest.mark.unit
    def test_escape_fallback(self) -> None:
        """Invalid escapes are repaired before giving up."""
        assert try_parse_json_object('{"a": "snake\\_case"}') == {"a": "snake\\_case"}

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["[1, 2]", "not json", '"string"'])
    def test_non_objects_rejected(self, text: str) -> None:
        """Anything but an object yields None."""
        assert try_parse_json_object(text) is None

    @pytest.mark.unit
    def test_oversized_integer_rejected(self) -> None:
        """Integer literals past the interpreter's digit limit yield None."""
        assert try_parse_json_object('{"score": ' + "9" * 5000 + "}") is None


class TestHelpers:
    """Tests for the small text helpers."""

    @pytest.mark.unit
    def test_fix_escape_sequences_keeps_valid_escapes(self) -> None:
        """Valid escapes are left alone."""
        assert fix_escape_sequences('\\n \\" \\_') == '\\n \\" \\\\_'

    @pytest.mark.unit
    def test_strip_markdown_fences(self) -> None:
        """Fenced blocks are unwrapped."""
        assert strip_markdown_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_markdown_fences('  {"a": 1}  ') == '{"a": 1}'
