"""Tests for dataguardian.utils.json_parsing."""

from __future__ import annotations

from dataguardian.utils import json_parsing


class TestLoadJsonFromText:

    def test_plain_json(self) -> None:
        assert json_parsing.load_json_from_text('{"a": 1}') == {"a": 1}

    def test_strips_fences(self) -> None:
        assert json_parsing.load_json_from_text('```json\n{"a": 1}\n```') == {"a": 1}

    def test_invalid_returns_none(self) -> None:
        assert json_parsing.load_json_from_text("not json") is None
        assert json_parsing.load_json_from_text(None) is None


class TestExtractJsonObject:

    def test_object_wrapped_in_prose(self) -> None:
        text = 'Here is the analysis: {"keyRisks": ["x"]} Let me know if you need more.'
        assert json_parsing.extract_json_object(text) == {"keyRisks": ["x"]}

    def test_braces_inside_strings(self) -> None:
        text = 'Result: {"note": "use {curly} braces", "n": 2} done'
        assert json_parsing.extract_json_object(text) == {"note": "use {curly} braces", "n": 2}

    def test_skips_unparseable_block(self) -> None:
        text = 'First {not json} then {"ok": true}'
        assert json_parsing.extract_json_object(text) == {"ok": True}

    def test_top_level_array_is_not_an_object(self) -> None:
        assert json_parsing.extract_json_object("[1, 2]") is None

    def test_no_json(self) -> None:
        assert json_parsing.extract_json_object("I cannot help with that.") is None
        assert json_parsing.extract_json_object("") is None

    def test_unbalanced(self) -> None:
        assert json_parsing.extract_json_object('{"a": 1') is None

    def test_unclosed_brace_before_object(self) -> None:
        text = 'note {oops, here it is: {"a": 1}'
        assert json_parsing.extract_json_object(text) == {"a": 1}
