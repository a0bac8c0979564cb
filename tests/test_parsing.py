"""Tests for locating and validating the table in an inference reply."""

import json

import pytest

from app.pdf2csv.exceptions import InvalidSchema, MalformedResponse
from app.pdf2csv.models import InferenceResponse
from app.pdf2csv.services.ai.parsing import ResponseParser, find_json_object


def _parse(text: str):
    return ResponseParser().parse(InferenceResponse(text=text))


class TestFindJsonObject:
    """Tests for the bracket-balancing scanner."""

    def test_plain_object(self):
        assert find_json_object('{"a": 1}') == '{"a": 1}'

    def test_prose_around_object(self):
        text = 'Here is the result: {"a": {"b": 2}} Thanks.'
        assert find_json_object(text) == '{"a": {"b": 2}}'

    def test_braces_inside_strings_ignored(self):
        text = 'Result {"a": "}{ not nesting", "b": "\\"}\\""} trailing }'
        span = find_json_object(text)
        assert json.loads(span) == {"a": "}{ not nesting", "b": '"}"'}

    def test_stops_at_first_balanced_object(self):
        text = '{"first": 1} and then {"second": 2}'
        assert find_json_object(text) == '{"first": 1}'

    def test_no_opening_brace(self):
        assert find_json_object("no json here") is None

    def test_unbalanced_object(self):
        assert find_json_object('{"a": {"b": 1}') is None


class TestResponseParser:
    """Tests for ResponseParser."""

    def test_parses_table_with_prose(self):
        """Test that prose before and after the JSON is ignored."""
        payload = {
            "headers": ["Name", "Age"],
            "rows": [["Ann", 31], ["Bob", 42]],
            "metadata": {"source": "Staff list", "rowCount": 2},
        }
        table = _parse(f"Here is the result: {json.dumps(payload)} Thanks.")
        assert table.headers == ["Name", "Age"]
        assert table.rows == [["Ann", 31], ["Bob", 42]]
        assert table.metadata.source == "Staff list"
        assert table.metadata.row_count == 2

    def test_markdown_fenced_reply(self):
        """Test replies wrapped in a markdown code fence."""
        text = '```json\n{"headers": ["Section", "Content"], "rows": [["Intro", "Hello"]]}\n```'
        table = _parse(text)
        assert table.headers == ["Section", "Content"]
        assert table.metadata.row_count == 1

    def test_no_json_raises_malformed(self):
        with pytest.raises(MalformedResponse):
            _parse("I could not find any table in this document.")

    def test_empty_reply_raises_malformed(self):
        with pytest.raises(MalformedResponse):
            _parse("")

    def test_invalid_json_raises_malformed(self):
        with pytest.raises(MalformedResponse) as exc_info:
            _parse("{headers: [Name], rows: []}")
        assert "Invalid JSON" in str(exc_info.value)

    def test_missing_headers_and_rows_raises_invalid_schema(self):
        """Test that an object without a table is not an empty table."""
        with pytest.raises(InvalidSchema):
            _parse('{"metadata": {"source": "x"}}')

    def test_missing_rows_raises_invalid_schema(self):
        with pytest.raises(InvalidSchema) as exc_info:
            _parse('{"headers": ["A"]}')
        assert "rows" in str(exc_info.value)

    def test_non_list_headers_raises_invalid_schema(self):
        with pytest.raises(InvalidSchema):
            _parse('{"headers": "A,B", "rows": []}')

    def test_empty_headers_raises_invalid_schema(self):
        with pytest.raises(InvalidSchema):
            _parse('{"headers": [], "rows": [["a"]]}')

    def test_scalar_row_raises_invalid_schema(self):
        with pytest.raises(InvalidSchema):
            _parse('{"headers": ["A"], "rows": ["not a row"]}')

    def test_empty_rows_allowed(self):
        table = _parse('{"headers": ["A", "B"], "rows": []}')
        assert table.rows == []
        assert table.metadata.row_count == 0
