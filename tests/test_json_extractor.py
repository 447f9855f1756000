"""Tests for locating JSON objects inside raw provider output."""

from __future__ import annotations

import json

import pytest

from voxhealth.extraction.json_extractor import (
    extract_json_text,
    load_json_object,
    parse_partial,
)


class TestExtractJsonText:
    def test_plain_json_unchanged(self):
        assert extract_json_text('{"a": 1}') == '{"a": 1}'

    def test_prose_and_fence_around_object(self):
        raw = 'Sure! ```json\n{"a":1}\n```'
        assert extract_json_text(raw) == '{"a":1}'

    def test_leading_fence_stripped(self):
        raw = '```json\n{"score": 3.0}\n```'
        assert extract_json_text(raw) == '{"score": 3.0}'

    def test_bare_fence_stripped(self):
        raw = '```\n{"score": 3.0}\n```'
        assert extract_json_text(raw) == '{"score": 3.0}'

    def test_trailing_prose_dropped(self):
        raw = 'Here you go: {"a": {"b": 2}} Hope this helps!'
        assert extract_json_text(raw) == '{"a": {"b": 2}}'

    def test_no_braces_returns_trimmed_text(self):
        assert extract_json_text("   no json here  ") == "no json here"

    def test_reversed_braces_returns_trimmed_text(self):
        assert extract_json_text("} oops {") == "} oops {"

    def test_non_string_input(self):
        assert extract_json_text(None) == ""


class TestLoadJsonObject:
    def test_decodes_fenced_object(self):
        assert load_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_raises_on_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            load_json_object("not json at all")

    def test_raises_on_non_object(self):
        with pytest.raises(ValueError, match="JSON object"):
            load_json_object("[1, 2, 3]")


class TestParsePartial:
    def test_valid_object(self):
        assert parse_partial('{"frontend_state": {"urgency": "High"}}') == {
            "frontend_state": {"urgency": "High"}
        }

    def test_garbage_becomes_empty(self):
        assert parse_partial("The model refused to answer.") == {}

    def test_truncated_object_becomes_empty(self):
        assert parse_partial('{"header": {"report_id": "VX-1"') == {}

    def test_none_becomes_empty(self):
        assert parse_partial(None) == {}
