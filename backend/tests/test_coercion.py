"""
Unit tests for form text → datastore value coercion.
"""

import uuid

import pytest

from app.services.submission.coercion import (
    add_timestamps,
    has_text,
    new_id,
    parse_int,
    parse_number,
    sanitize_timestamp,
    text_or_none,
)


@pytest.mark.parametrize(
    "value,expected",
    [("12.5", 12.5), (" 7 ", 7.0), (3, 3.0), ("", None), ("abc", None), ("nan", None), ("inf", None), (None, None), (True, None)],
)
def test_parse_number(value, expected):
    assert parse_number(value) == expected


def test_parse_int_truncates():
    assert parse_int("12.7") == 12
    assert parse_int("-3.9") == -3
    assert parse_int("") is None


def test_blank_text():
    assert not has_text("   ")
    assert not has_text(None)
    assert has_text(0)
    assert text_or_none("") is None
    assert text_or_none("x") == "x"


def test_sanitize_timestamp():
    assert sanitize_timestamp("") is None
    assert sanitize_timestamp(" 2024-03-31 ") == "2024-03-31"


def test_add_timestamps_single_and_many():
    row = add_timestamps({"id": "1"}, timestamp="2024-01-01T00:00:00+00:00")
    assert row == {"id": "1", "created_at": "2024-01-01T00:00:00+00:00", "updated_at": "2024-01-01T00:00:00+00:00"}

    rows = add_timestamps([{"id": "1"}, {"id": "2"}])
    assert rows[0]["created_at"] == rows[1]["created_at"] == rows[1]["updated_at"]


def test_new_id_is_uuid4():
    assert uuid.UUID(new_id()).version == 4
