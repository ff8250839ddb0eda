"""Input Validation — sanitizing and shape checks.

Tests:
    - sanitize_text escapes markup and strips, never raises
    - ObjectId / UUID / email shape checks
    - parse_int is lenient and falls back instead of raising
"""

import pytest

from oneclick.core.validation import (
    is_valid_email, is_valid_object_id, is_valid_uuid, last_four, parse_int,
    sanitize_text,
)


def test_sanitize_text_strips_and_escapes():
    assert sanitize_text("  <b>ORD-1</b> ") == "&lt;b&gt;ORD-1&lt;/b&gt;"


def test_sanitize_text_handles_none_and_numbers():
    assert sanitize_text(None) == ""
    assert sanitize_text(42) == "42"


@pytest.mark.parametrize("value,expected", [
    ("507f1f77bcf86cd799439011", True),
    ("507F1F77BCF86CD799439011", True),
    ("507f1f77bcf86cd79943901", False),
    ("507f1f77bcf86cd79943901z", False),
    ("", False),
    (None, False),
])
def test_is_valid_object_id(value, expected):
    assert is_valid_object_id(value) is expected


def test_is_valid_uuid():
    assert is_valid_uuid("0b8a3d1c-3f2e-4c55-8f7e-1a2b3c4d5e6f")
    assert not is_valid_uuid("0b8a3d1c")
    assert not is_valid_uuid("")
    assert not is_valid_uuid(None)


def test_is_valid_email():
    assert is_valid_email("a@b.com")
    assert not is_valid_email("a@b")
    assert not is_valid_email("")


@pytest.mark.parametrize("value,expected", [
    (1500, 1500),
    ("1500", 1500),
    ("1500.9", 1500),
    (1500.9, 1500),
    (" 20 ", 20),
    ("abc", 0),
    (None, 0),
    (True, 0),
    (float("inf"), 0),
    (float("-inf"), 0),
    (float("nan"), 0),
])
def test_parse_int(value, expected):
    assert parse_int(value) == expected


def test_parse_int_custom_fallback():
    assert parse_int("x", fallback=1) == 1


def test_last_four():
    assert last_four("XXXXXXXXXXXX6623") == "6623"
    assert last_four("12") == "12"
    assert last_four(None) == ""


def test_parse_int_non_finite_uses_fallback():
    assert parse_int(float("inf"), fallback=1) == 1
    assert parse_int(float("nan"), fallback=1) == 1
