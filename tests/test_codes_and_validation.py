from datetime import datetime, timedelta, timezone

import pytest

from app.domain.codes import CodePolicy, generate_code, is_expired
from app.domain.validation import (
    has_code_length,
    is_strong_password,
    is_valid_email,
    normalize_email,
)

NOW = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)


def test_generated_codes_are_six_digits_in_range():
    for _ in range(500):
        code = generate_code()
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


def test_code_policy_lifetimes():
    policy = CodePolicy()
    assert policy.verification_expiry(NOW) == NOW + timedelta(minutes=15)
    assert policy.two_factor_expiry(NOW) == NOW + timedelta(minutes=5)
    assert policy.token_ttl == timedelta(hours=2)


def test_expiry_comparison_is_strict():
    assert not is_expired(NOW, NOW)
    assert is_expired(NOW + timedelta(microseconds=1), NOW)
    assert is_expired(NOW, None)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("TEST@test.com ", "test@test.com"),
        ("  Mixed.Case@Example.ORG", "mixed.case@example.org"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_email(raw, expected):
    assert normalize_email(raw) == expected
    assert normalize_email(normalize_email(raw)) == normalize_email(raw)


@pytest.mark.parametrize(
    "email, valid",
    [
        ("test@test.com", True),
        ("a.b+tag@sub.domain.co", True),
        ("test.com", False),
        ("test@test", False),
        ("te st@test.com", False),
        ("@test.com", False),
    ],
)
def test_email_shape(email, valid):
    assert is_valid_email(email) is valid


def test_password_length_rule():
    assert not is_strong_password("test1")
    assert is_strong_password("test12")


@pytest.mark.parametrize("code, ok", [("123456", True), ("12345", False), ("1234567", False), (None, False)])
def test_code_length(code, ok):
    assert has_code_length(code) is ok
