"""Unit tests for TokenValidator."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from service_commons.exceptions import Unauthenticated

from task_tracker_service.services.token_validator import TokenValidator, extract_bearer_token
from tests.helpers import TEST_JWT_SECRET, make_account_id, make_token

_FIXED_NOW = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


class _Clock:
    """Settable clock for expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.mark.unit
def test_issue_then_verify_returns_subject() -> None:
    """A freshly issued token verifies to the same account id."""
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)
    account_id = make_account_id()

    token = validator.issue_token(account_id)

    assert validator.verify_token(token) == account_id


@pytest.mark.unit
def test_issued_token_is_rejected_after_ttl() -> None:
    """Tokens stop verifying once the clock passes their expiry."""
    clock = _Clock(_FIXED_NOW)
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=60, clock=clock)
    token = validator.issue_token(make_account_id())

    clock.now = _FIXED_NOW + timedelta(seconds=30)
    validator.verify_token(token)

    clock.now = _FIXED_NOW + timedelta(seconds=61)
    with pytest.raises(Unauthenticated):
        validator.verify_token(token)


@pytest.mark.unit
def test_verify_rejects_other_secret() -> None:
    """A token signed with a different secret fails verification."""
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)
    other = TokenValidator("x" * 48, token_ttl_seconds=3600)

    with pytest.raises(Unauthenticated):
        validator.verify_token(other.issue_token(make_account_id()))


@pytest.mark.unit
def test_verify_rejects_missing_subject() -> None:
    """A signed token without a subject claim is rejected."""
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)
    now = int(datetime.now(UTC).timestamp())
    token = make_token({"iat": now, "exp": now + 60})

    with pytest.raises(Unauthenticated):
        validator.verify_token(token)


@pytest.mark.unit
def test_verify_rejects_non_string_subject() -> None:
    """The subject must be a non-empty string."""
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)
    now = int(datetime.now(UTC).timestamp())
    token = make_token({"sub": "", "iat": now, "exp": now + 60})

    with pytest.raises(Unauthenticated):
        validator.verify_token(token)


@pytest.mark.unit
def test_verify_rejects_other_algorithm() -> None:
    """Only HS256 tokens are accepted."""
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)
    now = int(datetime.now(UTC).timestamp())
    token = make_token({"sub": make_account_id(), "iat": now, "exp": now + 60}, algorithm="HS512")

    with pytest.raises(Unauthenticated):
        validator.verify_token(token)


@pytest.mark.unit
@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "a.b", "...."])
def test_verify_rejects_malformed_tokens(token: str) -> None:
    """Structurally broken tokens raise Unauthenticated, never another error."""
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)

    with pytest.raises(Unauthenticated):
        validator.verify_token(token)


@pytest.mark.unit
@pytest.mark.parametrize(
    "header",
    [None, "", "   ", "Bearer", "Bearer    ", "Basic abc", "Bearer a b", "Bearerabc"],
)
def test_extract_bearer_token_rejects_malformed_headers(header: str | None) -> None:
    """Missing, empty, non-bearer or multi-part headers are rejected before any crypto."""
    with pytest.raises(Unauthenticated):
        extract_bearer_token(header)


@pytest.mark.unit
@pytest.mark.parametrize("header", ["Bearer abc", "bearer abc", "BEARER abc", "Bearer   abc  "])
def test_extract_bearer_token_accepts_bearer_scheme(header: str) -> None:
    """The scheme is case-insensitive and surrounding whitespace is ignored."""
    assert extract_bearer_token(header) == "abc"


@pytest.mark.unit
def test_verify_bearer_combines_extraction_and_verification() -> None:
    """verify_bearer accepts a full header value."""
    validator = TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)
    account_id = make_account_id()
    token = validator.issue_token(account_id)

    assert validator.verify_bearer(f"Bearer {token}") == account_id
    with pytest.raises(Unauthenticated):
        validator.verify_bearer(token)
