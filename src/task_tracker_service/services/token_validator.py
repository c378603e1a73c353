"""Bearer credential issuing and verification."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from joserfc import jwt
from joserfc.errors import JoseError
from joserfc.jwk import OctKey
from service_commons.exceptions import Unauthenticated

if TYPE_CHECKING:
    from collections.abc import Callable

_ALGORITHM = "HS256"
_BEARER_SCHEME = "bearer"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def extract_bearer_token(authorization: str | None) -> str:
    """
    Pull the token out of an ``Authorization`` header value.

    Missing header, a scheme other than Bearer, an empty or whitespace-only
    remainder, or extra segments all fail the same way.
    """
    if authorization is None:
        raise Unauthenticated()

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != _BEARER_SCHEME:
        raise Unauthenticated()

    return parts[1]


class TokenValidator:
    """
    Issues and verifies HS256 bearer tokens signed with the process-wide secret.

    Verification is a pure function of (header, secret, clock): any
    structural, signature, claim or expiry failure raises the same
    ``Unauthenticated`` error so callers cannot tell the causes apart.
    """

    def __init__(
        self,
        secret: str,
        token_ttl_seconds: int,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._key = OctKey.import_key(secret.encode())
        self._token_ttl_seconds = token_ttl_seconds
        self._clock = clock

    def _now_timestamp(self) -> int:
        return int(self._clock().timestamp())

    def issue_token(self, account_id: str) -> str:
        """Sign a token whose subject is the account id."""
        issued_at = self._now_timestamp()
        claims: dict[str, Any] = {
            "sub": account_id,
            "iat": issued_at,
            "exp": issued_at + self._token_ttl_seconds,
        }
        return jwt.encode({"alg": _ALGORITHM}, claims, self._key, algorithms=[_ALGORITHM])

    def verify_token(self, token: str) -> str:
        """Verify signature and claims, returning the claimed account id."""
        try:
            decoded = jwt.decode(token, self._key, algorithms=[_ALGORITHM])
            registry = jwt.JWTClaimsRegistry(
                now=self._now_timestamp,
                sub={"essential": True},
                exp={"essential": True},
            )
            registry.validate(decoded.claims)
        except (JoseError, ValueError, TypeError) as exc:
            raise Unauthenticated() from exc

        subject = decoded.claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise Unauthenticated()
        return subject

    def verify_bearer(self, authorization: str | None) -> str:
        """Extract the bearer token from a header value and verify it."""
        token = extract_bearer_token(authorization)
        return self.verify_token(token)
