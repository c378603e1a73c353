"""Account registration and login."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from service_commons.exceptions import Duplicate, Unauthenticated

from task_tracker_service.logging import get_logger
from task_tracker_service.services.account_store import DuplicateAccountError

if TYPE_CHECKING:
    from task_tracker_service.services.account_store import AccountStore
    from task_tracker_service.services.models import LoginInput, RegistrationInput
    from task_tracker_service.services.password_hasher import PasswordHasher
    from task_tracker_service.services.token_validator import TokenValidator

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def _public_user(account: dict[str, str]) -> dict[str, str]:
    return {
        "id": account["account_id"],
        "name": account["name"],
        "email": account["email"],
    }


class AccountService:
    """
    Creates accounts and exchanges credentials for bearer tokens.

    Email uniqueness is left to the store's unique index; a racing
    duplicate registration surfaces as ``Duplicate`` either way.
    """

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        token_validator: TokenValidator,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._token_validator = token_validator
        self._logger = get_logger(__name__)

    async def register(self, payload: RegistrationInput) -> dict[str, Any]:
        password_hash = await asyncio.to_thread(self._hasher.hash, payload.password)
        try:
            account = await asyncio.to_thread(
                self._store.insert, payload.name, payload.email, password_hash
            )
        except DuplicateAccountError as exc:
            self._logger.warning("Registration rejected: email already registered")
            raise Duplicate("User already exists with this email") from exc

        self._logger.info("Account registered", extra={"account_id": account["account_id"]})
        return {
            "message": "User registered successfully",
            "token": self._token_validator.issue_token(account["account_id"]),
            "user": _public_user(account),
        }

    async def login(self, payload: LoginInput) -> dict[str, Any]:
        account = await asyncio.to_thread(self._store.get_by_email, payload.email)
        if account is None:
            await asyncio.to_thread(self._hasher.verify_dummy, payload.password)
            self._logger.warning("Login failed")
            raise Unauthenticated(INVALID_CREDENTIALS_MESSAGE)

        matches = await asyncio.to_thread(
            self._hasher.verify, account["password_hash"], payload.password
        )
        if not matches:
            self._logger.warning("Login failed", extra={"account_id": account["account_id"]})
            raise Unauthenticated(INVALID_CREDENTIALS_MESSAGE)

        self._logger.info("Login succeeded", extra={"account_id": account["account_id"]})
        return {
            "message": "Login successful",
            "token": self._token_validator.issue_token(account["account_id"]),
            "user": _public_user(account),
        }
