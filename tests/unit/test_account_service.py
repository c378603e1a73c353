"""Unit tests for AccountService."""

from __future__ import annotations

import pytest
from service_commons.exceptions import Duplicate, Unauthenticated

from task_tracker_service.services.account_service import AccountService
from task_tracker_service.services.account_store import AccountStore
from task_tracker_service.services.models import LoginInput, RegistrationInput
from task_tracker_service.services.password_hasher import PasswordHasher
from task_tracker_service.services.token_validator import TokenValidator
from tests.helpers import TEST_JWT_SECRET


@pytest.fixture
def store(tmp_path):
    account_store = AccountStore(db_path=str(tmp_path / "tasks.db"))
    yield account_store
    account_store.close()


@pytest.fixture
def token_validator() -> TokenValidator:
    return TokenValidator(TEST_JWT_SECRET, token_ttl_seconds=3600)


@pytest.fixture
def service(store: AccountStore, token_validator: TokenValidator) -> AccountService:
    hasher = PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)
    return AccountService(store, hasher, token_validator)


_ALICE = RegistrationInput(name="Alice", email="alice@example.com", password="secret123")


@pytest.mark.unit
async def test_register_returns_token_and_public_user(
    service: AccountService, store: AccountStore, token_validator: TokenValidator
) -> None:
    result = await service.register(_ALICE)

    assert result["message"] == "User registered successfully"
    assert set(result["user"]) == {"id", "name", "email"}
    assert result["user"]["email"] == "alice@example.com"
    assert token_validator.verify_token(result["token"]) == result["user"]["id"]

    stored = store.get_by_id(result["user"]["id"])
    assert stored is not None
    assert stored["password_hash"] != "secret123"
    assert stored["password_hash"].startswith("$argon2id$")


@pytest.mark.unit
async def test_register_duplicate_email(service: AccountService) -> None:
    await service.register(_ALICE)

    with pytest.raises(Duplicate) as exc_info:
        await service.register(
            RegistrationInput(name="Alice Two", email="alice@example.com", password="other123")
        )

    assert exc_info.value.message == "User already exists with this email"
    assert exc_info.value.status_code == 400


@pytest.mark.unit
async def test_login_with_correct_password(
    service: AccountService, token_validator: TokenValidator
) -> None:
    registered = await service.register(_ALICE)

    result = await service.login(LoginInput(email="alice@example.com", password="secret123"))

    assert result["message"] == "Login successful"
    assert result["user"] == registered["user"]
    assert token_validator.verify_token(result["token"]) == registered["user"]["id"]


@pytest.mark.unit
async def test_login_failures_are_indistinguishable(service: AccountService) -> None:
    """Wrong password and unknown email produce the same error."""
    await service.register(_ALICE)

    with pytest.raises(Unauthenticated) as wrong_password:
        await service.login(LoginInput(email="alice@example.com", password="wrong-pass"))
    with pytest.raises(Unauthenticated) as unknown_email:
        await service.login(LoginInput(email="nobody@example.com", password="secret123"))

    assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401
