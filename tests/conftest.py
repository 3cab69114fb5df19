"""Pytest configuration and fixtures."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from digital_bank_api.app.core.config import settings
from digital_bank_api.app.core.db import init_db
from digital_bank_api.app.core.money import Number
from digital_bank_api.app.core.security import create_access_token
from digital_bank_api.app.main import create_app
from digital_bank_api.app.services.account_service import AccountService
from digital_bank_api.app.services.login_throttle import LoginThrottle
from digital_bank_api.app.services.user_service import UserService

PASSWORD = "Secret-1"


def run(coro):
    """Run a service coroutine to completion."""
    return asyncio.run(coro)


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def database(tmp_path, monkeypatch):
    """A fresh, migrated SQLite database for each test."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "bank.db"))
    init_db()
    return settings.database_url


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def throttle(clock) -> LoginThrottle:
    return LoginThrottle(clock=clock)


@pytest.fixture
def client(database, throttle):
    app = create_app(throttle=throttle)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user(database):
    return run(UserService.create_user("Admin", "admin@example.com", PASSWORD))


@pytest.fixture
def auth_headers(user):
    token = create_access_token({"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


def make_account(owner_name: str = "ALICE", account_number: str = "100000001", balance: Number = 1000,
                 bank: str = "ABC", password: str = PASSWORD) -> int:
    """Open an account through the service and return its id."""
    from digital_bank_api.app.core.store import accounts

    run(AccountService.create_account(owner_name, account_number, bank, balance, password))
    return accounts.find_one("account_number", account_number)["id"]
