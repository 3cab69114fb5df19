"""Tests for the SQLite document store."""

from decimal import Decimal

import pytest

from digital_bank_api.app.core.config import settings
from digital_bank_api.app.core.db import (
    DEFAULT_ACCOUNT,
    DEFAULT_USER,
    MIGRATIONS,
    get_connection,
    get_cursor,
    init_db,
    seed_defaults,
)
from digital_bank_api.app.core.errors import DuplicateError, OperationFailedError
from digital_bank_api.app.core.money import Number
from digital_bank_api.app.core.store import accounts, users


def new_account(number: str = "100000001", balance: Number = 100) -> int:
    return accounts.create(owner_name="ALICE", account_number=number, bank="ABC", balance=balance, password="x$y")


class TestDocumentStore:

    def test_create_and_find(self, database) -> None:
        user_id = users.create(name="Alice", email="alice@example.com", password="x$y")
        assert users.find_by_id(user_id)["name"] == "Alice"
        assert users.find_one("email", "alice@example.com")["id"] == user_id
        assert users.find_one("email", "nobody@example.com") is None

    def test_unique_violation(self, database) -> None:
        users.create(name="Alice", email="alice@example.com", password="x$y")
        with pytest.raises(DuplicateError):
            users.create(name="Other", email="alice@example.com", password="x$y")

    def test_update_fields(self, database) -> None:
        user_id = users.create(name="Alice", email="alice@example.com", password="x$y")
        assert users.update_fields(user_id, name="Alicia") is True
        assert users.find_by_id(user_id)["name"] == "Alicia"
        assert users.update_fields(999, name="Ghost") is False

    def test_rejects_unknown_columns(self, database) -> None:
        with pytest.raises(ValueError):
            users.find_one("name; DROP TABLE users", "x")
        with pytest.raises(ValueError):
            accounts.update_fields(1, version=5)

    def test_delete(self, database) -> None:
        user_id = users.create(name="Alice", email="alice@example.com", password="x$y")
        assert users.delete(user_id) is True
        assert users.delete(user_id) is False

    def test_list_all_in_id_order(self, database) -> None:
        ids = [new_account(f"10000000{i}") for i in range(3)]
        assert [a["id"] for a in accounts.list_all()] == ids


class TestBalanceWrites:

    def test_conditional_update(self, database) -> None:
        account_id = new_account()
        assert accounts.conditional_update_balance(account_id, 0, 150) is True
        stored = accounts.find_by_id(account_id)
        assert (stored["balance"], stored["version"]) == (150, 1)

    def test_stale_version_is_rejected(self, database) -> None:
        account_id = new_account()
        accounts.conditional_update_balance(account_id, 0, 150)
        assert accounts.conditional_update_balance(account_id, 0, 999) is False
        assert accounts.find_by_id(account_id)["balance"] == 150

    def test_all_or_nothing(self, database) -> None:
        first = new_account("100000001")
        second = new_account("100000002")
        assert accounts.apply_balance_changes([(first, 0, 50), (second, 3, 150)]) is False
        assert accounts.find_by_id(first)["balance"] == 100
        assert accounts.find_by_id(first)["version"] == 0

    def test_negative_balance_violates_constraint(self, database) -> None:
        account_id = new_account()
        with pytest.raises(OperationFailedError):
            accounts.conditional_update_balance(account_id, 0, -1)
        assert accounts.find_by_id(account_id)["balance"] == 100


def test_migrations_are_idempotent(database) -> None:
    init_db()
    init_db()
    assert accounts.list_all() == []


def test_seed_defaults_runs_once(database) -> None:
    seed_defaults()
    seed_defaults()
    assert [u["email"] for u in users.list_all()] == [DEFAULT_USER["email"]]
    seeded = accounts.list_all()
    assert len(seeded) == 1
    assert seeded[0]["account_number"] == DEFAULT_ACCOUNT["account_number"]
    assert seeded[0]["balance"] == DEFAULT_ACCOUNT["balance"]


def test_balance_is_stored_in_cents(database) -> None:
    account_id = new_account(balance=Decimal("12.34"))
    conn = get_connection()
    try:
        raw = conn.execute("SELECT balance, typeof(balance) FROM accounts WHERE id = ?", (account_id,)).fetchone()
    finally:
        conn.close()
    assert tuple(raw) == (1234, "integer")
    assert accounts.find_by_id(account_id)["balance"] == Decimal("12.34")


def test_real_balances_are_migrated_to_cents(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "legacy.db"))
    with get_cursor() as cursor:
        cursor.execute("CREATE TABLE migrations (version INTEGER PRIMARY KEY)")
        for version, sql in MIGRATIONS[:2]:
            cursor.executescript(sql)
            cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
        cursor.execute(
            "INSERT INTO accounts (owner_name, account_number, bank, balance, password, version) "
            "VALUES ('ALICE', '100000001', 'ABC', 2.2, 'x$y', 4)"
        )
    init_db()
    account = accounts.find_one("account_number", "100000001")
    assert (account["balance"], account["version"]) == (Decimal("2.2"), 4)
    assert accounts.conditional_update_balance(account["id"], 4, account["balance"] - Decimal("2.2")) is True
