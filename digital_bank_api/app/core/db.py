"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and seeding the default records (``seed_defaults``).
SQLite is used as a lightweight embedded database.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings
from .money import to_minor_units

logger = logging.getLogger(__name__)

MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users and bank accounts
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS accounts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            owner_name TEXT NOT NULL,
            account_number TEXT NOT NULL UNIQUE,
            bank TEXT NOT NULL,
            balance REAL NOT NULL DEFAULT 0 CHECK (balance >= 0),
            password TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
    # Migration 2: optimistic locking for balance updates
    (
        2,
        """
        -- Every balance write bumps the version; writers compare it first.
        ALTER TABLE accounts ADD COLUMN version INTEGER NOT NULL DEFAULT 0;
        """,
    ),
    # Migration 3: balances as integer cents
    (
        3,
        """
        CREATE TABLE accounts_cents (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            owner_name TEXT NOT NULL,
            account_number TEXT NOT NULL UNIQUE,
            bank TEXT NOT NULL,
            balance INTEGER NOT NULL DEFAULT 0 CHECK (balance >= 0),
            password TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            version INTEGER NOT NULL DEFAULT 0
        );

        INSERT INTO accounts_cents
            (id, owner_name, account_number, bank, balance, password, created_at, updated_at, version)
        SELECT id, owner_name, account_number, bank, CAST(ROUND(balance * 100) AS INTEGER),
               password, created_at, updated_at, version
        FROM accounts;

        DROP TABLE accounts;
        ALTER TABLE accounts_cents RENAME TO accounts;
        """,
    ),
]

DEFAULT_USER = {"name": "Administrator", "email": "admin@example.com", "password": "123456"}
DEFAULT_ACCOUNT = {
    "owner_name": "ADMINISTRATOR",
    "account_number": "123456789",
    "bank": "ABC",
    "balance": 50000,
    "password": "123456",
}


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # digital_bank_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` objects so columns can be
    accessed by name.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  New migrations are appended with an incremented
    version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version


def seed_defaults() -> None:
    """Create the default administrator user and bank account.

    Existing records are left untouched, so the function can be called
    on every start.
    """
    from .security import hash_password

    with get_cursor() as cursor:
        row = cursor.execute(
            "SELECT id FROM users WHERE email = ?", (DEFAULT_USER["email"],)
        ).fetchone()
        if row:
            logger.info("Default user %s already exists", DEFAULT_USER["email"])
        else:
            logger.info("Creating default user %s", DEFAULT_USER["email"])
            cursor.execute(
                "INSERT INTO users (name, email, password) VALUES (?, ?, ?)",
                (DEFAULT_USER["name"], DEFAULT_USER["email"], hash_password(DEFAULT_USER["password"])),
            )

        row = cursor.execute(
            "SELECT id FROM accounts WHERE account_number = ?",
            (DEFAULT_ACCOUNT["account_number"],),
        ).fetchone()
        if row:
            logger.info("Bank account number %s already exists", DEFAULT_ACCOUNT["account_number"])
        else:
            logger.info("Creating default bank account %s", DEFAULT_ACCOUNT["account_number"])
            cursor.execute(
                "INSERT INTO accounts (owner_name, account_number, bank, balance, password) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    DEFAULT_ACCOUNT["owner_name"],
                    DEFAULT_ACCOUNT["account_number"],
                    DEFAULT_ACCOUNT["bank"],
                    to_minor_units(DEFAULT_ACCOUNT["balance"]),
                    hash_password(DEFAULT_ACCOUNT["password"]),
                ),
            )
