"""
Document-style access to the SQLite tables.

Services never write SQL for plain CRUD; they go through a
:class:`DocumentStore` which exposes find-by-id, find-by-unique-field,
create, update, delete and an unfiltered listing.  Records are returned
as plain ``dict`` objects keyed by column name.

:class:`AccountStore` adds the two balance primitives used by the
account service: a compare-and-swap on the ``version`` column for a
single account and an all-or-nothing variant for several accounts.
"""

import logging
import sqlite3
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .db import get_connection
from .errors import DuplicateError, OperationFailedError
from .money import from_minor_units, to_minor_units

logger = logging.getLogger(__name__)


class DocumentStore:
    """CRUD access to a single table.

    Parameters
    ----------
    table : str
        Table name.
    fields : Iterable[str]
        Columns callers may set through ``create`` and ``update_fields``.
        Column names are interpolated into SQL, so only these are
        accepted.
    """

    def __init__(self, table: str, fields: Iterable[str]) -> None:
        self.table = table
        self.fields = frozenset(fields)

    def _check_fields(self, names: Iterable[str]) -> None:
        unknown = set(names) - self.fields
        if unknown:
            raise ValueError(f"Unknown {self.table} fields: {', '.join(sorted(unknown))}")

    def _decode(self, row: Optional[sqlite3.Row]) -> Optional[dict]:
        """Turn a row into the record handed to services."""
        return dict(row) if row is not None else None

    def _encode(self, values: Dict[str, object]) -> Dict[str, object]:
        """Turn service values into column values."""
        return values

    def find_by_id(self, record_id: int) -> Optional[dict]:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT * FROM {self.table} WHERE id = ?", (record_id,)
            ).fetchone()
            return self._decode(row)
        finally:
            conn.close()

    def find_one(self, field: str, value: object) -> Optional[dict]:
        """Return the record whose unique ``field`` equals ``value``."""
        self._check_fields([field])
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT * FROM {self.table} WHERE {field} = ?", (value,)
            ).fetchone()
            return self._decode(row)
        finally:
            conn.close()

    def list_all(self) -> List[dict]:
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT * FROM {self.table} ORDER BY id").fetchall()
            return [self._decode(row) for row in rows]
        finally:
            conn.close()

    def create(self, **values: object) -> int:
        """Insert a record and return its new id.

        Raises ``DuplicateError`` when a unique column already holds one
        of the values.
        """
        self._check_fields(values)
        values = self._encode(values)
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        conn = get_connection()
        try:
            cursor = conn.execute(
                f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            conn.commit()
            return cursor.lastrowid
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "UNIQUE" in str(e):
                raise DuplicateError(f"{self.table} record already exists") from e
            raise OperationFailedError(f"Failed to create {self.table} record") from e
        finally:
            conn.close()

    def update_fields(self, record_id: int, **values: object) -> bool:
        """Set the given columns on one record.

        Returns ``False`` when no record was updated.
        """
        if not values:
            return self.find_by_id(record_id) is not None
        self._check_fields(values)
        values = self._encode(values)
        assignments = ", ".join(f"{key} = ?" for key in values)
        conn = get_connection()
        try:
            cursor = conn.execute(
                f"UPDATE {self.table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (*values.values(), record_id),
            )
            conn.commit()
            return cursor.rowcount == 1
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "UNIQUE" in str(e):
                raise DuplicateError(f"{self.table} record already exists") from e
            raise OperationFailedError(f"Failed to update {self.table} record") from e
        finally:
            conn.close()

    def delete(self, record_id: int) -> bool:
        conn = get_connection()
        try:
            cursor = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))
            conn.commit()
            return cursor.rowcount == 1
        finally:
            conn.close()


BalanceChange = Tuple[int, int, Decimal]


class AccountStore(DocumentStore):
    """Store for bank accounts with version-checked balance writes.

    ``balance`` is an integer number of cents in the table and a
    two-place ``Decimal`` in every record this store returns or accepts.
    """

    def _decode(self, row: Optional[sqlite3.Row]) -> Optional[dict]:
        record = super()._decode(row)
        if record is not None:
            record["balance"] = from_minor_units(record["balance"])
        return record

    def _encode(self, values: Dict[str, object]) -> Dict[str, object]:
        if "balance" in values:
            values = {**values, "balance": to_minor_units(values["balance"])}
        return values

    def conditional_update_balance(self, account_id: int, expected_version: int, new_balance: Decimal) -> bool:
        """Write ``new_balance`` only if the account is still at ``expected_version``.

        Returns ``False`` when another writer got there first (or the
        account vanished); the caller re-reads and retries.
        """
        return self.apply_balance_changes([(account_id, expected_version, new_balance)])

    def apply_balance_changes(self, changes: List[BalanceChange]) -> bool:
        """Apply several ``(id, expected_version, new_balance)`` writes atomically.

        Either every account is at its expected version and all writes
        commit, or nothing is written and ``False`` is returned.
        """
        conn = get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            for account_id, expected_version, new_balance in changes:
                cursor = conn.execute(
                    "UPDATE accounts SET balance = ?, version = version + 1, "
                    "updated_at = CURRENT_TIMESTAMP WHERE id = ? AND version = ?",
                    (to_minor_units(new_balance), account_id, expected_version),
                )
                if cursor.rowcount != 1:
                    conn.rollback()
                    logger.debug("Version check failed for account %s", account_id)
                    return False
            conn.commit()
            return True
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise OperationFailedError("Balance update violates account constraints") from e
        finally:
            conn.close()


users = DocumentStore("users", ("name", "email", "password"))
accounts = AccountStore("accounts", ("owner_name", "account_number", "bank", "balance", "password"))

