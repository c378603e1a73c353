"""SQLite-backed account storage."""

from __future__ import annotations

import contextlib
import sqlite3
import uuid
from datetime import UTC, datetime
from pathlib import Path
from threading import RLock


class DuplicateAccountError(Exception):
    """Raised when an account with the same email already exists."""


class AccountStore:
    """SQLite-backed account storage with thread-safe transactions."""

    _SELECT_COLUMNS_SQL = "SELECT account_id, name, email, password_hash, created_at FROM accounts"

    def __init__(self, db_path: str) -> None:
        self._lock = RLock()
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        self._db.row_factory = sqlite3.Row
        self._db.execute("PRAGMA journal_mode=WAL")
        self._db.execute("PRAGMA busy_timeout=5000")
        self._init_schema()

    def _init_schema(self) -> None:
        with self._lock:
            self._db.executescript(
                """
                CREATE TABLE IF NOT EXISTS accounts (
                    account_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );
                """
            )
            self._db.commit()

    @staticmethod
    def _row_to_account(row: sqlite3.Row) -> dict[str, str]:
        return {
            "account_id": str(row["account_id"]),
            "name": str(row["name"]),
            "email": str(row["email"]),
            "password_hash": str(row["password_hash"]),
            "created_at": str(row["created_at"]),
        }

    def insert(self, name: str, email: str, password_hash: str) -> dict[str, str]:
        """Insert a new account. Returns the stored account record."""
        account_id = f"a-{uuid.uuid4()}"
        created_at = datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")

        with self._lock:
            try:
                self._db.execute("BEGIN IMMEDIATE")
                self._db.execute(
                    "INSERT INTO accounts (account_id, name, email, password_hash, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (account_id, name, email, password_hash, created_at),
                )
                self._db.commit()
            except sqlite3.IntegrityError as exc:
                with contextlib.suppress(sqlite3.Error):
                    self._db.execute("ROLLBACK")
                error_msg = str(exc).lower()
                if "unique" in error_msg:
                    raise DuplicateAccountError("Email already registered") from exc
                raise
            except Exception:
                with contextlib.suppress(sqlite3.Error):
                    self._db.execute("ROLLBACK")
                raise

        return {
            "account_id": account_id,
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "created_at": created_at,
        }

    def get_by_id(self, account_id: str) -> dict[str, str] | None:
        """Look up a single account by ID. Returns None if not found."""
        with self._lock:
            cursor = self._db.execute(
                self._SELECT_COLUMNS_SQL + " WHERE account_id = ?",  # nosec B608
                (account_id,),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_account(row)

    def get_by_email(self, email: str) -> dict[str, str] | None:
        """Look up a single account by email, ignoring case."""
        with self._lock:
            cursor = self._db.execute(
                self._SELECT_COLUMNS_SQL + " WHERE email = ?",  # nosec B608
                (email,),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_account(row)

    def count(self) -> int:
        """Count registered accounts."""
        with self._lock:
            row = self._db.execute("SELECT COUNT(*) FROM accounts").fetchone()
        return int(row[0]) if row is not None else 0

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._db.close()
