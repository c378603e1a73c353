"""SQLite-backed task storage."""

from __future__ import annotations

import contextlib
import sqlite3
from pathlib import Path
from threading import RLock
from typing import Any


def _casefold_contains(haystack: str | None, needle: str | None) -> int:
    if haystack is None or needle is None:
        return 0
    return int(needle.casefold() in haystack.casefold())


class TaskStore:
    """
    SQLite-backed storage for tasks.

    Every read that returns task data and every write takes an ``owner_id``
    and applies it as a WHERE predicate. ``get_task`` is the only lookup by
    id alone and exists for the ownership guard.
    """

    _TASK_COLUMNS: tuple[str, ...] = (
        "task_id",
        "owner_id",
        "title",
        "description",
        "status",
        "priority",
        "due_date",
        "created_at",
        "updated_at",
    )
    _UPDATABLE_COLUMNS: frozenset[str] = frozenset(
        {"title", "description", "status", "priority", "due_date", "updated_at"}
    )
    _TASK_INSERT_SQL = (
        "INSERT INTO tasks ("
        "task_id, owner_id, title, description, status, priority, due_date, "
        "created_at, updated_at"
        ") VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"
    )
    _TASK_SELECT_BASE_SQL = (
        "SELECT task_id, owner_id, title, description, status, priority, due_date, "
        "created_at, updated_at FROM tasks"
    )

    # Whitelisted ORDER BY expressions; caller input never reaches SQL text.
    _PRIORITY_RANK_SQL = "CASE priority WHEN 'low' THEN 0 WHEN 'medium' THEN 1 ELSE 2 END"
    _SORT_EXPRESSIONS: dict[str, str] = {
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "dueDate": "due_date",
        "priority": _PRIORITY_RANK_SQL,
    }
    _TIE_BREAK_SQL = "created_at ASC, task_id ASC"

    def __init__(self, db_path: str) -> None:
        self._lock = RLock()
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        self._db.row_factory = sqlite3.Row
        self._db.create_function("casefold_contains", 2, _casefold_contains, deterministic=True)
        self._db.execute("PRAGMA journal_mode=WAL")
        self._db.execute("PRAGMA busy_timeout=5000")
        self._init_schema()

    def _init_schema(self) -> None:
        with self._lock:
            self._db.executescript(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    task_id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    priority TEXT NOT NULL DEFAULT 'medium',
                    due_date TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_tasks_owner_status ON tasks (owner_id, status);
                CREATE INDEX IF NOT EXISTS idx_tasks_owner_priority ON tasks (owner_id, priority);
                CREATE INDEX IF NOT EXISTS idx_tasks_owner_due_date ON tasks (owner_id, due_date);
                """
            )
            self._db.commit()

    def _row_to_task(self, row: sqlite3.Row) -> dict[str, Any]:
        return {column: row[column] for column in self._TASK_COLUMNS}

    @staticmethod
    def _filter_clauses(
        owner_id: str,
        status: str | None,
        priority: str | None,
        search: str | None,
    ) -> tuple[str, list[object]]:
        clauses = ["owner_id = ?"]
        params: list[object] = [owner_id]
        if status is not None:
            clauses.append("status = ?")
            params.append(status)
        if priority is not None:
            clauses.append("priority = ?")
            params.append(priority)
        if search is not None:
            clauses.append(
                "(casefold_contains(title, ?) OR casefold_contains(description, ?))"
            )
            params.extend([search, search])
        return " WHERE " + " AND ".join(clauses), params

    def insert_task(self, task_data: dict[str, Any]) -> None:
        """Insert a new task row."""
        values = tuple(task_data[column] for column in self._TASK_COLUMNS)

        with self._lock:
            try:
                self._db.execute("BEGIN IMMEDIATE")
                self._db.execute(self._TASK_INSERT_SQL, values)
                self._db.commit()
            except Exception:
                with contextlib.suppress(sqlite3.Error):
                    self._db.execute("ROLLBACK")
                raise

    def get_task(self, task_id: str) -> dict[str, Any] | None:
        """Fetch a task by ID regardless of owner."""
        with self._lock:
            cursor = self._db.execute(
                self._TASK_SELECT_BASE_SQL + " WHERE task_id = ?",  # nosec B608
                (task_id,),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    def get_owned_task(self, task_id: str, owner_id: str) -> dict[str, Any] | None:
        """Fetch a task by ID only if it belongs to the owner."""
        with self._lock:
            cursor = self._db.execute(
                self._TASK_SELECT_BASE_SQL + " WHERE task_id = ? AND owner_id = ?",  # nosec B608
                (task_id, owner_id),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    def update_task(self, task_id: str, owner_id: str, updates: dict[str, Any]) -> int:
        """Update task columns and return the number of affected rows."""
        if len(updates) == 0:
            return 0

        if any(column not in self._UPDATABLE_COLUMNS for column in updates):
            msg = "Attempted to update unknown or immutable task column"
            raise ValueError(msg)

        set_clause = ", ".join(f"{column} = ?" for column in updates)
        params: list[object] = list(updates.values())
        query = (
            "UPDATE tasks SET " + set_clause + " WHERE task_id = ? AND owner_id = ?"  # nosec B608
        )
        params.extend([task_id, owner_id])

        with self._lock:
            cursor = self._db.execute(query, params)
            self._db.commit()
        return int(cursor.rowcount)

    def delete_task(self, task_id: str, owner_id: str) -> int:
        """Delete a task and return the number of affected rows."""
        with self._lock:
            cursor = self._db.execute(
                "DELETE FROM tasks WHERE task_id = ? AND owner_id = ?",
                (task_id, owner_id),
            )
            self._db.commit()
        return int(cursor.rowcount)

    def query_tasks(
        self,
        owner_id: str,
        *,
        status: str | None,
        priority: str | None,
        search: str | None,
        sort_by: str,
        sort_order: str,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        """List one page of an owner's tasks matching the filters."""
        if sort_by not in self._SORT_EXPRESSIONS or sort_order not in ("asc", "desc"):
            msg = f"Unsupported sort: {sort_by} {sort_order}"
            raise ValueError(msg)

        where_sql, params = self._filter_clauses(owner_id, status, priority, search)
        direction = sort_order.upper()
        order_terms: list[str] = []
        if sort_by == "dueDate":
            # Tasks without a due date go last in both directions
            order_terms.append("due_date IS NULL ASC")
        order_terms.append(f"{self._SORT_EXPRESSIONS[sort_by]} {direction}")
        order_terms.append(self._TIE_BREAK_SQL)

        query = (
            self._TASK_SELECT_BASE_SQL
            + where_sql
            + " ORDER BY "
            + ", ".join(order_terms)
            + " LIMIT ? OFFSET ?"
        )  # nosec B608
        params.extend([limit, offset])

        with self._lock:
            rows = self._db.execute(query, params).fetchall()
        return [self._row_to_task(row) for row in rows]

    def count_matching(
        self,
        owner_id: str,
        *,
        status: str | None,
        priority: str | None,
        search: str | None,
    ) -> int:
        """Count an owner's tasks matching the filters, ignoring pagination."""
        where_sql, params = self._filter_clauses(owner_id, status, priority, search)
        with self._lock:
            row = self._db.execute(
                "SELECT COUNT(*) FROM tasks" + where_sql,  # nosec B608
                params,
            ).fetchone()
        return int(row[0]) if row is not None else 0

    def count_by_status(self, owner_id: str) -> dict[str, int]:
        """Count an owner's tasks grouped by status."""
        with self._lock:
            rows = self._db.execute(
                "SELECT status, COUNT(*) FROM tasks WHERE owner_id = ? GROUP BY status",
                (owner_id,),
            ).fetchall()
        return {str(row[0]): int(row[1]) for row in rows}

    def count_by_priority(self, owner_id: str) -> dict[str, int]:
        """Count an owner's tasks grouped by priority."""
        with self._lock:
            rows = self._db.execute(
                "SELECT priority, COUNT(*) FROM tasks WHERE owner_id = ? GROUP BY priority",
                (owner_id,),
            ).fetchall()
        return {str(row[0]): int(row[1]) for row in rows}

    def count_overdue(self, owner_id: str, now_iso: str) -> int:
        """Count an owner's unfinished tasks whose due date is before ``now_iso``."""
        with self._lock:
            row = self._db.execute(
                "SELECT COUNT(*) FROM tasks WHERE owner_id = ? AND due_date IS NOT NULL "
                "AND due_date < ? AND status != 'completed'",
                (owner_id, now_iso),
            ).fetchone()
        return int(row[0]) if row is not None else 0

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._db.close()
