"""SQLite persistence for generation records.

Each row in the ``generations`` table is one user-submitted generation
request.  The store only knows about rows and columns; lifecycle rules
(which status may follow which) live in the orchestrator, with one
exception: :meth:`GenerationStore.patch` accepts an ``expected_status``
guard so a terminal update can never be applied twice.

Every operation opens its own connection and commits in a single
transaction, so concurrent readers only ever see committed record states.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from contextlib import closing
from pathlib import Path
from typing import Any

from .exceptions import RecordNotFoundError, RecordStateError

logger = logging.getLogger(__name__)

# Columns written once, at insertion.
INSERT_COLUMNS = (
    "prompt",
    "model",
    "provider",
    "aspect_ratio",
    "resolution",
    "output_format",
    "num_images",
    "status",
    "created_at",
    "updated_at",
)

# Columns that may change after insertion.
PATCH_COLUMNS = ("status", "image_urls", "request_id", "error", "updated_at")

COUNTABLE_COLUMNS = ("status", "provider", "model")


class GenerationStore:
    """Manage the generations table in a SQLite database.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: Path):
        """Initialize the store, creating the schema if needed.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized generations database at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with closing(self._connect()) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS generations (
                    id TEXT PRIMARY KEY,
                    prompt TEXT NOT NULL,
                    model TEXT NOT NULL,
                    provider TEXT NOT NULL,
                    aspect_ratio TEXT NOT NULL,
                    resolution TEXT NOT NULL,
                    output_format TEXT NOT NULL,
                    num_images INTEGER NOT NULL,
                    status TEXT NOT NULL,
                    image_urls TEXT,
                    request_id TEXT,
                    error TEXT,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """)

            # Gallery listing reads newest first
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_generations_created_at
                ON generations(created_at DESC)
                """)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> dict[str, Any]:
        record = dict(row)
        if record["image_urls"] is not None:
            record["image_urls"] = json.loads(record["image_urls"])
        return record

    def insert(self, fields: dict[str, Any]) -> str:
        """Insert a new record and return its id.

        Args:
            fields: Values for every column in ``INSERT_COLUMNS``.

        Returns:
            The newly assigned record id.

        Raises:
            KeyError: If a required column is missing.
        """
        missing = [column for column in INSERT_COLUMNS if column not in fields]
        if missing:
            raise KeyError(f"Missing generation fields: {', '.join(missing)}")

        record_id = uuid.uuid4().hex
        columns = ("id", *INSERT_COLUMNS)
        values = (record_id, *(fields[column] for column in INSERT_COLUMNS))
        placeholders = ", ".join("?" for _ in columns)

        with closing(self._connect()) as conn, conn:
            conn.execute(
                f"INSERT INTO generations ({', '.join(columns)}) VALUES ({placeholders})",
                values,
            )

        logger.debug(f"Inserted generation record {record_id}")
        return record_id

    def patch(
        self,
        record_id: str,
        fields: dict[str, Any],
        *,
        expected_status: str | None = None,
    ) -> None:
        """Update mutable fields of a record.

        Args:
            record_id: Id of the record to update.
            fields: Column values to set; keys must be in ``PATCH_COLUMNS``.
            expected_status: If given, the update only applies while the
                record still has this status.

        Raises:
            ValueError: If *fields* is empty or names an immutable column.
            RecordNotFoundError: If no record has *record_id*.
            RecordStateError: If *expected_status* does not match.
        """
        if not fields:
            raise ValueError("patch requires at least one field")
        invalid = [column for column in fields if column not in PATCH_COLUMNS]
        if invalid:
            raise ValueError(f"Cannot patch generation fields: {', '.join(invalid)}")

        values = dict(fields)
        if "image_urls" in values and values["image_urls"] is not None:
            values["image_urls"] = json.dumps(list(values["image_urls"]))

        assignments = ", ".join(f"{column} = ?" for column in values)
        params: list[Any] = [*values.values(), record_id]
        query = f"UPDATE generations SET {assignments} WHERE id = ?"
        if expected_status is not None:
            query += " AND status = ?"
            params.append(expected_status)

        with closing(self._connect()) as conn, conn:
            cursor = conn.execute(query, params)
            if cursor.rowcount > 0:
                return

            row = conn.execute(
                "SELECT status FROM generations WHERE id = ?", (record_id,)
            ).fetchone()

        if row is None:
            raise RecordNotFoundError(record_id)
        raise RecordStateError(record_id, row["status"])

    def get(self, record_id: str) -> dict[str, Any]:
        """Return a single record.

        Raises:
            RecordNotFoundError: If no record has *record_id*.
        """
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT * FROM generations WHERE id = ?", (record_id,)
            ).fetchone()

        if row is None:
            raise RecordNotFoundError(record_id)
        return self._row_to_record(row)

    def query_by_created_at_desc(self, limit: int) -> list[dict[str, Any]]:
        """Return up to *limit* records, newest first.

        Records created in the same instant are ordered by insertion order,
        most recent first.
        """
        with closing(self._connect()) as conn:
            rows = conn.execute(
                """
                SELECT * FROM generations
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (max(0, int(limit)),),
            ).fetchall()

        return [self._row_to_record(row) for row in rows]

    def count_by(self, column: str) -> dict[str, int]:
        """Count records grouped by *column*.

        Raises:
            ValueError: If *column* is not one of ``COUNTABLE_COLUMNS``.
        """
        if column not in COUNTABLE_COLUMNS:
            raise ValueError(f"Cannot group generations by {column!r}")

        with closing(self._connect()) as conn:
            rows = conn.execute(
                f"SELECT {column}, COUNT(*) FROM generations GROUP BY {column}"
            ).fetchall()

        return {row[0]: row[1] for row in rows}
