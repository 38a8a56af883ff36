# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error knowledge store SQLite implementation."""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType
from typing import Callable, Literal

from mqlhelp.knowledge import (
    SEARCH_LIMIT,
    ErrorStoreError,
    ImportPayloadError,
    tokenize_search_text,
)
from mqlhelp.model import (
    ErrorRecord,
    ErrorReport,
    ErrorSearchResult,
    ErrorStats,
    ImportSummary,
)

logger = logging.getLogger(__name__)

MergeOutcome = Literal["imported", "updated"]

MAX_OCCURRENCE_COUNT = 2**63 - 1

_RECORD_COLUMNS = (
    "id, error_code, error_message, file_path, solution, related_docs, "
    "occurrence_count, first_seen, last_seen"
)
_RANKING_ORDER = "ORDER BY occurrence_count DESC, last_seen DESC"


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(tz=timezone.utc).isoformat()


class SQLiteErrorStore:
    """Persist compiler error records to a SQLite database.

    The connection is opened and the schema ensured on first use. Use the
    store as a context manager, or call ``close``, to release it.
    """

    def __init__(self, db_path: Path, clock: Callable[[], str] = utc_now) -> None:
        """Initialize the store without touching the database.

        Args:
            db_path: SQLite database file path.
            clock: Returns the timestamp recorded for new occurrences.
        """
        self._db_path = db_path
        self._clock = clock
        self._connection: sqlite3.Connection | None = None

    def __enter__(self) -> "SQLiteErrorStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection if it is open."""
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None
        logger.info(f"Error store closed (db_path={self._db_path})")

    def add_error(self, report: ErrorReport) -> ErrorRecord:
        """Insert a new error identity or count another occurrence of it.

        An existing record keeps its solution, file path and related docs
        unless the report supplies a value for them.

        Args:
            report: Observed error.

        Returns:
            The stored record after the write.

        Raises:
            ErrorStoreError: If the database operation fails.
        """
        connection = self._connect()
        now = self._clock()
        try:
            existing = connection.execute(
                "SELECT id FROM error_records WHERE error_code = ? AND error_message = ?",
                (report.error_code, report.error_message),
            ).fetchone()
            if existing is not None:
                record_id = int(existing["id"])
                connection.execute(
                    "UPDATE error_records "
                    "SET occurrence_count = occurrence_count + 1, "
                    "last_seen = ?, "
                    "solution = COALESCE(?, solution), "
                    "file_path = COALESCE(?, file_path), "
                    "related_docs = COALESCE(?, related_docs) "
                    "WHERE id = ?",
                    (
                        now,
                        report.solution,
                        report.file_path,
                        report.related_docs,
                        record_id,
                    ),
                )
            else:
                cursor = connection.execute(
                    "INSERT INTO error_records ("
                    "error_code, error_message, file_path, solution, related_docs, "
                    "occurrence_count, first_seen, last_seen"
                    ") VALUES (?, ?, ?, ?, ?, 1, ?, ?)",
                    (
                        report.error_code,
                        report.error_message,
                        report.file_path,
                        report.solution,
                        report.related_docs,
                        now,
                        now,
                    ),
                )
                if cursor.lastrowid is None:
                    raise ErrorStoreError("SQLite did not return an error record id.")
                record_id = int(cursor.lastrowid)
            connection.commit()
            row = connection.execute(
                f"SELECT {_RECORD_COLUMNS} FROM error_records WHERE id = ?",
                (record_id,),
            ).fetchone()
        except sqlite3.DatabaseError as exc:
            connection.rollback()
            logger.warning(
                f"Error record write failed (db_path={self._db_path} "
                f"error_code={report.error_code} error={exc})"
            )
            raise ErrorStoreError(str(exc)) from exc
        record = _to_record(row)
        logger.info(
            f"Error record stored (error_code={record.error_code} "
            f"occurrence_count={record.occurrence_count})"
        )
        return record

    def search_error(
        self, error_code: str, error_message: str | None = None
    ) -> list[ErrorSearchResult]:
        """Find errors by exact code and optional case-sensitive message part.

        Args:
            error_code: Exact error code.
            error_message: Substring the stored message must contain.

        Returns:
            At most ten results, most frequent and most recent first.
        """
        if error_message:
            rows = self._fetch(
                f"SELECT {_RECORD_COLUMNS} FROM error_records "
                f"WHERE error_code = ? AND instr(error_message, ?) > 0 "
                f"{_RANKING_ORDER} LIMIT ?",
                (error_code, error_message, SEARCH_LIMIT),
            )
        else:
            rows = self._fetch(
                f"SELECT {_RECORD_COLUMNS} FROM error_records "
                f"WHERE error_code = ? {_RANKING_ORDER} LIMIT ?",
                (error_code, SEARCH_LIMIT),
            )
        return [_to_search_result(row) for row in rows]

    def search_similar_errors(self, text: str) -> list[ErrorSearchResult]:
        """Find errors whose message or solution contains every token of ``text``.

        Args:
            text: Free text; tokens shorter than three characters are dropped.

        Returns:
            At most ten results ordered by relevance, then frequency and
            recency. Empty without querying storage when no token survives.
        """
        tokens = tokenize_search_text(text)
        if not tokens:
            return []
        conditions = " AND ".join(
            "(instr(lower(error_message), ?) > 0 "
            "OR instr(lower(COALESCE(solution, '')), ?) > 0)"
            for _ in tokens
        )
        params: list[object] = [value for token in tokens for value in (token, token)]
        params.append(SEARCH_LIMIT)
        rows = self._fetch(
            f"SELECT {_RECORD_COLUMNS} FROM error_records "
            f"WHERE {conditions} {_RANKING_ORDER} LIMIT ?",
            tuple(params),
        )
        results = [
            _to_search_result(row, relevance_score=_relevance(row, tokens))
            for row in rows
        ]
        results.sort(key=lambda result: result.relevance_score or 0.0, reverse=True)
        return results

    def list_common_errors(self, limit: int = SEARCH_LIMIT) -> list[ErrorRecord]:
        """List the most frequent errors.

        Raises:
            ValueError: If ``limit`` is not greater than zero.
        """
        if limit <= 0:
            raise ValueError("limit must be > 0")
        rows = self._fetch(
            f"SELECT {_RECORD_COLUMNS} FROM error_records {_RANKING_ORDER} LIMIT ?",
            (limit,),
        )
        return [_to_record(row) for row in rows]

    def export_errors(self, anonymize: bool = False) -> str:
        """Serialize every stored error to a JSON array.

        Args:
            anonymize: Drop ``file_path`` from every exported record.

        Returns:
            JSON text, most frequent errors first.
        """
        rows = self._fetch(
            f"SELECT {_RECORD_COLUMNS} FROM error_records "
            f"ORDER BY occurrence_count DESC, id ASC",
            (),
        )
        exported: list[dict[str, object]] = []
        for row in rows:
            item = dict(row)
            if anonymize:
                item.pop("file_path", None)
            exported.append(item)
        return json.dumps(exported, indent=2, ensure_ascii=False)

    def import_errors(self, payload: str) -> ImportSummary:
        """Merge a JSON array of error records into the store.

        Known identities keep the larger occurrence count, the earliest
        ``first_seen`` and the latest ``last_seen``; incoming solution and
        related docs replace stored ones when present. Records that fail are
        counted and skipped.

        Args:
            payload: JSON array as produced by ``export_errors``.

        Returns:
            Per-record outcome counters.

        Raises:
            ImportPayloadError: If the payload is not a JSON array.
        """
        try:
            items = json.loads(payload)
        except (json.JSONDecodeError, TypeError) as exc:
            raise ImportPayloadError(f"Failed to parse JSON: {exc}") from exc
        if not isinstance(items, list):
            raise ImportPayloadError(
                "Failed to parse JSON: expected an array of error records"
            )

        connection = self._connect()
        imported = 0
        updated = 0
        errors = 0
        for position, item in enumerate(items):
            try:
                outcome = self._merge_record(connection=connection, item=item)
                connection.commit()
            except (
                sqlite3.Error,
                KeyError,
                TypeError,
                ValueError,
                OverflowError,
            ) as exc:
                connection.rollback()
                errors += 1
                logger.warning(
                    f"Failed to import error record (position={position} error={exc!r})"
                )
                continue
            if outcome == "updated":
                updated += 1
            else:
                imported += 1
        logger.info(
            f"Error import completed (imported={imported} updated={updated} errors={errors})"
        )
        return ImportSummary(imported=imported, updated=updated, errors=errors)

    def get_stats(self) -> ErrorStats:
        """Return the number of identities and the sum of their occurrences."""
        rows = self._fetch(
            "SELECT COUNT(*) AS total_errors, "
            "COALESCE(SUM(occurrence_count), 0) AS total_occurrences "
            "FROM error_records",
            (),
        )
        return ErrorStats(
            total_errors=int(rows[0]["total_errors"]),
            total_occurrences=int(rows[0]["total_occurrences"]),
            store_location=str(self._db_path),
        )

    def _merge_record(
        self, connection: sqlite3.Connection, item: object
    ) -> MergeOutcome:
        """Merge one decoded import item.

        Raises:
            KeyError: If the identity fields are missing.
            TypeError: If the item, its identity fields or its timestamps have
                the wrong type.
            ValueError: If the occurrence count is not a positive integer that
                fits a SQLite INTEGER.
        """
        if not isinstance(item, dict):
            raise TypeError(f"error record must be an object, got {type(item).__name__}")
        error_code = item["error_code"]
        error_message = item["error_message"]
        if not isinstance(error_code, str) or not isinstance(error_message, str):
            raise TypeError("error_code and error_message must be strings")
        occurrence_count = item.get("occurrence_count")
        if occurrence_count is not None:
            occurrence_count = int(occurrence_count)
            if not 1 <= occurrence_count <= MAX_OCCURRENCE_COUNT:
                raise ValueError(
                    f"occurrence_count out of range: {occurrence_count}"
                )
        related_docs = _serialize_related_docs(item.get("related_docs"))
        first_seen, last_seen = _incoming_time_range(item)

        existing = connection.execute(
            "SELECT id FROM error_records WHERE error_code = ? AND error_message = ?",
            (error_code, error_message),
        ).fetchone()
        if existing is not None:
            connection.execute(
                "UPDATE error_records "
                "SET occurrence_count = MAX(occurrence_count, COALESCE(?, occurrence_count)), "
                "solution = COALESCE(?, solution), "
                "related_docs = COALESCE(?, related_docs), "
                "first_seen = MIN(first_seen, COALESCE(?, first_seen)), "
                "last_seen = MAX(last_seen, COALESCE(?, last_seen)) "
                "WHERE id = ?",
                (
                    occurrence_count,
                    item.get("solution"),
                    related_docs,
                    first_seen,
                    last_seen,
                    int(existing["id"]),
                ),
            )
            return "updated"

        now = self._clock()
        if first_seen is None:
            first_seen = now
        if last_seen is None:
            last_seen = now
        last_seen = max(first_seen, last_seen)
        connection.execute(
            "INSERT INTO error_records ("
            "error_code, error_message, file_path, solution, related_docs, "
            "occurrence_count, first_seen, last_seen"
            ") VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                error_code,
                error_message,
                item.get("file_path"),
                item.get("solution"),
                related_docs,
                occurrence_count or 1,
                first_seen,
                last_seen,
            ),
        )
        return "imported"

    def _fetch(self, sql: str, params: tuple[object, ...]) -> list[sqlite3.Row]:
        connection = self._connect()
        try:
            return connection.execute(sql, params).fetchall()
        except sqlite3.DatabaseError as exc:
            logger.warning(
                f"Error store query failed (db_path={self._db_path} error={exc})"
            )
            raise ErrorStoreError(str(exc)) from exc

    def _connect(self) -> sqlite3.Connection:
        """Open the database and ensure the schema on first use.

        Raises:
            ErrorStoreError: If the database cannot be opened or initialized.
        """
        if self._connection is not None:
            return self._connection
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(self._db_path)
        except (OSError, sqlite3.DatabaseError) as exc:
            logger.warning(
                f"Error store could not be opened (db_path={self._db_path} error={exc})"
            )
            raise ErrorStoreError(str(exc)) from exc
        connection.row_factory = sqlite3.Row
        try:
            connection.execute("PRAGMA journal_mode = WAL")
            self._ensure_schema(connection=connection)
            connection.commit()
        except sqlite3.DatabaseError as exc:
            connection.close()
            logger.warning(
                f"Error store schema setup failed (db_path={self._db_path} error={exc})"
            )
            raise ErrorStoreError(str(exc)) from exc
        self._connection = connection
        logger.info(f"Error store opened (db_path={self._db_path})")
        return connection

    def _ensure_schema(self, connection: sqlite3.Connection) -> None:
        """Create the error table and its indexes when missing.

        Args:
            connection: Open SQLite connection.
        """
        connection.execute(
            "CREATE TABLE IF NOT EXISTS error_records ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "error_code TEXT NOT NULL, "
            "error_message TEXT NOT NULL, "
            "file_path TEXT, "
            "solution TEXT, "
            "related_docs TEXT, "
            "occurrence_count INTEGER NOT NULL DEFAULT 1, "
            "first_seen TEXT NOT NULL, "
            "last_seen TEXT NOT NULL, "
            "UNIQUE(error_code, error_message)"
            ")"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_error_records_error_code "
            "ON error_records(error_code)"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_error_records_last_seen "
            "ON error_records(last_seen DESC)"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_error_records_occurrence_count "
            "ON error_records(occurrence_count DESC)"
        )


def _incoming_time_range(item: dict) -> tuple[str | None, str | None]:
    """Validate imported timestamps and order them so first_seen <= last_seen.

    Raises:
        TypeError: If a timestamp is present but not a string.
    """
    first_seen = item.get("first_seen")
    last_seen = item.get("last_seen")
    for name, value in (("first_seen", first_seen), ("last_seen", last_seen)):
        if value is not None and not isinstance(value, str):
            raise TypeError(f"{name} must be a string, got {type(value).__name__}")
    if first_seen and last_seen and first_seen > last_seen:
        last_seen = first_seen
    return first_seen or None, last_seen or None


def _serialize_related_docs(value: object) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list):
        return json.dumps(value, ensure_ascii=False)
    raise TypeError("related_docs must be a string or an array")


def _relevance(row: sqlite3.Row, tokens: list[str]) -> float:
    message = str(row["error_message"]).lower()
    solution = str(row["solution"] or "").lower()
    matched = sum(1 for token in tokens if token in message or token in solution)
    return matched / len(tokens)


def _to_record(row: sqlite3.Row) -> ErrorRecord:
    return ErrorRecord(
        id=int(row["id"]),
        error_code=row["error_code"],
        error_message=row["error_message"],
        file_path=row["file_path"],
        solution=row["solution"],
        related_docs=row["related_docs"],
        occurrence_count=int(row["occurrence_count"]),
        first_seen=row["first_seen"],
        last_seen=row["last_seen"],
    )


def _to_search_result(
    row: sqlite3.Row, relevance_score: float | None = None
) -> ErrorSearchResult:
    return ErrorSearchResult(
        id=int(row["id"]),
        error_code=row["error_code"],
        error_message=row["error_message"],
        file_path=row["file_path"],
        solution=row["solution"],
        related_docs=row["related_docs"],
        occurrence_count=int(row["occurrence_count"]),
        first_seen=row["first_seen"],
        last_seen=row["last_seen"],
        relevance_score=relevance_score,
    )
