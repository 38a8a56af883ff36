# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error knowledge store contracts."""

from typing import Protocol

from mqlhelp.model import (
    ErrorRecord,
    ErrorReport,
    ErrorSearchResult,
    ErrorStats,
    ImportSummary,
)

SEARCH_LIMIT = 10
MIN_TOKEN_LENGTH = 3


class ErrorStoreError(RuntimeError):
    """Represent a fatal error store read or write failure."""


class ImportPayloadError(ValueError):
    """Represent an import payload that is not a JSON array of records."""


def tokenize_search_text(text: str) -> list[str]:
    """Split free text into lowercased tokens of at least three characters."""
    return [token for token in text.lower().split() if len(token) >= MIN_TOKEN_LENGTH]


class ErrorStore(Protocol):
    """Define the operations of the error knowledge store."""

    def add_error(self, report: ErrorReport) -> ErrorRecord:
        """Insert a new error identity or count another occurrence."""

    def search_error(
        self, error_code: str, error_message: str | None = None
    ) -> list[ErrorSearchResult]:
        """Find errors by exact code and optional message substring."""

    def search_similar_errors(self, text: str) -> list[ErrorSearchResult]:
        """Find errors whose message or solution contains every token."""

    def list_common_errors(self, limit: int = SEARCH_LIMIT) -> list[ErrorRecord]:
        """List the most frequent errors."""

    def export_errors(self, anonymize: bool = False) -> str:
        """Serialize every stored error to a JSON array."""

    def import_errors(self, payload: str) -> ImportSummary:
        """Merge a JSON array of errors into the store."""

    def get_stats(self) -> ErrorStats:
        """Return aggregate statistics."""

    def close(self) -> None:
        """Release the underlying storage handle."""
