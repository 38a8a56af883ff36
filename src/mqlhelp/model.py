# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for documentation lookup and the error knowledge store."""

from dataclasses import dataclass, field
from typing import Literal

QueryType = Literal["error", "function", "class", "howto", "concept"]
QueryMode = Literal["quick", "detailed"]


@dataclass(frozen=True)
class DocumentDescriptor:
    """Represent one indexed documentation file.

    Attributes:
        abs_path: Absolute file location.
        rel_path: Location relative to its documentation root.
        collection: Name of the documentation root the file belongs to.
    """

    abs_path: str
    rel_path: str
    collection: str


@dataclass(frozen=True)
class QueryAnalysis:
    """Represent the classification of one query.

    Attributes:
        type: Detected query category.
        keywords: Lookup keywords in order of appearance.
        original_query: Query text as supplied by the caller.
        context: Optional classification context tag.
    """

    type: QueryType
    keywords: list[str]
    original_query: str
    context: str | None = None


@dataclass(frozen=True)
class ExtractedInfo:
    """Represent fields extracted from one document."""

    syntax: str | None = None
    parameters: str | None = None
    returns: str | None = None
    example: str | None = None
    notes: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass(frozen=True)
class SmartQueryResult:
    """Represent a shaped answer for one query.

    Attributes:
        mode: Verbosity contract used to build the answer.
        answer: Main answer text.
        reference: Document name, ``error database`` or ``none``.
        estimated_tokens: Approximate token cost of the answer.
        syntax: Extracted signature.
        parameters: Extracted parameter description.
        returns: Extracted return value description.
        example: Full example snippet (detailed mode).
        code: Shortened example snippet (quick mode).
        notes: Cautionary notes.
        related_docs: Related document names.
    """

    mode: QueryMode
    answer: str
    reference: str
    estimated_tokens: int
    syntax: str | None = None
    parameters: str | None = None
    returns: str | None = None
    example: str | None = None
    code: str | None = None
    notes: list[str] | None = None
    related_docs: list[str] | None = None


@dataclass(frozen=True)
class ErrorReport:
    """Describe one observed compiler error before it is stored.

    Attributes:
        error_code: Compiler error code, for example ``E512``.
        error_message: Full compiler message.
        file_path: Source file the error was reported for.
        solution: Remedy description.
        related_docs: JSON array of related document names.
    """

    error_code: str
    error_message: str
    file_path: str | None = None
    solution: str | None = None
    related_docs: str | None = None


@dataclass(frozen=True)
class ErrorRecord:
    """Represent one stored error identity and its history."""

    id: int
    error_code: str
    error_message: str
    file_path: str | None
    solution: str | None
    related_docs: str | None
    occurrence_count: int
    first_seen: str
    last_seen: str


@dataclass(frozen=True)
class ErrorSearchResult(ErrorRecord):
    """Represent a stored error returned by a search.

    ``relevance_score`` is only set by fuzzy search and lies in [0.0, 1.0].
    """

    relevance_score: float | None = None


@dataclass(frozen=True)
class ImportSummary:
    """Represent per-record outcome counters of one import."""

    imported: int
    updated: int
    errors: int


@dataclass(frozen=True)
class ErrorStats:
    """Represent aggregate error store statistics."""

    total_errors: int
    total_occurrences: int
    store_location: str
