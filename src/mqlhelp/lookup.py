# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Document search, retrieval and category browsing."""

import logging
from dataclasses import dataclass
from pathlib import Path

import Levenshtein

from mqlhelp.doc_index import DocumentIndex, document_key
from mqlhelp.migration import expansion_keys, hints_for_query
from mqlhelp.model import DocumentDescriptor
from mqlhelp.text import strip_html

logger = logging.getLogger(__name__)

EXPANSION_SCORE = 0.95
SUGGESTION_THRESHOLD = 0.75
MAX_SUGGESTIONS = 5
MAX_MARKDOWN_LENGTH = 15000
MAX_HTML_TEXT_LENGTH = 10000

CATEGORIES: dict[str, list[str]] = {
    "trading": ["ordersend", "ordercheck", "ctrade", "positionselect"],
    "indicators": ["icustom", "copybuffer", "indicatorcreate", "setindexbuffer"],
    "math": ["mathabs", "mathsin", "mathcos", "mathrandom", "mathpow"],
    "array": ["arrayresize", "arraycopy", "arraysort", "arrayinitialize"],
    "string": ["stringfind", "stringsplit", "stringreplace", "stringformat"],
    "datetime": ["timecurrent", "timelocal", "timetostruct", "timegmt"],
    "files": ["fileopen", "fileclose", "filewrite", "fileread"],
    "chart": ["chartopen", "chartredraw", "chartid", "chartsetinteger"],
    "objects": ["objectcreate", "objectdelete", "objectsetinteger"],
    "onnx": ["onnxcreate", "onnxrun", "onnxrelease", "MQL5_ONNX_Integration_Guide"],
}


class UnknownCategoryError(KeyError):
    """Represent a browse request for a category that does not exist."""

    def __init__(self, category: str) -> None:
        super().__init__(category)
        self.category = category
        self.available = sorted(CATEGORIES)

    def __str__(self) -> str:
        return f"Unknown category: {self.category} (available: {', '.join(self.available)})"


@dataclass(frozen=True)
class DocMatch:
    """Represent one scored search hit."""

    key: str
    document: DocumentDescriptor
    score: float


@dataclass(frozen=True)
class DocSearchResult:
    """Represent the outcome of a document search.

    Attributes:
        query: Query as supplied.
        hints: Diagnosis and migration suggestions.
        exact: Document registered under the lowercased query, if any.
        matches: Best matches, at most ``limit``.
        total: Number of matches before truncation.
        suggestions: Close index keys offered when nothing matched.
    """

    query: str
    hints: list[str]
    exact: DocumentDescriptor | None
    matches: list[DocMatch]
    total: int
    suggestions: list[str]


@dataclass(frozen=True)
class DocContent:
    """Represent a retrieved document body."""

    document: DocumentDescriptor
    text: str
    truncated: bool


def search_docs(query: str, index: DocumentIndex, limit: int = 10) -> DocSearchResult:
    """Search index keys for a query, including migration targets.

    Args:
        query: Keyword or compiler error text.
        index: Document index.
        limit: Maximum number of matches returned.

    Returns:
        Search outcome.
    """
    lowered = query.lower().strip()
    expansions = expansion_keys(query)
    matches: list[DocMatch] = []
    for key, document in index.entries():
        if key == lowered:
            score = 1.0
        elif lowered and lowered in key:
            score = len(lowered) / max(2, len(key))
        elif key in expansions:
            score = EXPANSION_SCORE
        else:
            continue
        matches.append(DocMatch(key=key, document=document, score=score))
    matches.sort(key=lambda match: match.score, reverse=True)
    exact = index.get(lowered)

    suggestions: list[str] = []
    if not matches and exact is None:
        suggestions = suggest_keys(lowered, index.keys())
    logger.debug(
        f"Document search completed (query={query!r} matches={len(matches)} "
        f"suggestions={len(suggestions)})"
    )
    return DocSearchResult(
        query=query,
        hints=hints_for_query(query),
        exact=exact,
        matches=matches[:limit],
        total=len(matches),
        suggestions=suggestions,
    )


def suggest_keys(query: str, keys: list[str]) -> list[str]:
    """Return index keys spelled similarly to ``query``, closest first."""
    if not query:
        return []
    scored = [(float(Levenshtein.ratio(query, key)), key) for key in keys]
    close = [item for item in scored if item[0] >= SUGGESTION_THRESHOLD]
    close.sort(key=lambda item: (-item[0], item[1]))
    return [key for _, key in close[:MAX_SUGGESTIONS]]


def get_doc(filename: str, index: DocumentIndex) -> DocContent | None:
    """Load a document by key or file name.

    Args:
        filename: Document name, with or without extension.
        index: Document index.

    Returns:
        Document text, or ``None`` when no document is registered.

    Raises:
        OSError: If the document cannot be read.
    """
    name = filename.strip()
    document = index.get(document_key(name)) or index.get_by_name(name)
    if document is None:
        logger.info(f"Document not found (filename={filename})")
        return None
    content = Path(document.abs_path).read_text(encoding="utf-8", errors="replace")
    if document.abs_path.lower().endswith(".md"):
        limit = MAX_MARKDOWN_LENGTH
        text = content
    else:
        limit = MAX_HTML_TEXT_LENGTH
        text = strip_html(content)
    truncated = len(text) > limit
    return DocContent(document=document, text=text[:limit], truncated=truncated)


def browse(category: str | None = None) -> dict[str, list[str]]:
    """List documentation categories or the documents of one category.

    Args:
        category: Category name; ``None`` lists every category.

    Returns:
        Category name to document keys.

    Raises:
        UnknownCategoryError: If the category does not exist.
    """
    if category is None:
        return {name: list(docs) for name, docs in CATEGORIES.items()}
    docs = CATEGORIES.get(category.lower())
    if docs is None:
        raise UnknownCategoryError(category)
    return {category.lower(): list(docs)}
