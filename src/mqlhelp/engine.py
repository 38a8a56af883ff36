# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Query orchestration from classification to shaped answer."""

import logging

from mqlhelp.classifier import classify, extract_error_code
from mqlhelp.doc_index import DocumentLookup
from mqlhelp.extractor import extract
from mqlhelp.formatter import (
    format_detailed,
    format_error_record,
    format_no_result,
    format_quick,
)
from mqlhelp.knowledge import ErrorStore
from mqlhelp.migration import expand_keywords
from mqlhelp.model import ErrorSearchResult, QueryMode, SmartQueryResult
from mqlhelp.ranker import rank

logger = logging.getLogger(__name__)

QUICK_CANDIDATES = 1
DETAILED_CANDIDATES = 3


class QueryEngine:
    """Answer queries from the error store and the documentation index."""

    def __init__(self, index: DocumentLookup, error_store: ErrorStore) -> None:
        """Initialize the engine.

        Args:
            index: Documentation lookup index.
            error_store: Store of previously resolved compiler errors.
        """
        self._index = index
        self._error_store = error_store

    def query(self, text: str, mode: QueryMode = "quick") -> SmartQueryResult:
        """Answer a query.

        Error queries are answered from the error store when it knows the
        error; everything else, and store misses, are answered from the best
        matching document.

        Args:
            text: Error message, identifier or question.
            mode: ``quick`` for a compact answer, ``detailed`` for all fields.

        Returns:
            Shaped answer.

        Raises:
            ValueError: If ``mode`` is not supported.
            ErrorStoreError: If the error store cannot be read.
        """
        if mode not in ("quick", "detailed"):
            raise ValueError(f"Unsupported mode: {mode}")
        analysis = classify(text)

        keywords = analysis.keywords
        if analysis.type == "error":
            known = self._search_error_store(text)
            if known:
                top = known[0]
                logger.info(
                    f"Answered from error store (error_code={top.error_code} "
                    f"occurrence_count={top.occurrence_count})"
                )
                return format_error_record(top, mode)
            keywords = expand_keywords(keywords)

        limit = QUICK_CANDIDATES if mode == "quick" else DETAILED_CANDIDATES
        candidates = rank(keywords, self._index, limit)
        if not candidates:
            logger.info(f"No document matched (keywords={keywords})")
            return format_no_result(analysis, mode)

        primary = candidates[0]
        extracted = extract(primary.abs_path)
        if mode == "quick":
            return format_quick(extracted, analysis, primary.rel_path)
        related_docs = [candidate.rel_path for candidate in candidates[1:]]
        return format_detailed(extracted, analysis, primary.rel_path, related_docs)

    def _search_error_store(self, text: str) -> list[ErrorSearchResult]:
        error_code = extract_error_code(text)
        if error_code:
            return self._error_store.search_error(error_code)
        return self._error_store.search_similar_errors(text)
