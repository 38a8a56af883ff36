# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Pattern-based query classification."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Protocol

from mqlhelp.model import QueryAnalysis, QueryType

logger = logging.getLogger(__name__)

ERROR_CONTEXT = "error_diagnosis"

STOP_WORDS: frozenset[str] = frozenset(
    {
        "how",
        "to",
        "use",
        "the",
        "a",
        "an",
        "is",
        "are",
        "in",
        "on",
        "at",
        "如何",
        "怎么",
        "使用",
        "的",
        "了",
        "吗",
        "呢",
    }
)

_ERROR_CODE_PATTERN = re.compile(r"\b([A-Z]\d{3,4})\b")

_ERROR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"error[:\s]+([A-Z]\d+)[:\s]+([^'\"]+)", re.IGNORECASE),
    re.compile(r"\b([A-Z]\d{3,4})\b[:\s]+([^'\"]+)"),
    re.compile(r"undeclared\s+identifier\s+'?([a-z_][a-z0-9_]*)'?", re.IGNORECASE),
    re.compile(r"'([a-z_][a-z0-9_]*)'\s*-\s*undeclared", re.IGNORECASE),
)

_FUNCTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^([A-Z][a-zA-Z0-9_]+)(?:\(\))?$"),
    re.compile(r"how\s+to\s+use\s+([A-Z][a-zA-Z0-9_]+)", re.IGNORECASE),
)

_CLASS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^C?([A-Z][a-zA-Z0-9_]+)\s+class", re.IGNORECASE),
    re.compile(r"^C([A-Z][a-zA-Z0-9_]+)$"),
)

_HOWTO_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:how|如何|怎么|怎样)\s+(?:to|do|实现|做|用)", re.IGNORECASE),
    re.compile(r"(?:what|什么)\s+(?:is|are)", re.IGNORECASE),
)

_NON_WORD = re.compile(r"[^\w\s]")


class QueryMatcher(Protocol):
    """Define one step of the classification chain."""

    def match(self, query: str) -> QueryAnalysis | None:
        """Return an analysis when the query matches, else ``None``."""


@dataclass(frozen=True)
class PatternMatcher:
    """Match a query against patterns and build keywords from the capture.

    Attributes:
        query_type: Type assigned on match.
        patterns: Patterns tried in order; the first match wins.
        keywords_from: Builds keywords from the first capture group.
        context: Optional context tag assigned on match.
    """

    query_type: QueryType
    patterns: tuple[re.Pattern[str], ...]
    keywords_from: Callable[[str], list[str]]
    context: str | None = None

    def match(self, query: str) -> QueryAnalysis | None:
        stripped = query.strip()
        for pattern in self.patterns:
            found = pattern.search(stripped)
            if found:
                return QueryAnalysis(
                    type=self.query_type,
                    keywords=self.keywords_from(found.group(1)),
                    original_query=query,
                    context=self.context,
                )
        return None


@dataclass(frozen=True)
class PhraseMatcher:
    """Match question phrasing and derive keywords from the whole query."""

    query_type: QueryType
    patterns: tuple[re.Pattern[str], ...]

    def match(self, query: str) -> QueryAnalysis | None:
        if any(pattern.search(query) for pattern in self.patterns):
            return QueryAnalysis(
                type=self.query_type,
                keywords=extract_keywords(query),
                original_query=query,
            )
        return None


def extract_keywords(query: str) -> list[str]:
    """Tokenize a query into lookup keywords.

    Args:
        query: Raw query text.

    Returns:
        Lowercased tokens longer than two characters that are not stop words,
        in order of appearance. Duplicates are kept.
    """
    cleaned = _NON_WORD.sub(" ", query.lower())
    return [
        word for word in cleaned.split() if len(word) > 2 and word not in STOP_WORDS
    ]


def extract_error_code(query: str) -> str | None:
    """Return the first bare compiler error code in a query, if any."""
    found = _ERROR_CODE_PATTERN.search(query)
    return found.group(1) if found else None


def _single_lower(identifier: str) -> list[str]:
    return [identifier.lower()]


def _class_keywords(identifier: str) -> list[str]:
    lowered = identifier.lower()
    return [lowered, f"c{lowered}"]


DEFAULT_CHAIN: tuple[QueryMatcher, ...] = (
    PatternMatcher(
        query_type="error",
        patterns=_ERROR_PATTERNS,
        keywords_from=_single_lower,
        context=ERROR_CONTEXT,
    ),
    PatternMatcher(
        query_type="function",
        patterns=_FUNCTION_PATTERNS,
        keywords_from=_single_lower,
    ),
    PatternMatcher(
        query_type="class",
        patterns=_CLASS_PATTERNS,
        keywords_from=_class_keywords,
    ),
    PhraseMatcher(query_type="howto", patterns=_HOWTO_PATTERNS),
)


def classify(
    query: str, chain: tuple[QueryMatcher, ...] = DEFAULT_CHAIN
) -> QueryAnalysis:
    """Classify a query with the first matching step of the chain.

    Args:
        query: Raw query text.
        chain: Matchers evaluated in priority order.

    Returns:
        Query analysis; ``concept`` when no matcher applies.
    """
    for matcher in chain:
        analysis = matcher.match(query)
        if analysis is not None:
            logger.debug(
                f"Query classified (type={analysis.type} keywords={analysis.keywords})"
            )
            return analysis
    return QueryAnalysis(
        type="concept",
        keywords=extract_keywords(query),
        original_query=query,
    )
