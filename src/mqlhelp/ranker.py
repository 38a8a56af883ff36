# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Keyword scoring of indexed documents."""

import logging
from dataclasses import dataclass

from mqlhelp.doc_index import DocumentLookup
from mqlhelp.model import DocumentDescriptor

logger = logging.getLogger(__name__)

EXACT_MATCH_SCORE = 100
KEY_CONTAINS_KEYWORD_SCORE = 50
KEYWORD_CONTAINS_KEY_SCORE = 25


@dataclass(frozen=True)
class RankedDocument:
    """Represent one scored index entry."""

    key: str
    document: DocumentDescriptor
    score: int


def score_key(key: str, keywords: list[str]) -> int:
    """Score one lookup key against all keywords.

    Args:
        key: Normalized lookup key.
        keywords: Query keywords.

    Returns:
        Sum of per-keyword scores; zero means no match.
    """
    score = 0
    for keyword in keywords:
        if key == keyword:
            score += EXACT_MATCH_SCORE
        elif keyword in key:
            score += KEY_CONTAINS_KEYWORD_SCORE
        elif key in keyword:
            score += KEYWORD_CONTAINS_KEY_SCORE
    return score


def rank_entries(
    keywords: list[str], index: DocumentLookup, limit: int
) -> list[RankedDocument]:
    """Score every index entry and keep the best ``limit`` ones.

    Ties keep index enumeration order.
    """
    scored: list[RankedDocument] = []
    for key, document in index.entries():
        score = score_key(key, keywords)
        if score > 0:
            scored.append(RankedDocument(key=key, document=document, score=score))
    scored.sort(key=lambda ranked: ranked.score, reverse=True)
    logger.debug(
        f"Ranked documents (keywords={keywords} candidates={len(scored)} limit={limit})"
    )
    return scored[:limit]


def rank(
    keywords: list[str], index: DocumentLookup, limit: int = 3
) -> list[DocumentDescriptor]:
    """Return the best matching documents for the keywords.

    Args:
        keywords: Query keywords.
        index: Document index to scan.
        limit: Maximum number of documents returned.

    Returns:
        Documents sorted by descending score.
    """
    return [ranked.document for ranked in rank_entries(keywords, index, limit)]
