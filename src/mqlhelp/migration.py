# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Legacy API migration hints used by error diagnosis and document search."""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class MigrationHint:
    """Describe how a legacy identifier maps onto the current API.

    Attributes:
        replacement: Current identifier to use instead.
        hint: Human-readable explanation.
        target_keys: Index keys of documents covering the replacement.
    """

    replacement: str
    hint: str
    target_keys: tuple[str, ...]


MIGRATION_HINTS: dict[str, MigrationHint] = {
    "resultcode": MigrationHint(
        replacement="ResultRetcode",
        hint="CTrade result methods were renamed; use ResultRetcode()",
        target_keys=("ctrade", "trade"),
    ),
    "symbol()": MigrationHint(
        replacement="_Symbol",
        hint="the Symbol() call is replaced by the predefined _Symbol variable",
        target_keys=("_symbol", "symbol"),
    ),
    "period()": MigrationHint(
        replacement="_Period",
        hint="the Period() call is replaced by the predefined _Period variable",
        target_keys=("_period", "period"),
    ),
    "ima": MigrationHint(
        replacement="IndicatorCreate",
        hint="iMA handles are usually built through IndicatorCreate",
        target_keys=("indicatorcreate", "icustom"),
    ),
}

_UNDECLARED_PATTERN = re.compile(
    r"undeclared\s+identifier\s+['\"]?([a-z_][a-z0-9_]*)['\"]?", re.IGNORECASE
)


def undeclared_identifier(query: str) -> str | None:
    """Return the lowercased identifier of an "undeclared identifier" message."""
    found = _UNDECLARED_PATTERN.search(query)
    return found.group(1).lower() if found else None


def hints_for_query(query: str) -> list[str]:
    """Build diagnosis and migration suggestions for a query.

    Args:
        query: Raw query or compiler message.

    Returns:
        Suggestion lines, diagnosis first.
    """
    lowered = query.lower()
    lines: list[str] = []
    missing = undeclared_identifier(query)
    if missing and missing in MIGRATION_HINTS:
        hint = MIGRATION_HINTS[missing]
        lines.append(
            f"Diagnosis: undeclared identifier '{missing}' should probably be "
            f"'{hint.replacement}' ({hint.hint})"
        )
    for legacy, hint in MIGRATION_HINTS.items():
        if legacy in lowered:
            lines.append(
                f"Migration: '{legacy}' -> '{hint.replacement}' ({hint.hint})"
            )
    return lines


def expansion_keys(query: str) -> set[str]:
    """Return index keys related to every hint the query triggers."""
    lowered = query.lower()
    keys: set[str] = set()
    for legacy, hint in MIGRATION_HINTS.items():
        if legacy in lowered:
            keys.update(hint.target_keys)
    missing = undeclared_identifier(query)
    if missing and missing in MIGRATION_HINTS:
        keys.update(MIGRATION_HINTS[missing].target_keys)
    return keys


def expand_keywords(keywords: list[str]) -> list[str]:
    """Follow each legacy keyword with its lowercased replacement.

    Args:
        keywords: Keywords produced by classification.

    Returns:
        Keywords with replacements inserted; order is preserved.
    """
    expanded: list[str] = []
    for keyword in keywords:
        expanded.append(keyword)
        hint = MIGRATION_HINTS.get(keyword)
        if hint is not None:
            replacement = hint.replacement.lower()
            if replacement not in keywords and replacement not in expanded:
                expanded.append(replacement)
    return expanded
