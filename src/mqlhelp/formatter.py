# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Answer shaping for quick and detailed query modes."""

import json

from mqlhelp.model import (
    ErrorRecord,
    ExtractedInfo,
    QueryAnalysis,
    QueryMode,
    SmartQueryResult,
)

QUICK_ESTIMATED_TOKENS = 500
DETAILED_ESTIMATED_TOKENS = 1500
NO_RESULT_ESTIMATED_TOKENS = 100
MAX_RELATED_DOCS = 3
QUICK_CODE_LENGTH = 200

ERROR_DATABASE_REFERENCE = "error database"
NO_REFERENCE = "none"

FUNCTION_PLACEHOLDER = "Function/class reference"
QUICK_PLACEHOLDER = "Query result"
DETAILED_PLACEHOLDER = "Detailed reference"


def _quick_answer(extracted: ExtractedInfo, analysis: QueryAnalysis) -> str:
    description = extracted.description
    if analysis.type == "error":
        answer = "Error diagnosis\n\n"
        if description:
            answer += f"{description[:150]}\n"
        answer += "\nSuggested fix:\n"
        if extracted.syntax:
            answer += f"use: {extracted.syntax}\n"
        return answer
    if analysis.type in ("function", "class"):
        return extracted.syntax or (description or "")[:100] or FUNCTION_PLACEHOLDER
    return (description or "")[:200] or QUICK_PLACEHOLDER


def format_quick(
    extracted: ExtractedInfo,
    analysis: QueryAnalysis,
    document_name: str,
    related_docs: list[str] | None = None,
) -> SmartQueryResult:
    """Build a compact answer.

    Args:
        extracted: Fields extracted from the primary document.
        analysis: Classification of the query.
        document_name: Reference name of the primary document.
        related_docs: Unused in quick mode.

    Returns:
        Quick-mode result.
    """
    return SmartQueryResult(
        mode="quick",
        answer=_quick_answer(extracted, analysis),
        code=extracted.example[:QUICK_CODE_LENGTH] if extracted.example else None,
        reference=document_name,
        estimated_tokens=QUICK_ESTIMATED_TOKENS,
    )


def format_detailed(
    extracted: ExtractedInfo,
    analysis: QueryAnalysis,
    document_name: str,
    related_docs: list[str] | None = None,
) -> SmartQueryResult:
    """Build a complete answer carrying every extracted field.

    Args:
        extracted: Fields extracted from the primary document.
        analysis: Classification of the query.
        document_name: Reference name of the primary document.
        related_docs: Names of further candidate documents.

    Returns:
        Detailed-mode result.
    """
    return SmartQueryResult(
        mode="detailed",
        answer=extracted.description or DETAILED_PLACEHOLDER,
        syntax=extracted.syntax,
        parameters=extracted.parameters,
        returns=extracted.returns,
        example=extracted.example,
        notes=list(extracted.notes),
        reference=document_name,
        related_docs=list(related_docs or [])[:MAX_RELATED_DOCS],
        estimated_tokens=DETAILED_ESTIMATED_TOKENS,
    )


def format_no_result(analysis: QueryAnalysis, mode: QueryMode) -> SmartQueryResult:
    """Build the answer returned when no document matches."""
    return SmartQueryResult(
        mode=mode,
        answer=f"No matching documents found, keywords: {', '.join(analysis.keywords)}",
        reference=NO_REFERENCE,
        estimated_tokens=NO_RESULT_ESTIMATED_TOKENS,
    )


def parse_related_docs(related_docs: str | None) -> list[str]:
    """Decode a stored related-docs value into a list of names.

    Args:
        related_docs: Stored value, normally a JSON array of strings.

    Returns:
        Document names; a value that is not a JSON array is returned as a
        single item.
    """
    if not related_docs:
        return []
    try:
        decoded = json.loads(related_docs)
    except json.JSONDecodeError:
        return [related_docs]
    if not isinstance(decoded, list):
        return [related_docs]
    return [str(item) for item in decoded]


def format_error_record(record: ErrorRecord, mode: QueryMode) -> SmartQueryResult:
    """Build an answer from a previously stored error resolution.

    Args:
        record: Best matching stored error.
        mode: Requested answer mode.

    Returns:
        Result referencing the error database.
    """
    answer = (
        f"Solution found in error database (seen {record.occurrence_count} times)\n\n"
        f"Error: {record.error_code} - {record.error_message}\n\n"
    )
    if record.solution:
        answer += f"Solution:\n{record.solution}\n\n"
    if record.related_docs:
        answer += f"Related docs:\n{record.related_docs}\n\n"
    answer += "Tip: if this solution does not help, query the documentation for more details"
    return SmartQueryResult(
        mode=mode,
        answer=answer,
        reference=ERROR_DATABASE_REFERENCE,
        related_docs=parse_related_docs(record.related_docs),
        estimated_tokens=len(answer) // 4,
    )
