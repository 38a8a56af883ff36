# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for answer shaping."""

from mqlhelp.formatter import (
    format_detailed,
    format_error_record,
    format_no_result,
    format_quick,
    parse_related_docs,
)
from mqlhelp.model import ErrorRecord, ExtractedInfo, QueryAnalysis


def _analysis(query_type: str, keywords: list[str] | None = None) -> QueryAnalysis:
    return QueryAnalysis(
        type=query_type,  # type: ignore[arg-type]
        keywords=keywords or ["ordersend"],
        original_query="OrderSend",
    )


def _record(**overrides: object) -> ErrorRecord:
    values: dict[str, object] = {
        "id": 1,
        "error_code": "E512",
        "error_message": "undeclared identifier 'ResultCode'",
        "file_path": None,
        "solution": "use ResultRetcode()",
        "related_docs": '["ctrade.htm"]',
        "occurrence_count": 3,
        "first_seen": "2026-01-01T00:00:00+00:00",
        "last_seen": "2026-01-03T00:00:00+00:00",
    }
    values.update(overrides)
    return ErrorRecord(**values)  # type: ignore[arg-type]


def test_fmt_001_quick_function_answer_prefers_syntax() -> None:
    extracted = ExtractedInfo(
        syntax="bool OrderSend(MqlTradeRequest& request)",
        description="Sends trade requests.",
        example="x" * 300,
    )

    result = format_quick(extracted, _analysis("function"), "ordersend.htm")

    assert result.mode == "quick"
    assert result.answer == "bool OrderSend(MqlTradeRequest& request)"
    assert result.code == "x" * 200
    assert result.reference == "ordersend.htm"
    assert result.estimated_tokens == 500
    assert result.syntax is None
    assert result.related_docs is None


def test_fmt_002_quick_function_answer_falls_back_to_description_then_placeholder() -> None:
    described = ExtractedInfo(description="d" * 150)

    assert format_quick(described, _analysis("class"), "doc").answer == "d" * 100
    assert (
        format_quick(ExtractedInfo(), _analysis("function"), "doc").answer
        == "Function/class reference"
    )


def test_fmt_003_quick_error_answer_suggests_syntax() -> None:
    extracted = ExtractedInfo(
        syntax="uint ResultRetcode()", description="Gets the result code."
    )

    result = format_quick(extracted, _analysis("error", ["resultcode"]), "ctrade.htm")

    assert result.answer == (
        "Error diagnosis\n\nGets the result code.\n\nSuggested fix:\n"
        "use: uint ResultRetcode()\n"
    )
    assert result.code is None


def test_fmt_004_quick_other_answer_uses_description_or_placeholder() -> None:
    assert (
        format_quick(ExtractedInfo(description="e" * 250), _analysis("howto"), "doc").answer
        == "e" * 200
    )
    assert (
        format_quick(ExtractedInfo(), _analysis("concept"), "doc").answer
        == "Query result"
    )


def test_fmt_005_detailed_answer_carries_fields_and_caps_related_docs() -> None:
    extracted = ExtractedInfo(
        syntax="bool OrderSend()",
        parameters="request",
        returns="true on success",
        example="OrderSend(request, result);",
        notes=["first note text"],
        description="Sends trade requests.",
    )

    result = format_detailed(
        extracted, _analysis("function"), "ordersend.htm", ["a", "b", "c", "d"]
    )

    assert result.mode == "detailed"
    assert result.answer == "Sends trade requests."
    assert result.syntax == "bool OrderSend()"
    assert result.parameters == "request"
    assert result.returns == "true on success"
    assert result.example == "OrderSend(request, result);"
    assert result.code is None
    assert result.notes == ["first note text"]
    assert result.related_docs == ["a", "b", "c"]
    assert result.estimated_tokens == 1500


def test_fmt_006_detailed_answer_without_description_uses_placeholder() -> None:
    result = format_detailed(ExtractedInfo(), _analysis("concept"), "doc")

    assert result.answer == "Detailed reference"
    assert result.related_docs == []
    assert result.notes == []


def test_fmt_007_no_result_lists_keywords() -> None:
    result = format_no_result(_analysis("concept", ["magic", "number"]), "detailed")

    assert result.mode == "detailed"
    assert result.answer == "No matching documents found, keywords: magic, number"
    assert result.reference == "none"
    assert result.estimated_tokens == 100


def test_fmt_008_error_record_answer_references_error_database() -> None:
    result = format_error_record(_record(), "quick")

    assert result.reference == "error database"
    assert result.answer.startswith(
        "Solution found in error database (seen 3 times)\n\n"
        "Error: E512 - undeclared identifier 'ResultCode'\n\n"
        "Solution:\nuse ResultRetcode()\n\n"
    )
    assert result.answer.endswith("query the documentation for more details")
    assert result.related_docs == ["ctrade.htm"]
    assert result.estimated_tokens == len(result.answer) // 4


def test_fmt_009_error_record_without_solution_omits_section() -> None:
    result = format_error_record(_record(solution=None, related_docs=None), "detailed")

    assert "Solution:" not in result.answer
    assert "Related docs:" not in result.answer
    assert result.related_docs == []
    assert result.mode == "detailed"


def test_fmt_010_related_docs_parsing_tolerates_plain_text() -> None:
    assert parse_related_docs('["a.htm", "b.htm"]') == ["a.htm", "b.htm"]
    assert parse_related_docs("ctrade.htm") == ["ctrade.htm"]
    assert parse_related_docs('{"a": 1}') == ['{"a": 1}']
    assert parse_related_docs(None) == []
