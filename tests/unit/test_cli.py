# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the mqlhelp CLI."""

import io
import json
import re
from pathlib import Path

from cli.mqlhelp_cli import run


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _base_args(tmp_path: Path) -> list[str]:
    help_root = tmp_path / "MQL5_HELP"
    _write_file(
        help_root / "OrderSend.htm",
        "<h1>OrderSend</h1>\n<p>Sends trade requests.</p>\n"
        "<pre>bool OrderSend(MqlTradeRequest&amp; request)</pre>\n",
    )
    return [
        "--docs-root",
        f"MQL5_HELP={help_root}",
        "--db-path",
        str(tmp_path / "store" / "errors.db"),
    ]


def _run(argv: list[str]) -> tuple[int, str, str]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    exit_code = run(argv, stdout=stdout, stderr=stderr)
    return exit_code, _strip_ansi(stdout.getvalue()), stderr.getvalue()


def test_cli_001_requires_command() -> None:
    exit_code, _, _ = _run([])

    assert exit_code == 2


def test_cli_002_rejects_empty_docs_root() -> None:
    exit_code, _, stderr = _run(["--docs-root", "=", "error-stats"])

    assert exit_code == 2
    assert "Documentation root path is empty" in stderr


def test_cli_003_smart_query_prints_text_answer(tmp_path: Path) -> None:
    exit_code, output, _ = _run(_base_args(tmp_path) + ["smart-query", "OrderSend"])

    assert exit_code == 0
    assert "Query: OrderSend" in output
    assert "Mode: quick" in output
    assert "Estimated tokens: ~500" in output
    assert "bool OrderSend(MqlTradeRequest& request)" in output
    assert "Reference: OrderSend.htm" in output


def test_cli_004_smart_query_supports_json_output(tmp_path: Path) -> None:
    exit_code, output, _ = _run(
        _base_args(tmp_path)
        + ["smart-query", "OrderSend", "--mode", "detailed", "--format", "json"]
    )

    assert exit_code == 0
    payload = json.loads(output)
    assert payload["mode"] == "detailed"
    assert payload["reference"] == "OrderSend.htm"
    assert payload["syntax"] == "bool OrderSend(MqlTradeRequest& request)"
    assert payload["related_docs"] == []


def test_cli_005_search_and_get_documents(tmp_path: Path) -> None:
    base = _base_args(tmp_path)

    search_code, search_output, _ = _run(base + ["search", "ordersend"])
    get_code, get_output, _ = _run(base + ["get", "OrderSend"])

    assert search_code == 0
    assert "Exact match: OrderSend.htm  (source: MQL5_HELP)" in search_output
    assert "Related documents (1 / 1):" in search_output
    assert get_code == 0
    assert "Sends trade requests." in get_output


def test_cli_006_get_unknown_document_fails_with_suggestions(tmp_path: Path) -> None:
    exit_code, output, _ = _run(_base_args(tmp_path) + ["get", "OrderSnd"])

    assert exit_code == 1
    assert "Document not found: OrderSnd" in output
    assert "Did you mean: ordersend" in output


def test_cli_007_search_rejects_non_positive_limit(tmp_path: Path) -> None:
    exit_code, _, stderr = _run(_base_args(tmp_path) + ["search", "x", "--limit", "0"])

    assert exit_code == 2
    assert "limit must be > 0" in stderr


def test_cli_008_browse_unknown_category_fails(tmp_path: Path) -> None:
    ok_code, output, _ = _run(_base_args(tmp_path) + ["browse", "--category", "math"])
    exit_code, _, stderr = _run(_base_args(tmp_path) + ["browse", "--category", "weather"])

    assert ok_code == 0
    assert "  - mathabs.htm" in output
    assert exit_code == 1
    assert "Unknown category: weather" in stderr


def test_cli_009_logged_errors_are_listed_with_stats(tmp_path: Path) -> None:
    base = _base_args(tmp_path)
    log_args = base + [
        "log-error",
        "--code",
        "E512",
        "--message",
        "undeclared identifier 'x'",
        "--solution",
        "declare x",
    ]

    _run(log_args)
    exit_code, log_output, _ = _run(log_args)
    list_code, list_output, _ = _run(base + ["list-errors"])

    assert exit_code == 0
    assert "Occurrences: 2" in log_output
    assert list_code == 0
    assert "E512" in list_output
    assert "Total error types: 1" in list_output
    assert "Average occurrences per error: 2.0" in list_output


def test_cli_010_empty_store_reports_empty_list_and_zero_stats(tmp_path: Path) -> None:
    base = _base_args(tmp_path)

    list_code, list_output, _ = _run(base + ["list-errors"])
    stats_code, stats_output, _ = _run(base + ["error-stats"])

    assert list_code == 0
    assert "Error database is empty" in list_output
    assert stats_code == 0
    assert "Total error types: 0" in stats_output
    assert "Average occurrences per error: 0.0" in stats_output


def test_cli_011_export_file_imports_into_another_store(tmp_path: Path) -> None:
    base = _base_args(tmp_path)
    export_path = tmp_path / "export" / "errors.json"
    _run(base + ["log-error", "--code", "E100", "--message", "one"])

    export_code, _, _ = _run(
        base + ["export-errors", "--anonymize", "--output", str(export_path)]
    )
    other_store = str(tmp_path / "other.db")
    import_code, import_output, _ = _run(
        ["--db-path", other_store, "import-errors", "--input", str(export_path)]
    )

    assert export_code == 0
    assert "file_path" not in export_path.read_text(encoding="utf-8")
    assert import_code == 0
    assert "Imported: 1" in import_output
    assert "Updated: 0" in import_output
    assert "Failed" not in import_output


def test_cli_012_malformed_import_payload_fails(tmp_path: Path) -> None:
    exit_code, _, stderr = _run(
        _base_args(tmp_path) + ["import-errors", "--data", "not json"]
    )

    assert exit_code == 1
    assert "Error: Failed to parse JSON" in stderr
