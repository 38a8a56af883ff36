# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line tools for documentation lookup and the error knowledge store."""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Callable, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from mqlhelp.config import Settings, resolve_settings
from mqlhelp.database import SQLiteErrorStore
from mqlhelp.doc_index import DocumentIndex
from mqlhelp.engine import QueryEngine
from mqlhelp.knowledge import ErrorStoreError, ImportPayloadError
from mqlhelp.lookup import (
    CATEGORIES,
    DocSearchResult,
    UnknownCategoryError,
    browse,
    get_doc,
    search_docs,
)
from mqlhelp.model import ErrorReport, SmartQueryResult

logger = logging.getLogger(__name__)

RULE_WIDTH = 60
MAX_SOLUTION_PREVIEW = 100

CommandHandler = Callable[[argparse.Namespace, Settings, Console, TextIO], int]


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="mqlhelp")
    parser.add_argument(
        "--docs-root",
        action="append",
        default=None,
        help="Documentation tree as [NAME=]PATH; repeat for several trees.",
    )
    parser.add_argument("--db-path", required=False, help="Error store database file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    smart_query_parser = subparsers.add_parser("smart-query")
    smart_query_parser.add_argument(
        "query", help="Error message, function or class name, or question."
    )
    smart_query_parser.add_argument(
        "--mode",
        choices=("quick", "detailed"),
        default="quick",
        help="Answer verbosity.",
    )
    smart_query_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )

    search_parser = subparsers.add_parser("search")
    search_parser.add_argument("query", help="Keyword or error text.")
    search_parser.add_argument(
        "--limit", type=int, default=10, help="Maximum number of documents listed."
    )

    get_parser = subparsers.add_parser("get")
    get_parser.add_argument("filename", help="Document name, extension optional.")

    browse_parser = subparsers.add_parser("browse")
    browse_parser.add_argument(
        "--category",
        required=False,
        help=f"Category name: {', '.join(CATEGORIES)}.",
    )

    log_error_parser = subparsers.add_parser("log-error")
    log_error_parser.add_argument("--code", required=True, help="Error code, e.g. E512.")
    log_error_parser.add_argument(
        "--message", required=True, help="Full compiler error message."
    )
    log_error_parser.add_argument("--file-path", required=False, help="Source file path.")
    log_error_parser.add_argument("--solution", required=False, help="Remedy description.")
    log_error_parser.add_argument(
        "--related-docs", required=False, help="Related documents as a JSON array."
    )

    list_errors_parser = subparsers.add_parser("list-errors")
    list_errors_parser.add_argument(
        "--limit", type=int, default=10, help="Number of errors listed."
    )

    export_parser = subparsers.add_parser("export-errors")
    export_parser.add_argument(
        "--anonymize", action="store_true", help="Drop file paths from the export."
    )
    export_parser.add_argument(
        "--output", required=False, help="Write the JSON export to this file."
    )

    import_parser = subparsers.add_parser("import-errors")
    source_group = import_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--data", help="JSON array of error records.")
    source_group.add_argument("--input", help="File containing a JSON export.")

    subparsers.add_parser("error-stats")
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2

    try:
        settings = resolve_settings(doc_roots=args.docs_root, db_path=args.db_path)
    except ValueError as exc:
        logger.warning(f"Invalid settings (error={exc})")
        stderr.write(f"{exc}\n")
        return 2

    handler = _COMMANDS.get(args.command)
    if handler is None:
        logger.warning(f"Unsupported command (command={args.command})")
        stderr.write(f"Unsupported command: {args.command}\n")
        return 2

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    try:
        return handler(args, settings, console, stderr)
    except (
        ErrorStoreError,
        ImportPayloadError,
        UnknownCategoryError,
        ValueError,
        OSError,
    ) as exc:
        logger.warning(f"Command failed (command={args.command} error={exc})")
        stderr.write(f"Error: {exc}\n")
        return 1


def _run_smart_query(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    index = DocumentIndex(roots=list(settings.doc_roots))
    with SQLiteErrorStore(settings.db_path) as store:
        result = QueryEngine(index=index, error_store=store).query(
            args.query, mode=args.mode
        )
    if args.format == "json":
        _print_text(console, json.dumps(asdict(result), indent=2, ensure_ascii=False))
    else:
        _print_text(console, render_smart_query(query=args.query, result=result))
    return 0


def _run_search(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    if args.limit <= 0:
        stderr.write("limit must be > 0\n")
        return 2
    index = DocumentIndex(roots=list(settings.doc_roots))
    result = search_docs(args.query, index=index, limit=args.limit)
    _print_text(console, render_search(result))
    return 0


def _run_get(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    index = DocumentIndex(roots=list(settings.doc_roots))
    content = get_doc(args.filename, index=index)
    if content is None:
        search = search_docs(args.filename, index=index, limit=5)
        _print_text(
            console, f"Document not found: {args.filename}\n\n{render_search(search)}"
        )
        return 1
    document = content.document
    body = content.text
    if content.truncated:
        body += "\n\n... (content truncated)"
    console.rule(f"{document.rel_path} ({document.collection})", style=Style(color="cyan"))
    _print_text(console, body)
    console.rule(style=Style(color="cyan"))
    return 0


def _run_browse(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    categories = browse(args.category)
    if args.category is None:
        lines = ["Documentation categories", "=" * RULE_WIDTH, ""]
        lines.extend(f"{name}: {len(docs)} documents" for name, docs in categories.items())
        lines.extend(["", "Use --category to list the documents of a category."])
    else:
        name, docs = next(iter(categories.items()))
        lines = [name.upper(), "=" * RULE_WIDTH, ""]
        lines.extend(f"  - {doc}.htm" for doc in docs)
    _print_text(console, "\n".join(lines))
    return 0


def _run_log_error(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    report = ErrorReport(
        error_code=args.code,
        error_message=args.message,
        file_path=args.file_path,
        solution=args.solution,
        related_docs=args.related_docs,
    )
    with SQLiteErrorStore(settings.db_path) as store:
        record = store.add_error(report)
        location = store.get_stats().store_location
    lines = [
        "Error recorded",
        "=" * RULE_WIDTH,
        "",
        f"Error code: {record.error_code}",
        f"Error message: {record.error_message}",
        f"Occurrences: {record.occurrence_count}",
        f"First seen: {record.first_seen}",
        f"Last seen: {record.last_seen}",
    ]
    if record.solution:
        lines.extend(["", "Solution:", record.solution])
    if record.related_docs:
        lines.extend(["", "Related docs:", record.related_docs])
    lines.extend(["", f"Store location: {location}"])
    _print_text(console, "\n".join(lines))
    return 0


def _run_list_errors(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    with SQLiteErrorStore(settings.db_path) as store:
        records = store.list_common_errors(limit=args.limit)
        stats = store.get_stats()
    if not records:
        _print_text(
            console,
            "Error database is empty\n\nTip: record compiler errors with log-error",
        )
        return 0

    table = Table(
        title=f"Most common errors (top {len(records)})",
        show_lines=True,
        expand=True,
    )
    table.add_column("#", justify="right")
    table.add_column("code")
    table.add_column("message", ratio=4, overflow="fold")
    table.add_column("occurrences", justify="right")
    table.add_column("last_seen", overflow="fold")
    table.add_column("solution", ratio=3, overflow="fold")
    for position, record in enumerate(records, start=1):
        solution = record.solution or ""
        if len(solution) > MAX_SOLUTION_PREVIEW:
            solution = solution[:MAX_SOLUTION_PREVIEW] + "..."
        table.add_row(
            str(position),
            record.error_code,
            record.error_message,
            str(record.occurrence_count),
            record.last_seen,
            solution,
        )
    console.print(table)
    _print_text(
        console,
        render_stats(stats.total_errors, stats.total_occurrences, stats.store_location),
    )
    return 0


def _run_export_errors(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    with SQLiteErrorStore(settings.db_path) as store:
        payload = store.export_errors(anonymize=args.anonymize)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload, encoding="utf-8")
        logger.info(f"Error export written (output_path={output_path})")
        _print_text(console, f"Exported error database to {output_path}")
        return 0
    _print_text(console, payload)
    return 0


def _run_import_errors(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    payload = args.data
    if args.input:
        payload = Path(args.input).read_text(encoding="utf-8")
    with SQLiteErrorStore(settings.db_path) as store:
        summary = store.import_errors(payload)
        stats = store.get_stats()
    lines = [
        "Error import completed",
        "=" * RULE_WIDTH,
        "",
        f"Imported: {summary.imported}",
        f"Updated: {summary.updated}",
    ]
    if summary.errors > 0:
        lines.append(f"Failed: {summary.errors}")
    lines.extend(
        [
            "",
            f"Total error types: {stats.total_errors}",
            f"Total occurrences: {stats.total_occurrences}",
        ]
    )
    _print_text(console, "\n".join(lines))
    return 0


def _run_error_stats(
    args: argparse.Namespace, settings: Settings, console: Console, stderr: TextIO
) -> int:
    with SQLiteErrorStore(settings.db_path) as store:
        stats = store.get_stats()
    _print_text(
        console,
        render_stats(stats.total_errors, stats.total_occurrences, stats.store_location),
    )
    return 0


_COMMANDS: dict[str, CommandHandler] = {
    "smart-query": _run_smart_query,
    "search": _run_search,
    "get": _run_get,
    "browse": _run_browse,
    "log-error": _run_log_error,
    "list-errors": _run_list_errors,
    "export-errors": _run_export_errors,
    "import-errors": _run_import_errors,
    "error-stats": _run_error_stats,
}


def render_smart_query(query: str, result: SmartQueryResult) -> str:
    """Render a query answer as text.

    Args:
        query: Query as entered.
        result: Shaped answer.

    Returns:
        Multi-line text block.
    """
    lines = [
        "Smart query result",
        "=" * RULE_WIDTH,
        "",
        f"Query: {query}",
        f"Mode: {result.mode}",
        f"Estimated tokens: ~{result.estimated_tokens}",
        "-" * RULE_WIDTH,
        "",
        "Answer:",
        result.answer,
    ]
    sections = (
        ("Syntax", result.syntax),
        ("Parameters", result.parameters),
        ("Returns", result.returns),
        ("Example", result.code or result.example),
    )
    for title, value in sections:
        if value:
            lines.extend(["", f"{title}:", value])
    if result.notes:
        lines.extend(["", "Notes:"])
        lines.extend(
            f"{position}. {note}"
            for position, note in enumerate(result.notes, start=1)
        )
    lines.extend(["", f"Reference: {result.reference}"])
    if result.related_docs:
        lines.extend(["", "Related docs:"])
        lines.extend(f"  - {doc}" for doc in result.related_docs)
    return "\n".join(lines)


def render_search(result: DocSearchResult) -> str:
    """Render a document search outcome as text."""
    lines = [f'Search: "{result.query}"', ""]
    if result.hints:
        lines.extend(f"- {hint}" for hint in result.hints)
        lines.append("")
    if result.exact is not None:
        exact = result.exact
        lines.extend([f"Exact match: {exact.rel_path}  (source: {exact.collection})", ""])
    if result.matches:
        lines.append(f"Related documents ({len(result.matches)} / {result.total}):")
        lines.extend(
            f"  {position}. {match.document.rel_path}  ({match.document.collection})"
            for position, match in enumerate(result.matches, start=1)
        )
    elif result.exact is None:
        lines.append("No matching documents")
        if result.suggestions:
            lines.append(f"Did you mean: {', '.join(result.suggestions)}")
        lines.append("Tip: use English identifiers such as OrderSend or CopyBuffer")
    return "\n".join(lines)


def render_stats(total_errors: int, total_occurrences: int, store_location: str) -> str:
    """Render error store statistics as text."""
    average = total_occurrences / total_errors if total_errors > 0 else 0.0
    return "\n".join(
        [
            "Error database statistics",
            "=" * RULE_WIDTH,
            "",
            f"Total error types: {total_errors}",
            f"Total occurrences: {total_occurrences}",
            f"Average occurrences per error: {average:.1f}",
            f"Store location: {store_location}",
        ]
    )


def _print_text(console: Console, text: str) -> None:
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
