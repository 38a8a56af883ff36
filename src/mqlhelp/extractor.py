# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Heuristic field extraction from documentation pages."""

import logging
import re
from pathlib import Path

from mqlhelp.model import ExtractedInfo
from mqlhelp.text import parse_markup, strip_html, strip_tags

logger = logging.getLogger(__name__)

MAX_SYNTAX_LENGTH = 200
MAX_PARAMETERS_LENGTH = 400
MAX_RETURNS_LENGTH = 200
MAX_EXAMPLE_LENGTH = 500
MAX_NOTE_LENGTH = 150
MIN_NOTE_LENGTH = 11
MAX_NOTES = 3
MAX_DESCRIPTION_LENGTH = 300
EXAMPLE_TRUNCATION_MARKER = "\n// ..."

_RETURN_TYPES = "bool|int|long|double|string|void|ulong|uint|ushort|datetime|color"

_SYNTAX_PATTERN = re.compile(
    rf"((?i:virtual\s+)?\b(?i:{_RETURN_TYPES})\s+[A-Z][a-zA-Z0-9_]*\s*\([^)]*\))"
)

_PARAMETERS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"^[ \t]*Parameters?[:\s]*\n([^\n]+(?:\n(?!\n)[^\n]+)*)",
        re.IGNORECASE | re.MULTILINE,
    ),
    re.compile(r"^[ \t]*参数[:：\s]*\n([^\n]+(?:\n(?!\n)[^\n]+)*)", re.MULTILINE),
)

_RETURNS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"^[ \t]*Return(?:s|ed)?\s+value[:\s]*\n?([^\n]+)",
        re.IGNORECASE | re.MULTILINE,
    ),
    re.compile(r"^[ \t]*Returns?[:\s]*\n?([^\n]+)", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^[ \t]*返回值?[:：\s]*\n?([^\n]+)", re.MULTILINE),
)

_EXAMPLE_HEADER_PATTERN = re.compile(
    r"Example[:\s]*\n?(.{0,500})", re.IGNORECASE | re.DOTALL
)

_NOTES_PATTERN = re.compile(
    r"(?:\bNote|\bImportant|\bWarning|注意)[:：\s]+([^\n]+)", re.IGNORECASE
)

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_WHITESPACE = re.compile(r"\s+")


def extract_syntax(markup: str) -> str | None:
    """Extract the first function signature from raw markup."""
    found = _SYNTAX_PATTERN.search(markup)
    if not found:
        return None
    signature = strip_tags(found.group(1))
    return _WHITESPACE.sub(" ", signature).strip()[:MAX_SYNTAX_LENGTH]


def extract_parameters(text: str) -> str | None:
    """Extract the block following a parameters header from plain text."""
    for pattern in _PARAMETERS_PATTERNS:
        found = pattern.search(text)
        if found:
            return found.group(1).strip()[:MAX_PARAMETERS_LENGTH]
    return None


def extract_returns(text: str) -> str | None:
    """Extract the first line following a return value header from plain text."""
    for pattern in _RETURNS_PATTERNS:
        found = pattern.search(text)
        if found:
            return found.group(1).strip()[:MAX_RETURNS_LENGTH]
    return None


def extract_example(markup: str) -> str | None:
    """Extract the first code block, or the text after an example header.

    Args:
        markup: Raw document content.

    Returns:
        Tag-free example text; longer snippets are cut and marked.
    """
    soup = parse_markup(markup)
    block = soup.find("pre") or soup.find("code")
    if block is not None:
        code = block.get_text().strip()
    else:
        found = _EXAMPLE_HEADER_PATTERN.search(markup)
        if not found:
            return None
        code = strip_tags(found.group(1)).strip()
    if len(code) > MAX_EXAMPLE_LENGTH:
        code = code[:MAX_EXAMPLE_LENGTH] + EXAMPLE_TRUNCATION_MARKER
    return code


def extract_notes(text: str) -> list[str]:
    """Extract up to three cautionary notes in document order.

    Notes shorter than eleven characters are discarded as noise.
    """
    notes: list[str] = []
    for found in _NOTES_PATTERN.finditer(text):
        note = found.group(1).strip()
        if len(note) < MIN_NOTE_LENGTH:
            continue
        notes.append(note[:MAX_NOTE_LENGTH])
        if len(notes) == MAX_NOTES:
            break
    return notes


def extract_description(text: str) -> str | None:
    """Join the first two paragraphs of plain text into a short description."""
    paragraphs = [part for part in _PARAGRAPH_BREAK.split(text) if part.strip()]
    if not paragraphs:
        return None
    joined = " ".join(_WHITESPACE.sub(" ", part).strip() for part in paragraphs[:2])
    return joined[:MAX_DESCRIPTION_LENGTH]


def extract_from_content(markup: str) -> ExtractedInfo:
    """Extract every field from already loaded document content.

    Args:
        markup: Raw document content (HTML or Markdown).

    Returns:
        Extracted fields; absent fields are ``None``.
    """
    text = strip_html(markup)
    return ExtractedInfo(
        syntax=extract_syntax(markup),
        parameters=extract_parameters(text),
        returns=extract_returns(text),
        example=extract_example(markup),
        notes=extract_notes(text),
        description=extract_description(text),
    )


def extract(document_path: str | Path) -> ExtractedInfo:
    """Read a document and extract its fields.

    Extraction is best effort: unreadable documents yield an empty result.

    Args:
        document_path: Absolute document location.

    Returns:
        Extracted fields.
    """
    try:
        markup = Path(document_path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning(
            f"Skipping extraction due to read failure (path={document_path} error={exc})"
        )
        return ExtractedInfo()
    return extract_from_content(markup)
