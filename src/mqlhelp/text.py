"""Markup to plain text conversion helpers."""

import re

from bs4 import BeautifulSoup

_DROPPED_TAGS = ["script", "style"]
_LINE_TAGS = ["li", "tr", "dt", "dd"]
_BLOCK_TAGS = [
    "p",
    "div",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "table",
    "pre",
    "ul",
    "ol",
    "blockquote",
    "section",
]
_HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")
_BLANK_RUNS = re.compile(r"\n{3,}")


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse HTML or Markdown content with the standard library parser backend."""
    return BeautifulSoup(markup, "html.parser")


def strip_html(markup: str) -> str:
    """Convert HTML or Markdown markup to plain text.

    Line breaks survive as newlines and block boundaries as blank lines so
    header-based extraction can rely on line structure.

    Args:
        markup: Raw document content.

    Returns:
        Plain text with collapsed whitespace.
    """
    soup = parse_markup(markup)
    for tag in soup(_DROPPED_TAGS):
        tag.decompose()
    for tag in soup.find_all("br"):
        tag.replace_with("\n")
    for tag in soup.find_all(_LINE_TAGS):
        tag.insert_after("\n")
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_after("\n\n")
    text = soup.get_text().replace("\r\n", "\n").replace("\r", "\n")
    lines = [_HORIZONTAL_SPACE.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()


def strip_tags(markup: str) -> str:
    """Remove tags and decode entities without touching whitespace."""
    return parse_markup(markup).get_text()
