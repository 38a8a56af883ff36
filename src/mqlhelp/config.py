# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Runtime settings and their defaults."""

from dataclasses import dataclass
from pathlib import Path

from mqlhelp.doc_index import DocumentRoot

DEFAULT_ROOT_NAMES: tuple[str, ...] = (
    "MQL5_HELP",
    "MQL5_Algo_Book",
    "Neural_Networks_Book",
)
DEFAULT_STORE_DIR_NAME = ".mql5-help"
DEFAULT_STORE_FILE_NAME = "mql5_errors.db"


@dataclass(frozen=True)
class Settings:
    """Represent resolved runtime settings.

    Attributes:
        doc_roots: Documentation trees in priority order.
        db_path: Error store database file.
    """

    doc_roots: tuple[DocumentRoot, ...]
    db_path: Path


def default_db_path(home: Path | None = None) -> Path:
    """Return the per-user error store location."""
    base = home if home is not None else Path.home()
    return base / DEFAULT_STORE_DIR_NAME / DEFAULT_STORE_FILE_NAME


def default_doc_roots(base_dir: Path | None = None) -> tuple[DocumentRoot, ...]:
    """Return the standard documentation trees below ``base_dir``."""
    base = base_dir if base_dir is not None else Path.cwd()
    return tuple(DocumentRoot(name=name, path=base / name) for name in DEFAULT_ROOT_NAMES)


def parse_doc_root(value: str) -> DocumentRoot:
    """Parse a ``[NAME=]PATH`` documentation root argument.

    Args:
        value: Root argument; the directory name is used when no name is given.

    Returns:
        Parsed documentation root.

    Raises:
        ValueError: If the path or the name is empty.
    """
    name, separator, path_text = value.partition("=")
    if not separator:
        path_text = value
        name = Path(value).name
    if not path_text.strip():
        raise ValueError(f"Documentation root path is empty: {value!r}")
    if not name.strip():
        raise ValueError(f"Documentation root name is empty: {value!r}")
    return DocumentRoot(name=name.strip(), path=Path(path_text.strip()).expanduser())


def resolve_settings(
    doc_roots: list[str] | None = None, db_path: str | None = None
) -> Settings:
    """Resolve settings from command line values and defaults.

    Args:
        doc_roots: ``[NAME=]PATH`` values replacing the default roots.
        db_path: Error store path replacing the default location.

    Returns:
        Resolved settings.

    Raises:
        ValueError: If a documentation root argument is invalid.
    """
    roots = (
        tuple(parse_doc_root(value) for value in doc_roots)
        if doc_roots
        else default_doc_roots()
    )
    store_path = Path(db_path).expanduser() if db_path else default_db_path()
    return Settings(doc_roots=roots, db_path=store_path)
