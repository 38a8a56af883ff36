# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Lookup index over local documentation trees."""

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Protocol

import pathspec

from mqlhelp.model import DocumentDescriptor

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES: frozenset[str] = frozenset({".htm", ".html", ".md"})
IGNORE_FILE_NAME = ".docignore"
ONNX_ALIASES: tuple[str, ...] = ("onnx", "onnx_guide", "ml", "ai")
COLLECTION_KEY_PREFIXES: dict[str, str] = {
    "MQL5_Algo_Book": "algo_",
    "Neural_Networks_Book": "nn_",
}


@dataclass(frozen=True)
class DocumentRoot:
    """Represent one documentation tree.

    Attributes:
        name: Collection name reported for files of this tree.
        path: Root directory of the tree.
    """

    name: str
    path: Path


class DocumentLookup(Protocol):
    """Define read access to an index of documents by lookup key."""

    def get(self, key: str) -> DocumentDescriptor | None:
        """Return the document registered under ``key``."""

    def entries(self) -> Iterator[tuple[str, DocumentDescriptor]]:
        """Iterate over ``(key, document)`` pairs in index order."""


def document_key(file_name: str) -> str:
    """Normalize a file name into its primary lookup key."""
    lowered = os.path.basename(file_name).lower()
    stem, suffix = os.path.splitext(lowered)
    return stem if suffix in DOCUMENT_SUFFIXES else lowered


class DocumentIndex:
    """Index documentation files by normalized lookup keys.

    The index is built once, on first access, and cached for the lifetime of
    the instance.
    """

    def __init__(self, roots: list[DocumentRoot]) -> None:
        """Initialize an unbuilt index.

        Args:
            roots: Documentation trees in priority order.
        """
        self._roots = list(roots)
        self._keys: dict[str, DocumentDescriptor] | None = None
        self._names: dict[str, DocumentDescriptor] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, DocumentDescriptor]) -> "DocumentIndex":
        """Build an index that serves a fixed key mapping.

        Args:
            mapping: Lookup key to document mapping.

        Returns:
            Pre-built index.
        """
        index = cls(roots=[])
        index._keys = dict(mapping)
        for descriptor in mapping.values():
            index._names.setdefault(document_key(descriptor.rel_path), descriptor)
        return index

    def get(self, key: str) -> DocumentDescriptor | None:
        return self._ensure_built().get(key)

    def get_by_name(self, name: str) -> DocumentDescriptor | None:
        """Return the first indexed file whose bare file name matches ``name``."""
        self._ensure_built()
        return self._names.get(document_key(name))

    def entries(self) -> Iterator[tuple[str, DocumentDescriptor]]:
        return iter(list(self._ensure_built().items()))

    def keys(self) -> list[str]:
        return list(self._ensure_built())

    def __len__(self) -> int:
        return len(self._ensure_built())

    def _ensure_built(self) -> dict[str, DocumentDescriptor]:
        keys = self._keys
        if keys is not None:
            return keys
        with self._lock:
            if self._keys is None:
                self._keys = self._build()
            return self._keys

    def _build(self) -> dict[str, DocumentDescriptor]:
        keys: dict[str, DocumentDescriptor] = {}
        for root in self._roots:
            if not root.path.is_dir():
                logger.warning(
                    f"Skipping missing documentation root (name={root.name} path={root.path})"
                )
                continue
            for descriptor in _walk_root(root):
                self._register(keys=keys, descriptor=descriptor)
        logger.info(
            f"Documentation index built (keys={len(keys)} names={len(self._names)} "
            f"roots={len(self._roots)})"
        )
        return keys

    def _register(
        self, keys: dict[str, DocumentDescriptor], descriptor: DocumentDescriptor
    ) -> None:
        name = document_key(descriptor.rel_path)
        keys[name] = descriptor
        self._names.setdefault(name, descriptor)
        if name.startswith("c") and len(name) > 2:
            keys[name[1:]] = descriptor
        if "onnx" in name:
            for alias in ONNX_ALIASES:
                keys[alias] = descriptor
        prefix = COLLECTION_KEY_PREFIXES.get(descriptor.collection)
        if prefix:
            keys[f"{prefix}{name}"] = descriptor


def _load_ignore_spec(root_path: Path) -> pathspec.GitIgnoreSpec | None:
    ignore_path = root_path / IGNORE_FILE_NAME
    if not ignore_path.is_file():
        return None
    lines = ignore_path.read_text(encoding="utf-8").splitlines()
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _walk_root(root: DocumentRoot) -> Iterator[DocumentDescriptor]:
    """Yield documents below one root in sorted path order."""
    try:
        spec = _load_ignore_spec(root.path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            f"Ignoring unreadable ignore file (root={root.path} error={exc})"
        )
        spec = None
    for file_path in sorted(root.path.rglob("*")):
        if file_path.suffix.lower() not in DOCUMENT_SUFFIXES or not file_path.is_file():
            continue
        relative_path = file_path.relative_to(root.path)
        if spec is not None and spec.match_file(relative_path.as_posix()):
            continue
        yield DocumentDescriptor(
            abs_path=str(file_path.resolve()),
            rel_path=str(relative_path),
            collection=root.name,
        )
