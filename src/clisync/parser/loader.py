"""Discover and parse the Go source files of an SDK package.

This module handles all I/O for the extractor: it lists the ``.go`` files
directly inside the SDK directory, drops test files, generated mocks, and
other non-surface files using gitignore-style patterns (via
:mod:`pathspec`), and parses each remaining file into a tree-sitter syntax
tree.

The two public functions are:

* :func:`discover_sources` -- list the files that make up the SDK surface.
* :func:`load_sources` -- read and parse them into :class:`SourceFile`
  objects, failing on the first unreadable or malformed file.

tree-sitter is error-tolerant and always produces a tree; this module turns
any ``ERROR`` or missing node into a :class:`~clisync.exceptions.SourceParseError`
so that no partially understood file ever reaches the extractor.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pathspec
import tree_sitter_go
from tree_sitter import Language, Node, Parser

from clisync.exceptions import SourceLocationError, SourceParseError
from clisync.models import DEFAULT_EXCLUDE_PATTERNS

GO_LANGUAGE = Language(tree_sitter_go.language())


@dataclass
class SourceFile:
    """A parsed Go file.

    Attributes:
        path: Filesystem path of the file.
        root: Root ``source_file`` node of its syntax tree.
    """

    path: Path
    root: Node


def discover_sources(
    sdk_path: str | Path,
    exclude_patterns: Optional[list[str]] = None,
) -> list[Path]:
    """List the ``.go`` files directly inside *sdk_path*, sorted by name.

    Sub-directories are not descended into: a Go package is one directory.

    Args:
        sdk_path: Directory holding the SDK package.
        exclude_patterns: Gitignore-style patterns matched against file
            names. Defaults to :data:`~clisync.models.DEFAULT_EXCLUDE_PATTERNS`.

    Raises:
        SourceLocationError: If *sdk_path* does not exist, is not a
            directory, or cannot be listed.
    """
    root = Path(sdk_path)
    if not root.exists():
        raise SourceLocationError(f"SDK location not found: {root}")
    if not root.is_dir():
        raise SourceLocationError(f"SDK location is not a directory: {root}")

    patterns = DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns
    exclude_spec = pathspec.PathSpec.from_lines("gitignore", patterns)

    try:
        names = sorted(os.listdir(root))
    except OSError as exc:
        raise SourceLocationError(f"Failed to read SDK location {root}: {exc}") from exc

    files: list[Path] = []
    for name in names:
        if not name.endswith(".go"):
            continue
        if exclude_spec.match_file(name):
            continue
        path = root / name
        if path.is_file():
            files.append(path)
    return files


def parse_source(source: bytes, filename: str = "<memory>") -> Node:
    """Parse Go *source* and return the root node of its syntax tree.

    Raises:
        SourceParseError: If the tree contains syntax errors.
    """
    tree = Parser(GO_LANGUAGE).parse(source)
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        where = f"{filename}:{bad.start_point[0] + 1}" if bad is not None else filename
        raise SourceParseError(f"Malformed Go source at {where}")
    return root


def load_sources(
    sdk_path: str | Path,
    exclude_patterns: Optional[list[str]] = None,
) -> list[SourceFile]:
    """Read and parse every SDK file returned by :func:`discover_sources`.

    Raises:
        SourceLocationError: If the location or one of its files cannot be read.
        SourceParseError: If any file contains malformed Go source.
    """
    sources: list[SourceFile] = []
    for path in discover_sources(sdk_path, exclude_patterns):
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise SourceLocationError(f"Failed to read {path}: {exc}") from exc
        sources.append(SourceFile(path=path, root=parse_source(data, str(path))))
    return sources


def _first_error(node: Node) -> Optional[Node]:
    """Depth-first search for the first ``ERROR`` or missing node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None
