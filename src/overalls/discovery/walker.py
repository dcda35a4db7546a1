"""Symlink-following directory walk with cycle detection and ignore pruning.

Unlike os.walk, symlinked directories are descended into. Every directory is
keyed by its canonical (fully resolved) path in an explicit ``visited`` set,
so a symlink cycle back to an ancestor terminates and two links to the same
physical directory yield it once.

Ignore entries are checked against both the path as reached and the
canonical path, so a symlink into an ignored directory is pruned as well. A
directory is only marked visited once it passes the ignore check; an ignored
alias never hides the directory it points at.

Any filesystem error aborts the walk: a partial tree silently drops packages
from the merged profile, which is worse than failing.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator
from pathlib import Path
from typing import NamedTuple

from overalls.core.errors import TraversalError


class DirectoryVisit(NamedTuple):
    """A directory reached by the walk."""

    path: Path  # as reached, symlinks not resolved
    rel_path: str  # POSIX, relative to the walk root; "." for the root


def relative_posix(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` using forward slashes."""
    try:
        rel = os.path.relpath(path, root)
    except ValueError as e:
        # Windows: different drives
        raise TraversalError.relative_failed(str(path), str(root)) from e
    rel = rel.replace(os.sep, "/")
    if rel == ".." or rel.startswith("../"):
        raise TraversalError.relative_failed(str(path), str(root))
    return rel


def _canonical(path: Path) -> str:
    try:
        return str(path.resolve(strict=True))
    except (OSError, RuntimeError) as e:
        # RuntimeError: symlink loop on older interpreters
        raise TraversalError.resolve_failed(str(path), str(e)) from e


def _canonical_rel(canonical: str, root_canonical: str) -> str | None:
    try:
        return Path(canonical).relative_to(root_canonical).as_posix()
    except ValueError:
        # Symlink target outside the project
        return None


def _is_dir(path: Path) -> bool:
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError as e:
        raise TraversalError.stat_failed(str(path), str(e)) from e


def _list_children(path: Path) -> list[Path]:
    try:
        names = sorted(os.listdir(path))
    except OSError as e:
        raise TraversalError.list_failed(str(path), str(e)) from e
    return [path / name for name in names]


def walk_directories(
    root: Path,
    ignores: frozenset[str] = frozenset(),
    visited: set[str] | None = None,
) -> Iterator[DirectoryVisit]:
    """Yield every directory under ``root`` (inclusive), pre-order, sorted.

    Args:
        root: Directory to start from; relative paths are computed against it.
        ignores: Relative POSIX paths to prune. A pruned directory is neither
            yielded nor descended into, whichever symlink it is reached through.
        visited: Canonical paths already seen. Pass a set to share the cycle
            guard across calls or to inspect it afterwards.

    Raises:
        TraversalError: If any path cannot be resolved, statted, relativized
            or listed.
    """
    if visited is None:
        visited = set()

    root_canonical = _canonical(root)
    stack: list[Path] = [root]
    while stack:
        path = stack.pop()

        canonical = _canonical(path)
        if canonical in visited:
            continue
        if not _is_dir(path):
            continue

        rel_path = relative_posix(path, root)
        if rel_path in ignores or _canonical_rel(canonical, root_canonical) in ignores:
            continue
        visited.add(canonical)

        yield DirectoryVisit(path=path, rel_path=rel_path)

        # Reversed so the lowest name is popped first
        stack.extend(reversed(_list_children(path)))
