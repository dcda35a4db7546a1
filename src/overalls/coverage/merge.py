"""Merging per-package Go cover profiles into one profile.

Every `go test -coverprofile` output starts with a ``mode: <mode>`` header.
Concatenating them as-is would leave one header per package, which `go tool
cover` and coverage services reject. The merge strips every header line,
wherever it appears, and prepends exactly one canonical header built from the
configured mode. Fragment order does not matter for the header invariant.
"""

from __future__ import annotations

import contextlib
import os
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path

from overalls.runner.models import CoverageFragment

MODE_LINE = re.compile(rb"^mode: \w+[ \t]*\r?\n", re.MULTILINE)


def mode_header(mode: str) -> bytes:
    return f"mode: {mode}\n".encode()


def merge_fragments(fragments: Iterable[CoverageFragment], mode: str) -> bytes:
    """Merge fragments into a single profile with one header line.

    Args:
        fragments: Profiles in arrival order.
        mode: Configured cover mode for the canonical header.

    Returns:
        The merged profile bytes.
    """
    parts: list[bytes] = []
    for fragment in fragments:
        data = fragment.data
        if data and not data.endswith(b"\n"):
            # Keep the last entry of one fragment off the first of the next
            data += b"\n"
        parts.append(data)

    body = MODE_LINE.sub(b"", b"".join(parts))
    return mode_header(mode) + body


def write_artifact(path: Path, data: bytes) -> Path:
    """Write ``data`` to ``path`` atomically.

    The bytes go to a temporary file next to ``path`` first, then replace it,
    so readers see either the previous profile or the complete new one.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise
    return path
