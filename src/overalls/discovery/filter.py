"""Test-directory filter: which walked directories get a runner invocation.

Filtering is orthogonal to pruning. A directory without test files is not
dispatched, but the walk still descends into it.
"""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterator
from pathlib import Path

import structlog

from overalls.config.constants import TEST_FILE_GLOB
from overalls.config.models import RunConfiguration
from overalls.core.errors import TraversalError
from overalls.discovery.walker import walk_directories
from overalls.runner.models import WorkItem

log = structlog.get_logger(__name__)


def has_test_files(directory: Path, pattern: str = TEST_FILE_GLOB) -> bool:
    """Check whether ``directory`` directly contains a file matching ``pattern``.

    Not recursive. Symlinks to files count; directories named like test files
    do not.
    """
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if fnmatch.fnmatchcase(entry.name, pattern) and entry.is_file():
                    return True
    except OSError as e:
        raise TraversalError.list_failed(str(directory), str(e)) from e
    return False


def discover_work_items(
    config: RunConfiguration,
    visited: set[str] | None = None,
) -> Iterator[WorkItem]:
    """Walk the project and yield a WorkItem per test-bearing directory.

    Lazy: items are yielded as the walk reaches them, so the caller can start
    dispatching before the walk finishes.
    """
    for visit in walk_directories(config.project_root, config.ignores, visited):
        if not has_test_files(visit.path):
            log.debug("no_test_files", directory=visit.rel_path)
            continue
        yield WorkItem(path=visit.path, rel_path=visit.rel_path)
