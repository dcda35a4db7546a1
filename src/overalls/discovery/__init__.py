"""Project tree discovery: walk the tree, keep directories with Go tests."""

from overalls.discovery.filter import discover_work_items, has_test_files
from overalls.discovery.walker import DirectoryVisit, relative_posix, walk_directories

__all__ = [
    "DirectoryVisit",
    "discover_work_items",
    "has_test_files",
    "relative_posix",
    "walk_directories",
]
