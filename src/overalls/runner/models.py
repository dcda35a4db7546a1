"""Runner subsystem core models.

A WorkItem is created by discovery and consumed exactly once by the
dispatcher; each one maps to exactly one `go test` subprocess, which produces
exactly one CoverageFragment.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# =============================================================================
# Work Items
# =============================================================================


@dataclass(frozen=True, slots=True)
class WorkItem:
    """A directory confirmed to contain Go test sources."""

    path: Path  # Absolute directory, as reached by the walk
    rel_path: str  # POSIX path relative to the project root; "." for the root

    @property
    def package(self) -> str:
        """Package target for `go test`, relative to the project root."""
        if self.rel_path == ".":
            return "."
        return f"./{self.rel_path}"


# =============================================================================
# Coverage Fragments
# =============================================================================


@dataclass(frozen=True, slots=True)
class CoverageFragment:
    """Raw coverage profile bytes produced by one runner subprocess."""

    rel_path: str  # Package the fragment came from, for diagnostics
    data: bytes

    def __len__(self) -> int:
        return len(self.data)
