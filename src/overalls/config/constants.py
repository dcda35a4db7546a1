"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
They describe the contract with the external `go test` runner and the name of
the merged artifact. For configurable values, see models.py (RunConfiguration).
"""

from typing import Literal

# =============================================================================
# Runner Contract
# =============================================================================

CoverMode = Literal["set", "count", "atomic"]

COVER_MODES: tuple[str, ...] = ("set", "count", "atomic")
"""Coverage modes accepted by `go test -covermode`."""

DEFAULT_COVER_MODE: CoverMode = "count"

DEFAULT_GO_BINARY = "go"

TEST_FILE_GLOB = "*_test.go"
"""A directory is dispatched when it directly contains a file matching this."""

PKG_FILENAME = "profile.coverprofile"
"""Per-package profile written by the runner inside its -outputdir."""

ARGS_SEPARATOR = "-args"
"""Pass-through arguments from this token on go to the test binary itself."""

# =============================================================================
# Artifact
# =============================================================================

OUT_FILENAME = "overalls.coverprofile"
"""Merged profile written to the project root."""

# =============================================================================
# Traversal
# =============================================================================

DEFAULT_IGNORES = ".git,vendor"
"""Comma separated paths, relative to the project root, never descended into."""

# =============================================================================
# Configuration Sources
# =============================================================================

CONFIG_FILENAME = ".overalls.yaml"
ENV_PREFIX = "OVERALLS_"
