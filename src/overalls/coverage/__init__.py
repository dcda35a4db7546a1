"""Coverage profile merging and summarizing.

Usage:
    from overalls.coverage import merge_fragments, write_artifact, parse_profile

    merged = merge_fragments(fragments, mode="count")
    write_artifact(project_root / "overalls.coverprofile", merged)
    summary = parse_profile(merged)
"""

from overalls.coverage.merge import MODE_LINE, merge_fragments, mode_header, write_artifact
from overalls.coverage.profile import (
    FileSummary,
    ProfileSummary,
    build_text_summary,
    parse_profile,
)

__all__ = [
    # Merge
    "MODE_LINE",
    "merge_fragments",
    "mode_header",
    "write_artifact",
    # Summary
    "FileSummary",
    "ProfileSummary",
    "build_text_summary",
    "parse_profile",
]
