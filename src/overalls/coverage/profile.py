"""Go coverage profile parser and statement summary.

Go test produces coverage profiles with format:
mode: set|count|atomic
<package>/<file>:<startline>.<startcol>,<endline>.<endcol> <numstmt> <count>

Example:
mode: set
github.com/user/pkg/main.go:10.2,12.16 3 1
github.com/user/pkg/main.go:15.2,20.16 5 0

- mode: set (0/1), count (hit count), atomic (thread-safe count)
- numstmt: number of statements in block
- count: execution count (0 = not covered)

The summary is for reporting only; the merged artifact is never rewritten
from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class FileSummary:
    """Statement coverage for one source file."""

    path: str
    # (start, end) range -> (numstmt, count); duplicate blocks keep the max count
    blocks: dict[str, tuple[int, int]] = field(default_factory=dict)

    @property
    def statements(self) -> int:
        return sum(numstmt for numstmt, _ in self.blocks.values())

    @property
    def covered(self) -> int:
        return sum(numstmt for numstmt, count in self.blocks.values() if count > 0)


@dataclass(slots=True)
class ProfileSummary:
    """Statement coverage for a whole profile."""

    mode: str | None = None
    files: dict[str, FileSummary] = field(default_factory=dict)

    @property
    def statements(self) -> int:
        return sum(fs.statements for fs in self.files.values())

    @property
    def covered(self) -> int:
        return sum(fs.covered for fs in self.files.values())

    @property
    def percent(self) -> float | None:
        """Covered statements as a percentage, None when nothing is instrumented."""
        total = self.statements
        if total == 0:
            return None
        return self.covered / total * 100.0


def _parse_block(line: str) -> tuple[str, str, int, int] | None:
    # Split on whitespace to get path:range, numstmt, count
    parts = line.split()
    if len(parts) != 3:
        return None

    path_range = parts[0]
    colon_idx = path_range.rfind(":")
    if colon_idx == -1:
        return None

    file_path = path_range[:colon_idx]
    range_part = path_range[colon_idx + 1 :]
    if len(range_part.split(",")) != 2:
        return None

    try:
        numstmt = int(parts[1])
        count = int(parts[2])
    except ValueError:
        return None
    return file_path, range_part, numstmt, count


def parse_profile(data: bytes) -> ProfileSummary:
    """Parse Go cover profile bytes into a ProfileSummary.

    Malformed lines are skipped. Header lines anywhere in the input are
    accepted; the first one sets the mode.
    """
    summary = ProfileSummary()

    for raw in data.decode(errors="replace").splitlines():
        line = raw.strip()
        if not line:
            continue

        if line.startswith("mode:"):
            if summary.mode is None:
                summary.mode = line.removeprefix("mode:").strip()
            continue

        block = _parse_block(line)
        if block is None:
            continue
        file_path, range_part, numstmt, count = block

        if file_path not in summary.files:
            summary.files[file_path] = FileSummary(path=file_path)
        blocks = summary.files[file_path].blocks

        # Use max to handle a block reported by more than one package
        previous = blocks.get(range_part)
        if previous is None or count > previous[1]:
            blocks[range_part] = (numstmt, count)

    return summary


def build_text_summary(summary: ProfileSummary) -> str:
    """Build a concise text summary for display contexts."""
    percent = summary.percent
    if percent is None:
        return "No coverage data"
    return f"Coverage: {percent:.1f}% ({summary.covered}/{summary.statements} statements)"
