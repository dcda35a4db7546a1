"""CLI utilities."""

import os
from pathlib import Path

from overalls.core.errors import ConfigError


def gopath_entries() -> list[Path]:
    """Return the GOPATH workspace roots, defaulting to ~/go like the go tool."""
    gopath = os.environ.get("GOPATH", "")
    entries = [Path(entry).expanduser() for entry in gopath.split(os.pathsep) if entry]
    return entries or [Path("~/go").expanduser()]


def find_project_root(project: str | None = None) -> Path:
    """Resolve the project directory to run in.

    An existing directory (absolute, or relative to the working directory)
    wins. Otherwise ``project`` is looked up as an import path under each
    ``$GOPATH/src``. If project is None, uses the current working directory.

    Args:
        project: Directory or import path, e.g. github.com/user/repo

    Returns:
        Absolute, resolved project directory

    Raises:
        ConfigError: If no matching directory exists
    """
    if not project:
        return Path.cwd().resolve()

    candidate = Path(project).expanduser()
    if candidate.is_dir():
        return candidate.resolve()

    searched = [str(candidate)]
    if not candidate.is_absolute():
        for entry in gopath_entries():
            src_candidate = entry / "src" / candidate
            searched.append(str(src_candidate))
            if src_candidate.is_dir():
                return src_candidate.resolve()

    raise ConfigError.project_not_found(project, searched)
