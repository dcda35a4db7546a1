"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides a stand-in for the `go` runner so the suite needs no Go toolchain.
"""

import logging
import os
import stat
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local overalls package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of overalls modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("overalls"):
        del sys.modules[module_name]

import structlog  # noqa: E402

from overalls.core.logging import clear_run_id  # noqa: E402

# Mimics `go test -covermode=M -coverprofile=F -outputdir=DIR/ PKG`:
# writes a one-block profile into DIR, echoes to both streams, records its
# argv. Marker files in the package directory change the outcome:
#   FAIL       exit 1 right away
#   NOPROFILE  exit 0 without writing a profile
# FAKE_GO_SLEEP delays the exit; FAKE_GO_STATE collects start/end stamps.
_FAKE_GO = '''#!{python}
import json
import os
import sys
import time
from pathlib import Path

args = sys.argv[1:]
mode = "set"
outdir = None
package = None
for i, arg in enumerate(args):
    if arg.startswith("-covermode="):
        mode = arg.partition("=")[2]
    elif arg.startswith("-outputdir="):
        outdir = Path(arg.partition("=")[2])
        package = args[i + 1]

state = os.environ.get("FAKE_GO_STATE")
if state:
    Path(state, "start-%d" % os.getpid()).write_text(repr(time.time()))

(outdir / "args.json").write_text(json.dumps({{"argv": args, "cwd": os.getcwd()}}))
print("=== RUN   TestExample " + package, flush=True)
print("note from " + package, file=sys.stderr, flush=True)

if (outdir / "FAIL").exists():
    print("--- FAIL: TestExample " + package, flush=True)
    sys.exit(1)

time.sleep(float(os.environ.get("FAKE_GO_SLEEP", "0")))

if not (outdir / "NOPROFILE").exists():
    rel = package[2:] if package.startswith("./") else package
    source = "example.com/proj" if rel == "." else "example.com/proj/" + rel
    (outdir / "profile.coverprofile").write_text(
        "mode: " + mode + "\\n" + source + "/main.go:1.1,3.2 2 1\\n"
    )

if state:
    Path(state, "end-%d" % os.getpid()).write_text(repr(time.time()))
print("ok  " + package, flush=True)
'''


@pytest.fixture(autouse=True)
def _isolate_run_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset logging, run ID and OVERALLS_* env vars around every test."""
    for key in list(os.environ):
        if key.startswith("OVERALLS_"):
            monkeypatch.delenv(key)
    structlog.reset_defaults()
    clear_run_id()
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.WARNING)
    structlog.reset_defaults()
    clear_run_id()


@pytest.fixture
def fake_go(tmp_path: Path) -> Path:
    """Executable stand-in for the `go` binary."""
    script = tmp_path / "bin" / "fake-go"
    script.parent.mkdir()
    script.write_text(_FAKE_GO.format(python=sys.executable))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def fake_go_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Directory the fake runner records its start and end times in."""
    state = tmp_path / "state"
    state.mkdir()
    monkeypatch.setenv("FAKE_GO_STATE", str(state))
    return state


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Build a Go project tree.

    Each argument is a relative directory; a trailing ``*`` marks it as
    holding a ``*_test.go`` file.
    """

    def _make(*dirs: str, name: str = "project") -> Path:
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        for entry in dirs:
            has_tests = entry.endswith("*")
            rel = entry.rstrip("*")
            directory = root / rel if rel not in ("", ".") else root
            directory.mkdir(parents=True, exist_ok=True)
            (directory / "main.go").write_text("package main\n")
            if has_tests:
                (directory / "main_test.go").write_text("package main\n")
        return root

    return _make


def max_overlap(state: Path) -> int:
    """Largest number of fake runners that were alive at the same time."""
    events: list[tuple[float, int]] = []
    for stamp in state.iterdir():
        kind, _, _ = stamp.name.partition("-")
        when = float(stamp.read_text())
        # Ends sort before starts at the same instant
        events.append((when, 1 if kind == "start" else 0))
    alive = peak = 0
    for _, is_start in sorted(events):
        alive += 1 if is_start else -1
        peak = max(peak, alive)
    return peak


@pytest.fixture
def overlap() -> Callable[[Path], int]:
    return max_overlap
