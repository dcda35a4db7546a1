"""Runner subsystem: build, launch and collect `go test` subprocesses."""

from overalls.runner.command import build_test_command, split_test_args
from overalls.runner.dispatch import Dispatcher, run_work_item
from overalls.runner.models import CoverageFragment, WorkItem
from overalls.runner.output import read_fragment, relay_stream, report_path

__all__ = [
    "CoverageFragment",
    "Dispatcher",
    "WorkItem",
    "build_test_command",
    "read_fragment",
    "relay_stream",
    "report_path",
    "run_work_item",
    "split_test_args",
]
