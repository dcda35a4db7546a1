"""Argument construction for one `go test` invocation.

Layout::

    go test [runner flags] -covermode=M -coverprofile=F -outputdir=DIR/ ./PKG [trailing]

Operator pass-through arguments are split at ``-args``: everything before it
is folded into the runner flags, the token and everything after it go to the
end, where `go test` hands them to the test binary. Without the token all
pass-through arguments go to the end, after the package.
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from overalls.config.constants import ARGS_SEPARATOR, PKG_FILENAME
from overalls.config.models import RunConfiguration
from overalls.runner.models import WorkItem


def split_test_args(
    args: Sequence[str],
    separator: str = ARGS_SEPARATOR,
) -> tuple[list[str], list[str]]:
    """Split pass-through arguments into (runner flags, trailing arguments).

    Only the first separator splits; later ones stay in the trailing part.
    """
    for i, arg in enumerate(args):
        if arg == separator:
            return list(args[:i]), list(args[i:])
    return [], list(args)


def build_test_command(item: WorkItem, config: RunConfiguration) -> list[str]:
    """Build the runner command line for ``item``.

    Pure: the same item and config always yield the same command, and
    nothing shared is modified, so it is safe to call from concurrent tasks.
    """
    runner_flags, trailing = split_test_args(config.test_args)
    return [
        config.go_binary,
        "test",
        *runner_flags,
        f"-covermode={config.cover_mode}",
        f"-coverprofile={PKG_FILENAME}",
        f"-outputdir={item.path}{os.sep}",
        item.package,
        *trailing,
    ]
