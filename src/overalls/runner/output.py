"""Output collection for runner subprocesses.

Both pipes of a subprocess are drained by their own coroutine while the
process runs, so neither can fill up and stall the child. Lines are relayed
to the run's logger as they arrive. A read error is reported and draining
continues; only the process exit status and the profile read decide whether
a package failed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from overalls.config.constants import PKG_FILENAME
from overalls.core.errors import DispatchError
from overalls.runner.models import CoverageFragment, WorkItem


async def relay_stream(
    stream: asyncio.StreamReader,
    log: structlog.stdlib.BoundLogger,
    *,
    stream_name: str,
) -> int:
    """Relay ``stream`` line by line to ``log`` until EOF.

    Returns:
        Number of lines relayed.
    """
    relayed = 0
    while True:
        try:
            raw = await stream.readline()
        except (ValueError, OSError) as e:
            log.warning("stream_read_error", stream=stream_name, error=str(e))
            if isinstance(e, OSError) or stream.exception() is not None:
                # The reader itself is broken; nothing more will arrive
                return relayed
            # Line over the reader limit: it was discarded, keep draining
            continue
        if not raw:
            return relayed
        line = raw.decode(errors="replace").rstrip("\r\n")
        log.info(line, stream=stream_name)
        relayed += 1


def report_path(item: WorkItem) -> Path:
    """Location of the profile the runner writes for ``item``."""
    return item.path / PKG_FILENAME


def read_fragment(item: WorkItem) -> CoverageFragment:
    """Read the profile for ``item`` after its runner exited cleanly.

    Raises:
        DispatchError: If the profile is missing or unreadable.
    """
    path = report_path(item)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DispatchError.report_unreadable(item.package, str(path), str(e)) from e
    return CoverageFragment(rel_path=item.rel_path, data=data)
