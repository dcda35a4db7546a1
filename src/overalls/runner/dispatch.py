"""Concurrent dispatch of runner subprocesses.

One asyncio task per WorkItem; each task owns its subprocess end to end
(launch, two stream relays, exit wait, profile read). When a concurrency
limit is configured, a task holds one semaphore slot for the whole subprocess
lifetime and releases it on every exit path.

Fan-in is first-error-wins: the first failing task cancels every other task
and its error propagates to the coordinator. Cancelled tasks kill their
subprocess before finishing, so no runner outlives the run.
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from overalls.config.models import RunConfiguration
from overalls.core.errors import DispatchError
from overalls.runner.command import build_test_command
from overalls.runner.models import CoverageFragment, WorkItem
from overalls.runner.output import read_fragment, relay_stream

log = structlog.get_logger(__name__)


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is not None:
        return
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


async def run_work_item(item: WorkItem, config: RunConfiguration) -> CoverageFragment:
    """Run the runner for one package and return its coverage fragment.

    Raises:
        DispatchError: If the runner cannot start, exits non-zero, or leaves
            no readable profile behind.
    """
    cmd = build_test_command(item, config)
    item_log = log.bind(package=item.package)
    item_log.debug("processing", command=" ".join(cmd))

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=config.project_root,
        )
    except OSError as e:
        raise DispatchError.start_failed(item.package, cmd, str(e)) from e

    assert proc.stdout is not None
    assert proc.stderr is not None

    try:
        await asyncio.gather(
            relay_stream(proc.stdout, item_log, stream_name="stdout"),
            relay_stream(proc.stderr, item_log, stream_name="stderr"),
            proc.wait(),
        )
    except BaseException:
        await _terminate(proc)
        raise

    if proc.returncode:
        raise DispatchError.exit_failed(item.package, cmd, proc.returncode)

    fragment = read_fragment(item)
    item_log.debug("package_done", profile_bytes=len(fragment))
    return fragment


class Dispatcher:
    """Fan-out of WorkItems to runner subprocesses, fan-in of fragments.

    Usage::

        dispatcher = Dispatcher(config)
        for item in items:
            dispatcher.submit(item)
        fragments = await dispatcher.join()

    Must be created and used inside a running event loop.
    """

    def __init__(self, config: RunConfiguration) -> None:
        self._config = config
        self._semaphore = (
            asyncio.Semaphore(config.concurrency) if config.concurrency is not None else None
        )
        self._tasks: list[asyncio.Task[CoverageFragment]] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    @property
    def submitted(self) -> int:
        return len(self._tasks)

    async def _run(self, item: WorkItem) -> CoverageFragment:
        async with self._semaphore or contextlib.nullcontext():
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                return await run_work_item(item, self._config)
            finally:
                self.in_flight -= 1

    def submit(self, item: WorkItem) -> None:
        """Schedule ``item``; it starts once the caller yields to the loop."""
        task = asyncio.create_task(self._run(item), name=f"overalls:{item.rel_path}")
        self._tasks.append(task)

    async def join(self) -> list[CoverageFragment]:
        """Wait for every submitted task; return fragments in completion order.

        Raises:
            The first task error, after all other tasks were cancelled.
        """
        fragments: list[CoverageFragment] = []
        try:
            for next_done in asyncio.as_completed(self._tasks):
                fragments.append(await next_done)
        except BaseException:
            await self.cancel()
            raise
        return fragments

    async def cancel(self) -> None:
        """Cancel all outstanding tasks and wait until they have finished."""
        for task in self._tasks:
            task.cancel()
        # Each cancelled task kills its subprocess before completing
        await asyncio.gather(*self._tasks, return_exceptions=True)
