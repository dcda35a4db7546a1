"""Coverage run coordination.

Walk -> filter -> dispatch (N concurrent runners) -> join -> merge -> write.

The coordinator is the single place that decides between merging and
aborting. Errors from the walk or from any runner cancel everything still in
flight and propagate to the caller; the merged profile is only written after
every dispatched package has delivered its fragment.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path

import structlog

from overalls.config.models import RunConfiguration
from overalls.core.logging import set_run_id
from overalls.coverage.merge import merge_fragments, write_artifact
from overalls.coverage.profile import ProfileSummary, parse_profile
from overalls.discovery.filter import discover_work_items
from overalls.runner.dispatch import Dispatcher

log = structlog.get_logger(__name__)


@dataclass
class RunResult:
    """Outcome of a successful coverage run."""

    run_id: str
    artifact_path: Path
    packages: list[str]  # relative paths, in completion order
    artifact_bytes: int
    summary: ProfileSummary
    peak_concurrency: int
    duration_seconds: float


async def run_coverage(config: RunConfiguration) -> RunResult:
    """Run tests with coverage in every test directory and merge the profiles.

    Raises:
        TraversalError: If the project tree cannot be walked.
        DispatchError: If any runner fails to start, fails, or leaves no profile.
    """
    run_id = set_run_id()
    start_time = time.perf_counter()
    log.info(
        "run_start",
        project=str(config.project_root),
        covermode=config.cover_mode,
        concurrency=config.concurrency or "unlimited",
        ignores=sorted(config.ignores),
    )

    dispatcher = Dispatcher(config)
    items = discover_work_items(config)
    try:
        # Each walk step runs in a worker thread so started runners keep
        # draining their pipes; to_thread carries the run ID context over
        while (item := await asyncio.to_thread(next, items, None)) is not None:
            dispatcher.submit(item)
    except BaseException:
        await dispatcher.cancel()
        raise

    if dispatcher.submitted == 0:
        log.warning("no_packages", project=str(config.project_root))

    fragments = await dispatcher.join()

    merged = merge_fragments(fragments, config.cover_mode)
    artifact_path = write_artifact(config.output_path, merged)
    summary = parse_profile(merged)

    duration = time.perf_counter() - start_time
    log.info(
        "coverage_written",
        path=str(artifact_path),
        packages=len(fragments),
        bytes=len(merged),
        coverage_percent=round(summary.percent, 1) if summary.percent is not None else None,
        elapsed_s=round(duration, 2),
    )

    return RunResult(
        run_id=run_id,
        artifact_path=artifact_path,
        packages=[fragment.rel_path for fragment in fragments],
        artifact_bytes=len(merged),
        summary=summary,
        peak_concurrency=dispatcher.peak_in_flight,
        duration_seconds=duration,
    )
