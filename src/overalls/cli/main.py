"""overalls CLI - run go test with coverage in every package and merge the profiles."""

import asyncio
from pathlib import Path

import click
import structlog

from overalls.cli.utils import find_project_root
from overalls.config.constants import COVER_MODES, DEFAULT_IGNORES, OUT_FILENAME
from overalls.config.loader import load_config
from overalls.core.errors import OverallsError
from overalls.core.logging import configure_cli_logging, get_log_file_path
from overalls.core.progress import pluralize, status
from overalls.coverage.profile import build_text_summary
from overalls.ops import run_coverage

log = structlog.get_logger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version="0.1.0", prog_name="overalls")
@click.option(
    "--project",
    "-p",
    default=None,
    help="Project directory, or an import path relative to $GOPATH/src. "
    "Default: current directory.",
)
@click.option(
    "--covermode",
    type=click.Choice(COVER_MODES),
    default=None,
    help="Mode to run when testing files. Default: count.",
)
@click.option(
    "--ignore",
    default=None,
    help=f"Comma separated directories to skip, relative to the project. "
    f"Default: '{DEFAULT_IGNORES}'.",
)
@click.option(
    "--concurrency",
    type=int,
    default=None,
    help="Limit the number of packages processed at one time (at least 1). Default: unlimited.",
)
@click.option(
    "--go-binary",
    default=None,
    help="Alternative test runner, e.g. 'richgo'. Default: go.",
)
@click.option("--debug", is_flag=True, help="Print debug messages, including each command.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write JSON logs at DEBUG level to this file.",
)
@click.argument("test_args", nargs=-1, type=click.UNPROCESSED)
def cli(
    project: str | None,
    covermode: str | None,
    ignore: str | None,
    concurrency: int | None,
    go_binary: str | None,
    debug: bool,
    log_file: Path | None,
    test_args: tuple[str, ...],
) -> None:
    """Run 'go test -cover' in every package and merge the profiles.

    Recursively traverses the project, runs
    'go test -covermode=<mode> -coverprofile=profile.coverprofile' in each
    directory with Go test files, and concatenates the results into one
    profile named 'overalls.coverprofile' in the project root.

    TEST_ARGS after '--' are passed to go test; from '-args' on they are
    passed to the test binary:

        overalls -p github.com/user/repo -- -race -args -flag=value
    """
    configure_cli_logging(debug=debug, log_file=log_file)

    try:
        project_root = find_project_root(project)
        config = load_config(
            project_root,
            test_args=test_args,
            covermode=covermode,
            ignore=ignore,
            concurrency=concurrency,
            go_binary=go_binary,
            debug=True if debug else None,
        )
    except OverallsError as e:
        raise click.ClickException(str(e)) from e

    if config.debug and not debug:
        # Enabled through env or project config
        configure_cli_logging(debug=True, log_file=log_file)

    log.debug("config_resolved", **config.model_dump(mode="json"))

    try:
        result = asyncio.run(run_coverage(config))
    except OverallsError as e:
        log.error("run_failed", **e.to_dict())
        log_path = get_log_file_path()
        hint = f" (details in {log_path})" if log_path else ""
        raise click.ClickException(f"{e}{hint}") from e

    status(
        f"Wrote {OUT_FILENAME} from {pluralize(len(result.packages), 'package')} "
        f"in {result.duration_seconds:.1f}s",
        style="success",
    )
    status(build_text_summary(result.summary))


if __name__ == "__main__":
    cli()
