"""CLI entrypoint for trace-collect."""

import sys
import traceback
from pathlib import Path

import rich_click as click

from trace_collect import __version__
from trace_collect.collect.controllers import (
    CollectCliController,
    CollectCommand,
    StatusCommand,
)
from trace_collect.collect.errors import MissingConfigurationError

COLLECT_CONTROLLER = CollectCliController()


@click.group()
@click.version_option(version=__version__, prog_name="trace-collect")
def trace_collect() -> None:
    """Collect paired WebPageTest and unthrottled local traces."""


@trace_collect.command("collect")
@click.option(
    "--samples",
    type=click.IntRange(min=1),
    default=None,
    help="Samples per source per URL. Defaults to SAMPLES or 9.",
)
@click.option(
    "--url",
    "urls",
    multiple=True,
    help="URL to collect. Can be repeated; overrides TEST_URLS.",
)
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Collection folder holding artifacts and summary.json.",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
def collect(
    samples: int | None,
    urls: tuple[str, ...],
    output_dir: Path | None,
    debug: bool,
) -> None:
    """Collect samples for every configured URL, resuming a previous run."""

    try:
        plan = COLLECT_CONTROLLER.prepare(
            CollectCommand(
                samples=samples,
                urls=urls,
                output_dir=output_dir,
                debug=debug,
            ),
        )
    except (MissingConfigurationError, ValueError) as error:
        raise click.ClickException(str(error)) from error

    try:
        lines = COLLECT_CONTROLLER.collect(plan)
    except Exception:  # noqa: BLE001
        sys.stderr.write(f"Fatal error in collect:\n\n  {traceback.format_exc()}")
        sys.exit(1)
    _emit_lines(lines)


@trace_collect.command("status")
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Collection folder holding summary.json.",
)
@click.option("--url", "urls", multiple=True, help="Limit the report to these URLs.")
def status(output_dir: Path | None, urls: tuple[str, ...]) -> None:
    """Show which URLs already have saved samples."""

    try:
        lines = COLLECT_CONTROLLER.status(StatusCommand(output_dir=output_dir, urls=urls))
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    trace_collect()
