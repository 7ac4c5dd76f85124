"""Progress reporting handle passed explicitly through a collection run."""

from __future__ import annotations

import logging
from collections.abc import Callable

import click

logger = logging.getLogger(__name__)


class ProgressLog:
    """Emit status messages and per-sample progress lines."""

    def __init__(self, writer: Callable[[str], None] = click.echo) -> None:
        self._writer = writer
        self.closed = False

    def log(self, message: str) -> None:
        logger.debug("%s", message)
        self._writer(message)

    def progress(self, line: str) -> None:
        if self.closed:
            return
        logger.debug("progress: %s", line)
        self._writer(line)

    def close(self) -> None:
        self.closed = True


def format_progress(  # noqa: PLR0913
    *,
    url: str,
    index: int,
    total: int,
    wpt_done: int,
    unthrottled_done: int,
    samples: int,
) -> str:
    """Render ``<url> (i / n) wpt (k / N) unthrottled (k / N)``; the shown k is the next slot."""

    return " ".join(
        [
            f"{url} ({index + 1} / {total})",
            "wpt",
            _slot(wpt_done, samples),
            "unthrottled",
            _slot(unthrottled_done, samples),
        ],
    )


def _slot(done: int, samples: int) -> str:
    if done >= samples:
        return "(DONE)"
    return f"({done + 1} / {samples})"
