"""Controllers for collection CLI commands."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

import click

from trace_collect.collect.backend.local import LocalFetcherConfig, LocalSampleFetcher
from trace_collect.collect.backend.wpt import WptFetcherConfig, WptSampleFetcher
from trace_collect.collect.coordinator import SampleCoordinator, required_samples
from trace_collect.collect.progress import ProgressLog
from trace_collect.collect.runner import CollectionRunner, filter_summary
from trace_collect.collect.storage import ArtifactStore, SummaryStore
from trace_collect.config import Settings, normalize_urls
from trace_collect.http.fetcher import HttpFetcher


@dataclass(slots=True)
class CollectCommand:
    """CLI inputs for the collect command."""

    samples: int | None
    urls: tuple[str, ...]
    output_dir: Path | None
    debug: bool = False


@dataclass(slots=True)
class CollectPlan:
    """Validated settings and the URL list of one collect invocation."""

    settings: Settings
    urls: tuple[str, ...]


@dataclass(slots=True)
class StatusCommand:
    """CLI inputs for the status command."""

    output_dir: Path | None
    urls: tuple[str, ...]


class CollectCliController:
    """Builds collection dependencies from settings and runs commands."""

    def __init__(self, writer: Callable[[str], None] = click.echo) -> None:
        self.writer = writer

    def prepare(self, command: CollectCommand) -> CollectPlan:
        """Load and validate settings; raises before anything is written."""

        settings = _apply_overrides(Settings.from_env(), command)
        settings.validate_for_collect(override_urls=command.urls)
        _configure_logging(debug=settings.collect.debug)
        return CollectPlan(
            settings=settings,
            urls=normalize_urls(command.urls or settings.collect.test_urls),
        )

    def collect(self, plan: CollectPlan) -> list[str]:
        return asyncio.run(self._collect(plan.settings, plan.urls))

    def status(self, command: StatusCommand) -> list[str]:
        settings = Settings.from_env()
        if command.output_dir is not None:
            settings = replace(
                settings,
                collect=replace(settings.collect, output_dir=command.output_dir),
            )
        urls = normalize_urls(command.urls or settings.collect.test_urls)
        summary = filter_summary(SummaryStore(settings.collect.summary_path).load(), urls)
        by_url = {result_set.url: result_set for result_set in summary}

        lines = [f"Collected {len(by_url)} / {len(urls)} URLs in {settings.collect.output_dir}"]
        for url in urls:
            result_set = by_url.get(url)
            if result_set is None:
                lines.append(f"  {url}: pending")
                continue
            lines.append(
                f"  {url}: wpt={len(result_set.wpt)} unthrottled={len(result_set.unthrottled)}",
            )
        return lines

    async def _collect(self, settings: Settings, urls: tuple[str, ...]) -> list[str]:
        progress = ProgressLog(self.writer)
        async with HttpFetcher(timeout_seconds=settings.wpt.request_timeout_seconds) as http:
            coordinator = SampleCoordinator(
                remote=WptSampleFetcher(
                    WptFetcherConfig(
                        api_key=settings.wpt.api_key,
                        base_url=settings.wpt.base_url,
                        location=settings.wpt.location,
                    ),
                    http,
                ),
                local=LocalSampleFetcher(
                    LocalFetcherConfig(
                        command=settings.local.command,
                        artifacts_dir=settings.local.artifacts_dir,
                        with_oopifs=settings.local.with_oopifs,
                    ),
                ),
                store=ArtifactStore(settings.collect.output_dir),
                progress=progress,
                samples=settings.collect.samples,
                max_attempts=settings.collect.max_attempts,
            )
            runner = CollectionRunner(
                coordinator=coordinator,
                summary_store=SummaryStore(settings.collect.summary_path),
                progress=progress,
                output_dir=settings.collect.output_dir,
            )
            report = await runner.run(urls)

        return [
            "Collection finished: "
            f"collected={len(report.collected)} "
            f"skipped={len(report.skipped)} "
            f"failed={len(report.failed)} "
            f"samples={settings.collect.samples} "
            f"required={required_samples(settings.collect.samples)}",
            *(f"  failed: {url}" for url in report.failed),
            f"Archive: {report.archive_path or '-'}",
        ]


def _configure_logging(*, debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def _apply_overrides(settings: Settings, command: CollectCommand) -> Settings:
    collect = settings.collect
    if command.samples is not None:
        collect = replace(collect, samples=command.samples)
    if command.output_dir is not None:
        collect = replace(collect, output_dir=command.output_dir)
    if command.debug:
        collect = replace(collect, debug=True)
    return replace(settings, collect=collect)
