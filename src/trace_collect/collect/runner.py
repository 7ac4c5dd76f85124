"""Resumable collection run over the configured URL list."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from trace_collect.collect.coordinator import SampleCoordinator
from trace_collect.collect.models import CollectionReport, UrlResultSet
from trace_collect.collect.progress import ProgressLog
from trace_collect.collect.storage import SummaryStore, archive_directory

logger = logging.getLogger(__name__)


def filter_summary(summary: list[UrlResultSet], urls: tuple[str, ...]) -> list[UrlResultSet]:
    """Drop result sets for URLs that are no longer configured."""

    allowed = set(urls)
    return [result_set for result_set in summary if result_set.url in allowed]


class CollectionRunner:
    """Owns the run summary: skips finished URLs and saves after each new one."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        coordinator: SampleCoordinator,
        summary_store: SummaryStore,
        progress: ProgressLog,
        output_dir: Path,
        archive: Callable[[Path], Path] = archive_directory,
    ) -> None:
        self.coordinator = coordinator
        self.summary_store = summary_store
        self.progress = progress
        self.output_dir = output_dir
        self._archive = archive

    async def run(self, urls: tuple[str, ...]) -> CollectionReport:
        report = CollectionReport()
        try:
            # Resume state from a previous invocation.
            summary = filter_summary(self.summary_store.load(), urls)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            completed = {result_set.url for result_set in summary}

            # One URL at a time so all of its samples come from a small time frame.
            for index, url in enumerate(urls):
                if url in completed:
                    self.progress.log(f"already collected traces for {url}")
                    report.skipped.append(url)
                    continue

                self.progress.log(f"collecting traces for {url}")
                result_set = await self.coordinator.collect_url(url, index=index, total=len(urls))
                if result_set is None:
                    report.failed.append(url)
                    continue

                self.progress.log(f"collected results for {url}, saving progress.")
                summary.append(result_set)
                completed.add(url)
                self.summary_store.save(summary)
                report.collected.append(url)

            self.progress.progress("archiving ...")
            report.archive_path = str(self._archive(self.output_dir))
            logger.info("Archived %s to %s", self.output_dir, report.archive_path)
            return report
        finally:
            self.progress.close()
