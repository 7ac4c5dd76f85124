"""Per-URL sample collection across the remote and local backends."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field

from trace_collect.collect.backend.base import SampleFetcher
from trace_collect.collect.errors import ValidationError
from trace_collect.collect.models import Sample, SampleSource, SavedSample, UrlResultSet
from trace_collect.collect.progress import ProgressLog, format_progress
from trace_collect.collect.retry import repeat_until_pass
from trace_collect.collect.storage import ArtifactStore
from trace_collect.config import DEFAULT_MAX_ATTEMPTS, DEFAULT_SAMPLES

logger = logging.getLogger(__name__)


def required_samples(samples: int) -> int:
    """Minimum samples per source for a URL to be kept."""

    return math.ceil(samples / 2)


@dataclass(slots=True)
class _UrlCollection:
    url: str
    index: int
    total: int
    wpt: list[SavedSample] = field(default_factory=list)
    unthrottled: list[SavedSample] = field(default_factory=list)
    save_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SampleCoordinator:
    """Collect ``samples`` remote and local samples for one URL.

    Remote attempts run concurrently. Local attempts start once the first
    remote attempt has settled, so both sources observe the page close in
    time, and then run strictly one at a time.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        remote: SampleFetcher,
        local: SampleFetcher,
        store: ArtifactStore,
        progress: ProgressLog,
        samples: int = DEFAULT_SAMPLES,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.remote = remote
        self.local = local
        self.store = store
        self.progress = progress
        self.samples = samples
        self.max_attempts = max_attempts

    async def collect_url(self, url: str, *, index: int = 0, total: int = 1) -> UrlResultSet | None:
        """Return the saved result set, or ``None`` if too many slots came back empty."""

        collection = _UrlCollection(url=url, index=index, total=total)
        self._update_progress(collection)

        remote_tasks = [
            asyncio.create_task(self._collect_remote(collection)) for _ in range(self.samples)
        ]
        try:
            # The remote job may sit in the queue for a while. Waiting for the first one
            # keeps the local run from seeing totally different content.
            await asyncio.wait(remote_tasks, return_when=asyncio.FIRST_COMPLETED)
            _raise_remote_failure(remote_tasks)

            for _ in range(self.samples):
                await self._collect_local(collection)
                _raise_remote_failure(remote_tasks)

            await asyncio.gather(*remote_tasks)
        finally:
            for task in remote_tasks:
                task.cancel()
            await asyncio.gather(*remote_tasks, return_exceptions=True)

        minimum = required_samples(self.samples)
        if len(collection.wpt) < minimum or len(collection.unthrottled) < minimum:
            self.progress.log(f"too many results for {url} failed, skipping.")
            logger.info(
                "Discarding %s: wpt=%d unthrottled=%d required=%d",
                url,
                len(collection.wpt),
                len(collection.unthrottled),
                minimum,
            )
            return None

        return UrlResultSet(
            url=url,
            wpt=list(collection.wpt),
            unthrottled=list(collection.unthrottled),
        )

    async def _collect_remote(self, collection: _UrlCollection) -> None:
        try:
            sample = await repeat_until_pass(
                lambda: _fetch_complete(self.remote, collection.url, SampleSource.WPT),
                max_attempts=self.max_attempts,
                label=f"wpt {collection.url}",
            )
            if sample is not None:
                await self._save(collection, SampleSource.WPT, sample)
        finally:
            self._update_progress(collection)

    async def _collect_local(self, collection: _UrlCollection) -> None:
        sample = await repeat_until_pass(
            lambda: _fetch_complete(self.local, collection.url, SampleSource.UNTHROTTLED),
            max_attempts=self.max_attempts,
            label=f"unthrottled {collection.url}",
        )
        if sample is not None:
            await self._save(collection, SampleSource.UNTHROTTLED, sample)
        self._update_progress(collection)

    async def _save(self, collection: _UrlCollection, source: SampleSource, sample: Sample) -> None:
        saved = collection.wpt if source is SampleSource.WPT else collection.unthrottled
        # Slots are numbered in arrival order, so the next slot is held until written.
        async with collection.save_lock:
            saved.append(
                await asyncio.to_thread(
                    self.store.save_sample,
                    collection.url,
                    source,
                    len(saved) + 1,
                    sample,
                ),
            )

    def _update_progress(self, collection: _UrlCollection) -> None:
        self.progress.progress(
            format_progress(
                url=collection.url,
                index=collection.index,
                total=collection.total,
                wpt_done=len(collection.wpt),
                unthrottled_done=len(collection.unthrottled),
                samples=self.samples,
            ),
        )


async def _fetch_complete(fetcher: SampleFetcher, url: str, source: SampleSource) -> Sample:
    sample = await fetcher.fetch(url)
    if not sample.is_complete(source):
        raise ValidationError(f"incomplete {source.value} sample for {url}")
    return sample


def _raise_remote_failure(tasks: list[asyncio.Task[None]]) -> None:
    """Re-raise the first error a finished remote task ended with."""

    for task in tasks:
        if task.done() and not task.cancelled() and task.exception() is not None:
            raise task.exception()
