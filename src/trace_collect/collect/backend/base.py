"""Fetcher interface shared by remote and local sample backends."""

from __future__ import annotations

from typing import Protocol

from trace_collect.collect.models import Sample


class SampleFetcher(Protocol):
    """Protocol implemented by sample backends."""

    async def fetch(self, url: str) -> Sample:
        """Collect one sample for ``url`` or raise."""
        raise NotImplementedError
