"""Sample backend implementations."""

from trace_collect.collect.backend.base import SampleFetcher
from trace_collect.collect.backend.local import LocalFetcherConfig, LocalSampleFetcher
from trace_collect.collect.backend.wpt import WptFetcherConfig, WptSampleFetcher

__all__ = [
    "LocalFetcherConfig",
    "LocalSampleFetcher",
    "SampleFetcher",
    "WptFetcherConfig",
    "WptSampleFetcher",
]
