"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from trace_collect.collect.models import Sample
from trace_collect.collect.progress import ProgressLog
from trace_collect.collect.storage import ArtifactStore


def make_report(**overrides: Any) -> dict[str, Any]:
    report: dict[str, Any] = {
        "lighthouseVersion": "5.6.0",
        "audits": {
            "metrics": {
                "details": {
                    "items": [{"interactive": 4200, "firstContentfulPaint": 1800}],
                },
            },
        },
    }
    report.update(overrides)
    return report


def make_sample(*, local: bool = False) -> Sample:
    return Sample(
        report=json.dumps(make_report()),
        trace=json.dumps({"traceEvents": [{"name": "navigationStart"}]}),
        devtools_log=json.dumps([{"method": "Network.requestWillBeSent"}]) if local else None,
    )


class FakeFetcher:
    """Scripted fetcher: ``outcome(call_no)`` returns a sample or raises."""

    def __init__(self, outcome: Callable[[int], Sample]) -> None:
        self._outcome = outcome
        self.calls: list[str] = []

    async def fetch(self, url: str) -> Sample:
        self.calls.append(url)
        return self._outcome(len(self.calls))


@pytest.fixture()
def valid_report() -> dict[str, Any]:
    return make_report()


@pytest.fixture()
def progress_lines() -> list[str]:
    return []


@pytest.fixture()
def progress(progress_lines: list[str]) -> ProgressLog:
    return ProgressLog(progress_lines.append)


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "collect-lantern-traces"


@pytest.fixture()
def store(output_dir: Path) -> ArtifactStore:
    return ArtifactStore(output_dir)
