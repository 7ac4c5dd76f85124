"""Remote sample backend driving the WebPageTest job queue."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from trace_collect.collect.errors import (
    HttpFetchError,
    SubmissionError,
    UnexpectedStatusError,
)
from trace_collect.collect.models import RemoteJob, Sample
from trace_collect.collect.report import assert_report, compact_report
from trace_collect.config import DEFAULT_WPT_BASE_URL, DEFAULT_WPT_LOCATION
from trace_collect.http.fetcher import HttpFetcher

logger = logging.getLogger(__name__)

STATUS_COMPLETE = 200
POLL_BASE_SECONDS = 30
POLL_SECONDS_PER_QUEUED_TEST = 10
TRACE_FILE_NAME = "lighthouse_trace.json"


@dataclass(slots=True)
class WptFetcherConfig:
    """Remote queue endpoint and test profile."""

    api_key: str
    base_url: str = DEFAULT_WPT_BASE_URL
    location: str = DEFAULT_WPT_LOCATION


def poll_delay_seconds(behind_count: int | None) -> int:
    """Seconds to wait before the next poll, growing with queue position."""

    return POLL_BASE_SECONDS + POLL_SECONDS_PER_QUEUED_TEST * (behind_count or 0)


class WptSampleFetcher:
    """Submit one throttled test, poll it to completion, then fetch its trace."""

    def __init__(
        self,
        config: WptFetcherConfig,
        http: HttpFetcher,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.http = http
        self._sleep = sleep

    async def fetch(self, url: str) -> Sample:
        job = await self.submit(url)
        logger.debug("Submitted WPT test %s (%s) for %s", job.test_id, job.json_url, url)
        report = await self.wait_for_report(job)
        trace = await self.fetch_trace(job)
        return Sample(report=compact_report(report), trace=trace)

    async def submit(self, url: str) -> RemoteJob:
        params = {
            "k": self.config.api_key,
            "f": "json",
            "url": url,
            "location": self.config.location,
            "runs": "1",
            "lighthouse": "1",
            # Make the trace file available over /getgzip.php.
            "lighthouseTrace": "1",
            # Skip the repeat view and other extra WPT analysis.
            "type": "lighthouse",
        }
        try:
            response = await self.http.fetch_json(f"{self.config.base_url}/runtest.php", params)
        except HttpFetchError as error:
            raise SubmissionError(str(error), status_code=error.status_code) from error
        except json.JSONDecodeError as error:
            raise SubmissionError(f"submission response is not JSON: {error}") from error

        status_code = _status_code(response)
        if status_code != STATUS_COMPLETE:
            raise SubmissionError(
                f"unexpected status code {status_code} {_status_text(response)}",
                status_code=status_code,
            )
        data = response.get("data") or {}
        try:
            return RemoteJob(test_id=str(data["testId"]), json_url=str(data["jsonUrl"]))
        except KeyError as error:
            raise SubmissionError(f"submission response missing {error}") from error

    async def wait_for_report(self, job: RemoteJob) -> dict[str, Any]:
        """Poll the job status until it completes; waits longer the deeper it is queued."""

        while True:
            response = await self.http.fetch_json(job.json_url)
            status_code = _status_code(response)
            data = response.get("data") or {}

            if status_code == STATUS_COMPLETE:
                return assert_report(data.get("lighthouse"))

            if status_code is not None and 100 <= status_code < STATUS_COMPLETE:
                # No behindCount means the test is currently running.
                delay = poll_delay_seconds(data.get("behindCount"))
                logger.debug("Poll WPT test %s in %ss", job.test_id, delay)
                await self._sleep(delay)
                continue

            raise UnexpectedStatusError(
                f"unexpected response: {status_code} {_status_text(response)}",
                status_code=status_code,
            )

    async def fetch_trace(self, job: RemoteJob) -> str:
        trace = await self.http.fetch_json(
            f"{self.config.base_url}/getgzip.php",
            {"test": job.test_id, "file": TRACE_FILE_NAME},
        )
        # The first trace event served by WPT is an empty object.
        trace["traceEvents"] = [event for event in trace.get("traceEvents", []) if event]
        return json.dumps(trace)


def _status_code(response: dict[str, Any]) -> int | None:
    value = response.get("statusCode")
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _status_text(response: dict[str, Any]) -> str:
    return str(response.get("statusText") or "")
