from __future__ import annotations

from pathlib import Path

import allure
import pytest
from conftest import FakeFetcher, make_sample

from trace_collect.collect.coordinator import SampleCoordinator
from trace_collect.collect.errors import SubmissionError
from trace_collect.collect.models import Sample, SavedSample, UrlResultSet
from trace_collect.collect.progress import ProgressLog
from trace_collect.collect.runner import CollectionRunner, filter_summary
from trace_collect.collect.storage import ArtifactStore, SummaryStore

pytestmark = [
    allure.epic("Trace Collection"),
    allure.feature("Run State Manager"),
]

_A = "https://a.example/"
_B = "https://b.example/"
_C = "https://c.example/"


def _result_set(url: str) -> UrlResultSet:
    return UrlResultSet(
        url=url,
        wpt=[SavedSample(lhr="w-lhr.json", trace="w-trace.json")],
        unthrottled=[SavedSample(lhr="u-lhr.json", trace="u-trace.json", devtools_log="u.json")],
    )


class _Harness:
    def __init__(self, output_dir: Path, progress: ProgressLog, *, remote=None) -> None:
        self.remote = remote or FakeFetcher(lambda _call: make_sample())
        self.local = FakeFetcher(lambda _call: make_sample(local=True))
        self.summary_store = SummaryStore(output_dir / "summary.json")
        self.archived: list[Path] = []
        self.runner = CollectionRunner(
            coordinator=SampleCoordinator(
                remote=self.remote,
                local=self.local,
                store=ArtifactStore(output_dir),
                progress=progress,
                samples=2,
            ),
            summary_store=self.summary_store,
            progress=progress,
            output_dir=output_dir,
            archive=self._archive,
        )

    def _archive(self, directory: Path) -> Path:
        self.archived.append(directory)
        return directory.with_name(f"{directory.name}.tar.gz")


def test_filter_summary_drops_urls_no_longer_configured() -> None:
    summary = [_result_set(_A), _result_set(_B), _result_set(_C)]

    assert [result_set.url for result_set in filter_summary(summary, (_C, _A))] == [_A, _C]


@pytest.mark.asyncio
async def test_new_url_is_collected_and_persisted(output_dir: Path, progress: ProgressLog) -> None:
    harness = _Harness(output_dir, progress)

    report = await harness.runner.run((_A,))

    assert report.collected == [_A]
    summary = harness.summary_store.load()
    assert len(summary) == 1
    assert summary[0].url == _A
    assert len(summary[0].wpt) == 2
    assert len(summary[0].unthrottled) == 2
    assert harness.archived == [output_dir]
    assert report.archive_path == str(output_dir.with_name("collect-lantern-traces.tar.gz"))
    assert progress.closed


@pytest.mark.asyncio
async def test_already_collected_url_is_skipped_without_fetching(
    output_dir: Path,
    progress: ProgressLog,
    progress_lines: list[str],
) -> None:
    SummaryStore(output_dir / "summary.json").save([_result_set(_A)])
    harness = _Harness(output_dir, progress)

    report = await harness.runner.run((_A, _B))

    assert report.skipped == [_A]
    assert report.collected == [_B]
    assert harness.remote.calls == [_B, _B]
    assert harness.local.calls == [_B, _B]
    assert f"already collected traces for {_A}" in progress_lines
    assert [result_set.url for result_set in harness.summary_store.load()] == [_A, _B]


@pytest.mark.asyncio
async def test_removed_urls_are_dropped_from_summary(
    output_dir: Path,
    progress: ProgressLog,
) -> None:
    SummaryStore(output_dir / "summary.json").save([_result_set(_A), _result_set(_C)])
    harness = _Harness(output_dir, progress)

    await harness.runner.run((_B, _C))

    assert [result_set.url for result_set in harness.summary_store.load()] == [_C, _B]


@pytest.mark.asyncio
async def test_failed_url_leaves_summary_unchanged(
    output_dir: Path,
    progress: ProgressLog,
) -> None:
    SummaryStore(output_dir / "summary.json").save([_result_set(_A)])
    before = (output_dir / "summary.json").read_text("utf-8")

    def never(_call: int) -> Sample:
        raise SubmissionError("queue rejected the test")

    harness = _Harness(output_dir, progress, remote=FakeFetcher(never))

    report = await harness.runner.run((_A, _B))

    assert report.failed == [_B]
    assert report.collected == []
    assert (output_dir / "summary.json").read_text("utf-8") == before
    assert harness.archived == [output_dir]


@pytest.mark.asyncio
async def test_summary_saved_after_each_url_before_the_next_starts(
    output_dir: Path,
    progress: ProgressLog,
) -> None:
    seen_on_disk: list[list[str]] = []
    summary_path = output_dir / "summary.json"

    def remote_outcome(_call: int) -> Sample:
        store = SummaryStore(summary_path)
        seen_on_disk.append([result_set.url for result_set in store.load()])
        return make_sample()

    harness = _Harness(output_dir, progress, remote=FakeFetcher(remote_outcome))

    await harness.runner.run((_A, _B))

    # Both remote slots of B run after A has already been written to disk.
    assert seen_on_disk == [[], [], [_A], [_A]]


@pytest.mark.asyncio
async def test_crash_mid_run_keeps_finished_urls(output_dir: Path, progress: ProgressLog) -> None:
    harness = _Harness(output_dir, progress)
    original = harness.runner.coordinator.collect_url

    async def crash_on_b(url: str, *, index: int = 0, total: int = 1):
        if url == _B:
            raise OSError("disk full")
        return await original(url, index=index, total=total)

    harness.runner.coordinator.collect_url = crash_on_b  # type: ignore[method-assign]

    with pytest.raises(OSError, match="disk full"):
        await harness.runner.run((_A, _B))

    assert [result_set.url for result_set in harness.summary_store.load()] == [_A]
    assert harness.archived == []
    assert progress.closed
