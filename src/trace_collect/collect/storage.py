"""Collection folder layout, run summary persistence and archival."""

from __future__ import annotations

import json
import logging
import os
import re
import tarfile
from pathlib import Path

from trace_collect.collect.models import Sample, SampleSource, SavedSample, UrlResultSet

logger = logging.getLogger(__name__)

_UNSAFE_URL_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def sanitize_url(url: str) -> str:
    return _UNSAFE_URL_CHARS.sub("-", url)


def sample_prefix(url: str, source: SampleSource, index: int) -> str:
    """File name prefix for the ``index``-th (1-based) sample of ``source``."""

    return f"{sanitize_url(url)}-mobile-{source.value}-{index}"


class ArtifactStore:
    """Writes sample components as individual files under one folder."""

    def __init__(self, root_dir: Path) -> None:
        self.root_dir = root_dir

    def save(self, filename: str, data: str) -> str:
        self.root_dir.mkdir(parents=True, exist_ok=True)
        (self.root_dir / filename).write_bytes(data.encode("utf-8"))
        return filename

    def read(self, filename: str) -> str:
        return (self.root_dir / filename).read_bytes().decode("utf-8")

    def save_sample(
        self,
        url: str,
        source: SampleSource,
        index: int,
        sample: Sample,
    ) -> SavedSample:
        if not sample.is_complete(source):
            raise ValueError(f"incomplete {source.value} sample for {url}")
        prefix = sample_prefix(url, source, index)
        devtools_log = None
        if source is SampleSource.UNTHROTTLED and sample.devtools_log is not None:
            devtools_log = self.save(f"{prefix}-devtoolsLog.json", sample.devtools_log)
        return SavedSample(
            lhr=self.save(f"{prefix}-lhr.json", sample.report),
            trace=self.save(f"{prefix}-trace.json", sample.trace),
            devtools_log=devtools_log,
        )


class SummaryStore:
    """Run summary stored as one JSON document, rewritten after every URL."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> list[UrlResultSet]:
        if not self.path.exists():
            return []
        payload = json.loads(self.path.read_text("utf-8"))
        if not isinstance(payload, list):
            raise TypeError(f"Expected JSON array in {self.path}")
        return [UrlResultSet.from_record(record) for record in payload]

    def save(self, summary: list[UrlResultSet]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(
            json.dumps([result_set.to_record() for result_set in summary], indent=2),
            "utf-8",
        )
        os.replace(tmp_path, self.path)
        logger.debug("Saved summary with %d URLs to %s", len(summary), self.path)


def archive_directory(directory: Path) -> Path:
    """Pack ``directory`` into ``<directory>.tar.gz`` beside it."""

    if not directory.exists():
        raise FileNotFoundError(f"Collection folder not found: {directory}")
    archive_path = directory.with_name(f"{directory.name}.tar.gz")
    with tarfile.open(archive_path, "w:gz") as archive:
        archive.add(directory, arcname=directory.name)
    return archive_path
