"""Domain models for paired sample collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SampleSource(str, Enum):
    """Where a sample was measured; the value is used in artifact file names."""

    WPT = "wpt"
    UNTHROTTLED = "unthrottled"


@dataclass(slots=True)
class Sample:
    """One successful collection attempt, held in memory until saved."""

    report: str
    trace: str
    devtools_log: str | None = None

    def is_complete(self, source: SampleSource) -> bool:
        if not self.report or not self.trace:
            return False
        if source is SampleSource.UNTHROTTLED:
            return bool(self.devtools_log)
        return True


@dataclass(slots=True)
class RemoteJob:
    """Handle of one submitted remote test."""

    test_id: str
    json_url: str


@dataclass(slots=True)
class SavedSample:
    """File names of one sample persisted in the collection folder."""

    lhr: str
    trace: str
    devtools_log: str | None = None

    def to_record(self) -> dict[str, str]:
        record = {"lhr": self.lhr, "trace": self.trace}
        if self.devtools_log is not None:
            record["devtoolsLog"] = self.devtools_log
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> SavedSample:
        return cls(
            lhr=str(record["lhr"]),
            trace=str(record["trace"]),
            devtools_log=record.get("devtoolsLog"),
        )


@dataclass(slots=True)
class UrlResultSet:
    """Saved samples of both sources for one URL."""

    url: str
    wpt: list[SavedSample] = field(default_factory=list)
    unthrottled: list[SavedSample] = field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "wpt": [saved.to_record() for saved in self.wpt],
            "unthrottled": [saved.to_record() for saved in self.unthrottled],
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> UrlResultSet:
        return cls(
            url=str(record["url"]),
            wpt=[SavedSample.from_record(item) for item in record.get("wpt", [])],
            unthrottled=[SavedSample.from_record(item) for item in record.get("unthrottled", [])],
        )


@dataclass(slots=True)
class CollectionReport:
    """Outcome of one collection run."""

    collected: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    archive_path: str | None = None
