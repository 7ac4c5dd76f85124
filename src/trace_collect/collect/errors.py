"""Error taxonomy for sample collection."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CollectError(Exception):
    """Base collection error."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class SubmissionError(CollectError):
    """Remote queue refused or failed to accept a test job."""

    status_code: int | None = None


@dataclass(slots=True)
class UnexpectedStatusError(CollectError):
    """Remote job status poll returned a non-progress, non-success code."""

    status_code: int | None = None


@dataclass(slots=True)
class ValidationError(CollectError):
    """Collected report is missing, errored, or lacks required metrics."""


@dataclass(slots=True)
class ArtifactMissingError(CollectError):
    """Local tool did not leave an expected artifact file behind."""

    path: str = ""


@dataclass(slots=True)
class HttpFetchError(CollectError):
    """HTTP request answered with a non-success status."""

    url: str = ""
    status_code: int | None = None


@dataclass(slots=True)
class LocalRunError(CollectError):
    """Local tool exited with a non-zero status."""

    exit_code: int | None = None
    stderr: str = ""


@dataclass(slots=True)
class MissingConfigurationError(CollectError):
    """Required configuration is absent; the run cannot start."""
