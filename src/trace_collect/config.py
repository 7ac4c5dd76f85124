"""Runtime configuration for trace collection."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from trace_collect.collect.errors import MissingConfigurationError
from trace_collect.urls import DEFAULT_TEST_URLS

DEFAULT_SAMPLES = 9
DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_WPT_BASE_URL = "https://www.webpagetest.org"
# Keep the location constant: Chrome Beta on a Moto G4 over 3G.
DEFAULT_WPT_LOCATION = "Dulles_MotoG4:Motorola G (gen 4) - Chrome Beta.3G"


@dataclass(slots=True)
class WptSettings:
    """Remote test queue settings."""

    api_key: str = ""
    base_url: str = DEFAULT_WPT_BASE_URL
    location: str = DEFAULT_WPT_LOCATION
    request_timeout_seconds: float = 60.0


@dataclass(slots=True)
class LocalSettings:
    """Local page-analysis tool settings."""

    command: tuple[str, ...] = ("lighthouse",)
    artifacts_dir: Path = Path(".tmp/collect-traces-artifacts")
    with_oopifs: bool = False


@dataclass(slots=True)
class CollectSettings:
    """Sampling and output settings."""

    samples: int = DEFAULT_SAMPLES
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    test_urls: tuple[str, ...] = DEFAULT_TEST_URLS
    output_dir: Path = Path("dist/collect-lantern-traces")
    debug: bool = False

    @property
    def summary_path(self) -> Path:
        return self.output_dir / "summary.json"


@dataclass(slots=True)
class Settings:
    """Application settings grouped by collection concerns."""

    collect: CollectSettings = field(default_factory=CollectSettings)
    wpt: WptSettings = field(default_factory=WptSettings)
    local: LocalSettings = field(default_factory=LocalSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment, honoring the short legacy names."""

        test_urls = _collect_test_urls()
        return cls(
            collect=CollectSettings(
                samples=int(_getenv("SAMPLES", str(DEFAULT_SAMPLES))),
                max_attempts=int(
                    os.getenv("TRACE_COLLECT_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS)),
                ),
                test_urls=test_urls or DEFAULT_TEST_URLS,
                output_dir=Path(
                    os.getenv("TRACE_COLLECT_OUTPUT_DIR", "dist/collect-lantern-traces"),
                ),
                debug=_env_bool("DEBUG", default=False),
            ),
            wpt=WptSettings(
                api_key=_getenv("WPT_KEY", "").strip(),
                base_url=os.getenv("TRACE_COLLECT_WPT_BASE_URL", DEFAULT_WPT_BASE_URL).rstrip("/"),
                location=os.getenv("TRACE_COLLECT_WPT_LOCATION", DEFAULT_WPT_LOCATION),
                request_timeout_seconds=float(
                    os.getenv("TRACE_COLLECT_REQUEST_TIMEOUT_SECONDS", "60.0"),
                ),
            ),
            local=LocalSettings(
                command=tuple(
                    shlex.split(os.getenv("TRACE_COLLECT_LIGHTHOUSE_COMMAND", "lighthouse")),
                ),
                artifacts_dir=Path(
                    os.getenv("TRACE_COLLECT_ARTIFACTS_DIR", ".tmp/collect-traces-artifacts"),
                ),
                with_oopifs=_getenv("WITH_OOPIFS", "") == "1",
            ),
        )

    def validate_for_collect(self, override_urls: tuple[str, ...] = ()) -> None:
        """Raise configuration error if the collection job cannot start."""

        if not self.wpt.api_key:
            raise MissingConfigurationError("missing WPT_KEY")
        if self.collect.samples <= 0:
            raise ValueError("SAMPLES must be a positive integer.")
        if self.collect.max_attempts <= 0:
            raise ValueError("TRACE_COLLECT_MAX_ATTEMPTS must be a positive integer.")
        if not self.local.command:
            raise ValueError("TRACE_COLLECT_LIGHTHOUSE_COMMAND must not be empty.")

        effective_urls = normalize_urls(override_urls or self.collect.test_urls)
        if not effective_urls:
            raise ValueError("At least one test URL is required. Set TEST_URLS or pass --url.")
        for url in effective_urls:
            _validate_test_url(url)


def normalize_urls(values: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Strip blanks and duplicates while keeping the configured order."""

    deduped: list[str] = []
    seen: set[str] = set()
    for value in values:
        normalized = value.strip()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        deduped.append(normalized)
    return tuple(deduped)


def _collect_test_urls() -> tuple[str, ...]:
    raw = _getenv("TEST_URLS", "").strip()
    if not raw:
        return ()
    return normalize_urls(raw.split())


def _getenv(name: str, default: str) -> str:
    """Read ``TRACE_COLLECT_<name>`` first, then the bare legacy name."""

    value = os.getenv(f"TRACE_COLLECT_{name}")
    if value is not None:
        return value
    return os.getenv(name, default)


def _validate_test_url(value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(
            "Invalid test URL: "
            f"{value!r}. Expected an absolute URL with http:// or https:// scheme.",
        )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(f"TRACE_COLLECT_{name}", os.getenv(name))
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
