"""Subprocess-based backend running the page-analysis CLI unthrottled."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from trace_collect.collect.errors import ArtifactMissingError, LocalRunError
from trace_collect.collect.models import Sample
from trace_collect.collect.report import assert_report, compact_report, parse_report

logger = logging.getLogger(__name__)

DEVTOOLS_LOG_FILE_NAME = "defaultPass.devtoolslog.json"
TRACE_FILE_NAME = "defaultPass.trace.json"
DISABLE_SITE_ISOLATION_FLAG = "--chrome-flags=--disable-features=site-per-process"


@dataclass(slots=True)
class LocalFetcherConfig:
    """Local tool command and the folder it writes artifacts into."""

    command: tuple[str, ...]
    artifacts_dir: Path
    with_oopifs: bool = False


class LocalSampleFetcher:
    """Run the page-analysis CLI once and assemble a sample from its outputs."""

    def __init__(self, config: LocalFetcherConfig) -> None:
        self.config = config

    @property
    def devtools_log_path(self) -> Path:
        return self.config.artifacts_dir / DEVTOOLS_LOG_FILE_NAME

    @property
    def trace_path(self) -> Path:
        return self.config.artifacts_dir / TRACE_FILE_NAME

    async def fetch(self, url: str) -> Sample:
        run_args = build_run_args(self.config, url)
        logger.debug("Running local analysis: %s", " ".join(run_args))
        try:
            process = await asyncio.create_subprocess_exec(
                *run_args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as error:
            raise LocalRunError(f"local analysis command not found: {run_args[0]}") from error
        # communicate() reads the whole report; it can be several megabytes.
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            stderr_text = stderr.decode("utf-8", errors="replace").strip()
            raise LocalRunError(
                f"local analysis exited with {process.returncode}: {stderr_text[-500:]}",
                exit_code=process.returncode,
                stderr=stderr_text,
            )

        report = assert_report(parse_report(stdout.decode("utf-8", errors="replace")))
        devtools_log = _read_artifact(self.devtools_log_path)
        trace = _read_artifact(self.trace_path)
        return Sample(report=compact_report(report), trace=trace, devtools_log=devtools_log)


def build_run_args(config: LocalFetcherConfig, url: str) -> list[str]:
    run_args = [
        *config.command,
        url,
        "--throttling-method=provided",
        "--output=json",
        f"-AG={config.artifacts_dir}",
    ]
    if not config.with_oopifs:
        run_args.append(DISABLE_SITE_ISOLATION_FLAG)
    return run_args


def _read_artifact(path: Path) -> str:
    try:
        text = path.read_text("utf-8")
    except FileNotFoundError as error:
        raise ArtifactMissingError(f"expected artifact missing: {path}", path=str(path)) from error
    if not text.strip():
        raise ArtifactMissingError(f"expected artifact is empty: {path}", path=str(path))
    return text
