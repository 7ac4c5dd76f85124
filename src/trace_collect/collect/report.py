"""Narrow validity contract for audit reports."""

from __future__ import annotations

import json
from typing import Any

from trace_collect.collect.errors import ValidationError


def get_metrics(report: dict[str, Any]) -> dict[str, Any] | None:
    """Return the first metrics item of a report, if the run produced one."""

    audit = (report.get("audits") or {}).get("metrics") or {}
    details = audit.get("details") or {}
    items = details.get("items") or []
    if not items or not isinstance(items[0], dict):
        return None
    return dict(items[0])


def assert_report(report: dict[str, Any] | None) -> dict[str, Any]:
    """Raise ``ValidationError`` unless the report carries usable timing metrics."""

    if not report:
        raise ValidationError("missing lhr")
    if report.get("runtimeError"):
        raise ValidationError(f"runtime error: {_describe_runtime_error(report['runtimeError'])}")
    metrics = get_metrics(report)
    if metrics and metrics.get("interactive") and metrics.get("firstContentfulPaint"):
        return report
    raise ValidationError("run failed to get metrics")


def parse_report(raw: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as error:
        raise ValidationError(f"report is not valid JSON: {error}") from error
    if not isinstance(payload, dict):
        raise ValidationError("report is not a JSON object")
    return payload


def compact_report(report: dict[str, Any]) -> str:
    return json.dumps(report, ensure_ascii=False, separators=(",", ":"))


def _describe_runtime_error(value: Any) -> str:
    if isinstance(value, dict):
        code = value.get("code")
        message = value.get("message")
        return " ".join(str(part) for part in (code, message) if part) or json.dumps(value)
    return str(value)
