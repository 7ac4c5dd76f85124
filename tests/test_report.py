from __future__ import annotations

import json

import allure
import pytest
from conftest import make_report

from trace_collect.collect.errors import ValidationError
from trace_collect.collect.report import assert_report, compact_report, get_metrics, parse_report

pytestmark = [
    allure.epic("Trace Collection"),
    allure.feature("Report Validity"),
]


def test_get_metrics_returns_first_item(valid_report) -> None:
    assert get_metrics(valid_report) == {"interactive": 4200, "firstContentfulPaint": 1800}


def test_get_metrics_without_details_is_none() -> None:
    assert get_metrics({"audits": {"metrics": {}}}) is None
    assert get_metrics({}) is None


def test_assert_report_accepts_valid_report(valid_report) -> None:
    assert assert_report(valid_report) is valid_report


def test_assert_report_rejects_missing_report() -> None:
    with pytest.raises(ValidationError, match="missing lhr"):
        assert_report(None)


def test_assert_report_rejects_runtime_error() -> None:
    report = make_report(runtimeError={"code": "NO_FCP", "message": "No paint"})

    with pytest.raises(ValidationError, match="runtime error: NO_FCP No paint"):
        assert_report(report)


@pytest.mark.parametrize("missing", ["interactive", "firstContentfulPaint"])
def test_assert_report_requires_both_timing_metrics(missing: str) -> None:
    report = make_report()
    del report["audits"]["metrics"]["details"]["items"][0][missing]

    with pytest.raises(ValidationError, match="run failed to get metrics"):
        assert_report(report)


def test_parse_report_rejects_non_json() -> None:
    with pytest.raises(ValidationError, match="not valid JSON"):
        parse_report("Lighthouse crashed")


def test_parse_report_rejects_non_object() -> None:
    with pytest.raises(ValidationError, match="not a JSON object"):
        parse_report("[1, 2]")


def test_compact_report_has_no_whitespace(valid_report) -> None:
    compact = compact_report(valid_report)

    assert " " not in compact
    assert json.loads(compact) == valid_report
