# -*- coding: utf-8 -*-
"""统计与导出。"""

from __future__ import annotations

import csv
import io
from datetime import date

import pytest

from services.report_service import (
    DEFINITION_COLUMNS,
    RESULT_COLUMNS,
    SUMMARY_COLUMNS,
    ReportService,
)
from utils.exceptions import NotFoundError


def _rows(content: str):
    return list(csv.DictReader(io.StringIO(content)))


def _header(content: str):
    return next(csv.reader(io.StringIO(content)))


@pytest.fixture()
def seeded(make_case, make_user, add_result):
    make_case("TC-001", category="security", priority="High")
    make_case("TC-002", category="security", priority="Low", title="Lockout")
    make_case("TC-010", category="performance", priority="Medium")
    alice = make_user("Alice")
    bob = make_user("Bob")
    add_result("TC-001", alice, "pass", test_date=date(2024, 5, 1))
    add_result(
        "TC-001",
        bob,
        "fail",
        test_date=date(2024, 5, 2),
        bug_severity="Critical",
        bug_description="Session not invalidated",
    )
    add_result("TC-002", alice, "skip")
    return {"alice": alice, "bob": bob}


def test_overall_stats(seeded):
    stats = ReportService.overall_stats()

    assert stats["totalTests"] == 3
    assert stats["completedTests"] == 2
    assert stats["byStatus"]["fail"] == 1
    assert stats["byStatus"]["skip"] == 1
    assert stats["byStatus"]["pending"] == 1
    assert stats["byStatus"]["needs-review"] == 0
    assert stats["totalResults"] == 3
    assert stats["totalUsers"] == 2
    assert stats["testsWithResults"] == 2


def test_user_stats(seeded):
    stats = ReportService.user_stats(seeded["alice"].id)

    assert stats["userName"] == "Alice"
    assert stats["totalResults"] == 2
    assert stats["testsCovered"] == 2
    assert stats["byStatus"]["pass"] == 1
    assert stats["byStatus"]["fail"] == 0


def test_user_stats_missing_user(app):
    with pytest.raises(NotFoundError):
        ReportService.user_stats(42)


def test_results_csv(seeded):
    content = ReportService.export_results_csv()

    assert _header(content) == RESULT_COLUMNS
    rows = _rows(content)
    assert len(rows) == 3
    failed = next(r for r in rows if r["Status"] == "fail")
    assert failed["User"] == "Bob"
    assert failed["Date"] == "2024-05-02"
    assert failed["Bug Severity"] == "Critical"


def test_results_csv_filters(seeded):
    rows = _rows(ReportService.export_results_csv(user_name="Alice", status="skip"))

    assert [r["Test ID"] for r in rows] == ["TC-002"]


def test_results_csv_empty_has_header_only(seeded):
    content = ReportService.export_results_csv(status="blocked")

    assert _header(content) == RESULT_COLUMNS
    assert _rows(content) == []


def test_summary_csv_skips_pending_tests(seeded):
    content = ReportService.export_summary_csv()

    assert _header(content) == SUMMARY_COLUMNS
    rows = {r["Test ID"]: r for r in _rows(content)}
    assert set(rows) == {"TC-001", "TC-002"}
    first = rows["TC-001"]
    assert first["Category"] == "Security Tests"
    assert first["Consolidated Status"] == "fail"
    assert first["User Results Count"] == "2"
    assert "Alice: pass (2024-05-01)" in first["User Results"]
    assert "Bob: fail (2024-05-02)" in first["User Results"]
    assert first["Latest Bug Report"] == "Session not invalidated"


def test_definitions_csv(seeded):
    content = ReportService.export_definitions_csv()

    assert _header(content) == DEFINITION_COLUMNS
    rows = _rows(content)
    assert [r["Test ID"] for r in rows] == ["TC-001", "TC-002", "TC-010"]
    assert rows[0]["Test Steps"] == "Open page | Click button"
    assert rows[0]["Status Guidance - Pass"] == "Works"
    assert rows[2]["Current Status"] == "pending"


def test_export_json(seeded):
    payload = ReportService.export_json()

    assert payload["version"] == "2.0"
    assert payload["totalTests"] == 3
    assert payload["completedTests"] == 2
    first = payload["testResults"][0]
    assert first["id"] == "TC-001"
    assert len(first["userResults"]) == 2


def test_dataset_includes_users_and_results(seeded):
    data = ReportService.dataset()

    assert {u["name"] for u in data["testUsers"]} == {"Alice", "Bob"}
    assert len(data["testCases"]) == 3
    assert data["currentUser"] is None


def test_catalog_markdown(seeded, make_case):
    make_case("TC-003", category="security", priority="Medium")

    report = ReportService.catalog_markdown(generated="2024-06-01")

    assert report.startswith("# Test Case Report")
    assert "**Generated:** 2024-06-01" in report
    assert "**Total Test Cases:** 4" in report
    assert "| Security Tests | 3 | High: 1, Medium: 1, Low: 1 |" in report
    assert "## Performance Tests" in report
    assert "1. Open page" in report
    assert "- **Pass:** Works" in report
    # 同一分类内按编号排序
    assert report.index("### TC-001") < report.index("### TC-002") < report.index("### TC-003")
