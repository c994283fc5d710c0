# -*- coding: utf-8 -*-
"""services/report_service.py
--------------------------------------------------------------------
统计与导出：
- 总体统计 / 单个测试人员统计
- 结果明细 CSV、用例汇总 CSV、用例定义 CSV（pandas 生成）
- JSON 全量导出
- 按分类分组的 Markdown 用例报告
"""

from __future__ import annotations

import re
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd
from flask import current_app

from constants.test_case import CATEGORY_NAMES, TestPriority, category_label
from constants.test_result import DEFAULT_CONSOLIDATED_STATUS, NEEDS_REVIEW, ResultStatus
from models.test_case import TestCase
from repositories.test_case_repository import TestCaseRepository
from repositories.test_result_repository import TestResultRepository
from repositories.user_repository import UserRepository
from services.user_service import UserService
from utils.datetime_helpers import date_to_iso

RESULT_COLUMNS = [
    "Test ID",
    "Test Title",
    "User",
    "Status",
    "Date",
    "Environment",
    "Notes",
    "Bug Severity",
    "Bug Description",
    "Steps to Reproduce",
    "Expected Result",
    "Actual Result",
]

SUMMARY_COLUMNS = [
    "Test ID",
    "Test Title",
    "User Story",
    "Category",
    "Priority",
    "Estimated Time",
    "Consolidated Status",
    "User Results Count",
    "User Results",
    "Latest Bug Report",
    "Latest Bug Severity",
]

DEFINITION_COLUMNS = [
    "Test ID",
    "Title",
    "User Story",
    "Category",
    "Priority",
    "Estimated Time",
    "Prerequisites",
    "Test Steps",
    "Acceptance Criteria",
    "Status Guidance - Pass",
    "Status Guidance - Fail",
    "Status Guidance - Blocked",
    "Status Guidance - Partial",
    "Status Guidance - Skip",
    "Current Status",
]

_DIGITS_RE = re.compile(r"\D")


def _to_csv(rows: List[dict], columns: List[str]) -> str:
    frame = pd.DataFrame(rows, columns=columns).fillna("")
    return frame.to_csv(index=False)


def _status_buckets() -> "OrderedDict[str, int]":
    buckets = OrderedDict((s.value, 0) for s in ResultStatus)
    buckets[NEEDS_REVIEW] = 0
    return buckets


def _id_number(test_id: str) -> int:
    digits = _DIGITS_RE.sub("", test_id or "")
    return int(digits) if digits else 0


class ReportService:

    # ------------------------------------------------------------------
    # 统计
    # ------------------------------------------------------------------
    @staticmethod
    def overall_stats() -> dict:
        tests = TestCaseRepository.list()
        by_status = _status_buckets()
        for test in tests:
            by_status[test.consolidated_status] = by_status.get(test.consolidated_status, 0) + 1

        result_counts = TestResultRepository.count_by_status()
        return {
            "totalTests": len(tests),
            "completedTests": sum(
                1 for t in tests if t.consolidated_status != DEFAULT_CONSOLIDATED_STATUS
            ),
            "byStatus": dict(by_status),
            "totalResults": sum(result_counts.values()),
            "resultsByStatus": result_counts,
            "totalUsers": UserRepository.count(),
            "testsWithResults": TestResultRepository.count_tests_with_results(),
        }

    @staticmethod
    def user_stats(user_id: int) -> dict:
        user = UserService.get(user_id)
        counts = TestResultRepository.count_by_status(user_id=user.id)
        by_status = OrderedDict((s.value, counts.get(s.value, 0)) for s in ResultStatus)
        return {
            "userId": user.id,
            "userName": user.name,
            "totalResults": sum(counts.values()),
            "testsCovered": len(UserRepository.affected_test_ids(user.id)),
            "byStatus": dict(by_status),
        }

    # ------------------------------------------------------------------
    # 数据集
    # ------------------------------------------------------------------
    @staticmethod
    def dataset(selection=None) -> dict:
        """用例（内嵌结果）+ 用户，供前端一次性加载"""
        tests = TestCaseRepository.list(with_results=True)
        current = UserService.current_user(selection) if selection is not None else None
        return {
            "testCases": [t.to_dict(include_results=True) for t in tests],
            "testUsers": [u.to_dict() for u in UserRepository.list_all()],
            "currentUser": current.name if current else None,
        }

    # ------------------------------------------------------------------
    # 导出
    # ------------------------------------------------------------------
    @staticmethod
    def result_rows(
            user_name: Optional[str] = None,
            status: Optional[str] = None,
            test_id: Optional[str] = None,
    ) -> List[dict]:
        rows = []
        for result in TestResultRepository.list(test_id=test_id, status=status, user_name=user_name):
            bug = result.bug_report or {}
            rows.append(
                {
                    "Test ID": result.test_id,
                    "Test Title": result.test_case.title if result.test_case else "",
                    "User": result.user.name if result.user else "Unknown User",
                    "Status": result.status,
                    "Date": date_to_iso(result.test_date) or "",
                    "Environment": result.environment or "",
                    "Notes": result.notes or "",
                    "Bug Severity": bug.get("severity") or "",
                    "Bug Description": bug.get("description") or "",
                    "Steps to Reproduce": bug.get("stepsToReproduce") or "",
                    "Expected Result": bug.get("expectedResult") or "",
                    "Actual Result": bug.get("actualResult") or "",
                }
            )
        return rows

    @staticmethod
    def export_results_csv(**filters) -> str:
        return _to_csv(ReportService.result_rows(**filters), RESULT_COLUMNS)

    @staticmethod
    def summary_rows() -> List[dict]:
        rows = []
        for test in TestCaseRepository.list(with_results=True):
            if test.consolidated_status == DEFAULT_CONSOLIDATED_STATUS:
                continue
            results = list(test.results)
            latest_bug = next((r.bug_report for r in results if r.bug_report), None) or {}
            rows.append(
                {
                    "Test ID": test.id,
                    "Test Title": test.title,
                    "User Story": test.story or "",
                    "Category": category_label(test.category),
                    "Priority": test.priority,
                    "Estimated Time": test.estimated_time or "",
                    "Consolidated Status": test.consolidated_status,
                    "User Results Count": len(results),
                    "User Results": "; ".join(
                        f"{r.user.name if r.user else 'Unknown User'}: {r.status} ({date_to_iso(r.test_date) or ''})"
                        for r in results
                    ),
                    "Latest Bug Report": latest_bug.get("description") or "",
                    "Latest Bug Severity": latest_bug.get("severity") or "",
                }
            )
        return rows

    @staticmethod
    def export_summary_csv() -> str:
        return _to_csv(ReportService.summary_rows(), SUMMARY_COLUMNS)

    @staticmethod
    def export_definitions_csv() -> str:
        rows = []
        for test in TestCaseRepository.list():
            guidance = test.status_guidance or {}
            rows.append(
                {
                    "Test ID": test.id,
                    "Title": test.title,
                    "User Story": test.story or "",
                    "Category": test.category or "",
                    "Priority": test.priority,
                    "Estimated Time": test.estimated_time or "",
                    "Prerequisites": test.prerequisites or "",
                    "Test Steps": " | ".join(test.test_steps or []),
                    "Acceptance Criteria": " | ".join(test.acceptance_criteria or []),
                    "Status Guidance - Pass": guidance.get("pass", ""),
                    "Status Guidance - Fail": guidance.get("fail", ""),
                    "Status Guidance - Blocked": guidance.get("blocked", ""),
                    "Status Guidance - Partial": guidance.get("partial", ""),
                    "Status Guidance - Skip": guidance.get("skip", ""),
                    "Current Status": test.consolidated_status,
                }
            )
        return _to_csv(rows, DEFINITION_COLUMNS)

    @staticmethod
    def export_json() -> dict:
        tests = TestCaseRepository.list(with_results=True)
        return {
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "version": current_app.config.get("APP_VERSION", "2.0"),
            "totalTests": len(tests),
            "completedTests": sum(
                1 for t in tests if t.consolidated_status != DEFAULT_CONSOLIDATED_STATUS
            ),
            "testResults": [t.to_dict(include_results=True) for t in tests],
        }

    # ------------------------------------------------------------------
    # Markdown 用例报告
    # ------------------------------------------------------------------
    @staticmethod
    def group_by_category(tests: List[TestCase]) -> Dict[str, List[TestCase]]:
        grouped: Dict[str, List[TestCase]] = OrderedDict()
        for test in tests:
            grouped.setdefault(test.category or "uncategorized", []).append(test)
        for items in grouped.values():
            items.sort(key=lambda t: _id_number(t.id))
        return grouped

    @staticmethod
    def _test_markdown(test: TestCase) -> str:
        lines = [
            f"### {test.id}: {test.title}",
            "",
            f"**Story:** {test.story or 'N/A'}",
            "",
            f"**Priority:** {test.priority or 'N/A'}",
            "",
            f"**Estimated Time:** {test.estimated_time or 'N/A'}",
            "",
            f"**Prerequisites:** {test.prerequisites or 'N/A'}",
            "",
        ]
        if test.test_steps:
            lines.append("**Test Steps:**")
            lines.extend(f"{i}. {step}" for i, step in enumerate(test.test_steps, start=1))
            lines.append("")
        if test.acceptance_criteria:
            lines.append("**Acceptance Criteria:**")
            lines.extend(f"- {item}" for item in test.acceptance_criteria)
            lines.append("")
        if test.status_guidance:
            lines.append("**Status Guidance:**")
            lines.extend(
                f"- **{key[:1].upper() + key[1:]}:** {text}"
                for key, text in test.status_guidance.items()
            )
            lines.append("")
        return "\n".join(lines) + "\n"

    @staticmethod
    def catalog_markdown(generated: Optional[str] = None) -> str:
        tests = TestCaseRepository.list()
        grouped = ReportService.group_by_category(tests)
        generated = generated or datetime.now(timezone.utc).date().isoformat()

        parts = [
            "# Test Case Report\n",
            f"**Generated:** {generated}",
            f"**Total Test Cases:** {len(tests)}\n",
            "## Executive Summary\n",
            "| Category | Test Count | Priority Distribution |",
            "|----------|------------|----------------------|",
        ]
        for category, items in grouped.items():
            counts = {p.value: 0 for p in TestPriority}
            for t in items:
                counts[t.priority] = counts.get(t.priority, 0) + 1
            distribution = ", ".join(f"{p.value}: {counts[p.value]}" for p in TestPriority)
            parts.append(f"| {CATEGORY_NAMES.get(category, category)} | {len(items)} | {distribution} |")
        parts.append("")

        for category, items in grouped.items():
            parts.append(f"## {CATEGORY_NAMES.get(category, category)}\n")
            parts.append(f"**Test Count:** {len(items)}\n")
            for test in items:
                parts.append(ReportService._test_markdown(test))
                parts.append("---\n")
        return "\n".join(parts)
