# -*- coding: utf-8 -*-
"""services/legacy_import_service.py
--------------------------------------------------------------------
把旧版 JSON 数据文件（testUsers / testCases，结果内嵌在 userResults 中，
以测试人员名字关联）一次性导入数据库。

- 已存在的用户、用例跳过并记录 warning
- 只为本次新建的用例导入结果，重复执行不会产生重复结果
- 结果中的测试人员不存在、状态非法时跳过该条
- 全部写入完成后重新汇总涉及到的用例，整体一次提交
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Set

from models.test_case import TestCase
from models.test_result import TestResult
from models.user import User
from repositories.test_case_repository import TestCaseRepository
from repositories.test_result_repository import TestResultRepository
from repositories.user_repository import UserRepository
from services.result_aggregator import ResultAggregator
from services.test_case_service import TestCaseService
from services.test_result_service import TestResultService
from utils.exceptions import BizError, ValidationError

logger = logging.getLogger(__name__)


class LegacyImportService:

    @staticmethod
    def load_file(path: str) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except json.JSONDecodeError as e:
            raise ValidationError(f"旧数据文件不是合法 JSON: {e}")

    @staticmethod
    def _import_users(payload: Mapping[str, Any], stats: Dict[str, int]):
        for item in payload.get("testUsers") or []:
            name = (item.get("name") if isinstance(item, Mapping) else item) or ""
            name = str(name).strip()
            if not name:
                stats["skippedUsers"] += 1
                continue
            if UserRepository.find_by_name(name):
                logger.warning("legacy import: user already exists: %s", name)
                stats["skippedUsers"] += 1
                continue
            UserRepository.add(User(name=name))
            stats["createdUsers"] += 1

    @staticmethod
    def _import_results(test_id: str, items, stats: Dict[str, int]):
        for item in items or []:
            tester = (item.get("tester") or "").strip() if isinstance(item, Mapping) else ""
            user = UserRepository.find_by_name(tester) if tester else None
            if user is None:
                logger.warning("legacy import: tester not found for %s: %r", test_id, tester)
                stats["skippedResults"] += 1
                continue
            try:
                fields = TestResultService._outcome_fields(item)
            except ValidationError as e:
                logger.warning("legacy import: result skipped for %s: %s", test_id, e.message)
                stats["skippedResults"] += 1
                continue
            TestResultRepository.add(TestResult(test_id=test_id, user_id=user.id, **fields))
            stats["createdResults"] += 1

    @staticmethod
    def import_legacy_data(payload: Mapping[str, Any]) -> Dict[str, int]:
        if not isinstance(payload, Mapping):
            raise ValidationError("旧数据格式错误，顶层必须为对象")

        stats = {
            "createdUsers": 0,
            "skippedUsers": 0,
            "createdTests": 0,
            "skippedTests": 0,
            "createdResults": 0,
            "skippedResults": 0,
        }
        touched: Set[str] = set()
        try:
            LegacyImportService._import_users(payload, stats)

            for item in payload.get("testCases") or []:
                test_id = str((item or {}).get("id") or "").strip()
                if not test_id:
                    stats["skippedTests"] += 1
                    continue
                if TestCaseRepository.exists(test_id):
                    logger.warning("legacy import: test already exists: %s", test_id)
                    stats["skippedTests"] += 1
                    continue
                try:
                    fields = TestCaseService.normalize_definition(item, require_story=False)
                except BizError as e:
                    logger.warning("legacy import: test %s skipped: %s", test_id, e.message)
                    stats["skippedTests"] += 1
                    continue
                TestCaseRepository.create(TestCase(id=test_id, **fields))
                stats["createdTests"] += 1
                touched.add(test_id)
                LegacyImportService._import_results(test_id, item.get("userResults"), stats)

            ResultAggregator.recompute_many(sorted(touched))
            TestCaseRepository.commit()
        except Exception:
            TestCaseRepository.rollback()
            raise

        logger.info("legacy import finished: %s", stats)
        return stats
