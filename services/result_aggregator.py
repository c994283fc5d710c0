# -*- coding: utf-8 -*-
"""services/result_aggregator.py
--------------------------------------------------------------------
把一条用例下多人的测试结果归并为一个汇总状态。

规则：
1. 没有结果 -> pending
2. 所有结果状态一致 -> 该状态
3. 出现冲突 -> 按 fail > blocked > partial > skip > pass 取最高者
4. 以上都不命中（仅在出现枚举外的值时可能发生）-> 取最先出现的状态

consolidate() 为纯函数；recompute() 在当前事务内读取结果、计算并写回
TestCase.consolidated_status，由调用方统一 commit。
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from constants.test_result import (
    CONSOLIDATION_PRIORITY,
    DEFAULT_CONSOLIDATED_STATUS,
    ResultStatus,
)
from models.test_case import TestCase
from repositories.test_case_repository import TestCaseRepository
from repositories.test_result_repository import TestResultRepository
from utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _status_of(item) -> str:
    if isinstance(item, ResultStatus):
        return item.value
    if isinstance(item, str):
        return item
    status = getattr(item, "status", None)
    if status is None and isinstance(item, dict):
        status = item.get("status")
    return status.value if isinstance(status, ResultStatus) else status


def consolidate(results: Iterable) -> str:
    """
    :param results: TestResult 对象、带 status 键的 dict 或状态字符串的序列
    :return: 汇总状态字符串
    """
    ordered: List[str] = []
    for item in results:
        status = _status_of(item)
        if status not in ordered:
            ordered.append(status)

    if not ordered:
        return DEFAULT_CONSOLIDATED_STATUS
    if len(ordered) == 1:
        return ordered[0]

    present = set(ordered)
    for candidate in CONSOLIDATION_PRIORITY:
        if candidate.value in present:
            return candidate.value

    return ordered[0]


class ResultAggregator:

    @staticmethod
    def recompute(test_id: str) -> str:
        """重新计算并写回汇总状态（不提交事务）。"""
        test_case = TestCaseRepository.lock_for_update(test_id)
        if test_case is None:
            raise NotFoundError(f"测试用例 {test_id} 不存在")

        new_status = consolidate(TestResultRepository.statuses_for_test(test_id))
        if test_case.consolidated_status != new_status:
            logger.info(
                "consolidated status changed: test=%s %s -> %s",
                test_id,
                test_case.consolidated_status,
                new_status,
            )
            test_case.consolidated_status = new_status
        return new_status

    @staticmethod
    def recompute_many(test_ids: Iterable[str]) -> dict:
        return {test_id: ResultAggregator.recompute(test_id) for test_id in dict.fromkeys(test_ids)}

    @staticmethod
    def reset(test_case: TestCase) -> str:
        """结果被整体清空时直接回到 pending。"""
        test_case.consolidated_status = DEFAULT_CONSOLIDATED_STATUS
        return test_case.consolidated_status
