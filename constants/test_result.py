# -*- coding: utf-8 -*-
"""constants/test_result.py
--------------------------------------------------------------------
测试结果状态枚举及汇总优先级。

目前的业务约束：
- 结果状态为封闭枚举 pending / pass / fail / blocked / partial / skip。
- 多人结果冲突时按 fail > blocked > partial > skip > pass 取最高者。
- needs-review 只作为状态说明键和统计分组出现，不能作为结果写入。
"""

from enum import Enum

from utils.exceptions import ValidationError


class ResultStatus(Enum):
    """单条测试结果的状态枚举。"""

    PENDING = "pending"
    PASS = "pass"
    FAIL = "fail"
    BLOCKED = "blocked"
    PARTIAL = "partial"
    SKIP = "skip"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


DEFAULT_CONSOLIDATED_STATUS = ResultStatus.PENDING.value

# 冲突时的取值顺序，越靠前优先级越高
CONSOLIDATION_PRIORITY = (
    ResultStatus.FAIL,
    ResultStatus.BLOCKED,
    ResultStatus.PARTIAL,
    ResultStatus.SKIP,
    ResultStatus.PASS,
)

# 统计时额外展示的分组
NEEDS_REVIEW = "needs-review"


def validate_result_status(status) -> ResultStatus:
    if isinstance(status, ResultStatus):
        return status
    try:
        return ResultStatus(status)
    except ValueError:
        raise ValidationError(f"结果状态必须是 {ResultStatus.values()} 之一")
