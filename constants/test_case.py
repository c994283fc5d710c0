# constants/test_case.py
"""
测试用例相关的枚举与常量集合
统一管理：
  - 优先级 Priority: High / Medium / Low（有序）
  - 分类 Category: 分组用标签，附带展示名称
  - 状态说明 Status Guidance 可识别的键
提供:
  - Enum 定义
  - values() 方法：返回所有 value 列表
  - 校验辅助函数
"""

from enum import Enum

from utils.exceptions import ValidationError


class TestPriority(Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


DEFAULT_PRIORITY = TestPriority.HIGH.value
DEFAULT_CATEGORY = "system-admin"

# 分类展示名称，未登记的分类按原值展示
CATEGORY_NAMES = {
    "system-admin": "System Administrator Tests",
    "org-admin": "Organization Administrator Tests",
    "org-member": "Organization Member Tests",
    "hr-admin": "HR Administrator Tests",
    "end-user": "End User Tests",
    "cross-role": "Cross-Role Tests",
    "integration": "Integration Tests",
    "performance": "Performance Tests",
    "security": "Security Tests",
    "advanced": "Advanced Tests",
    "adr-compliance": "ADR Compliance Tests",
}


class StatusGuidanceKey(Enum):
    PASS = "pass"
    FAIL = "fail"
    BLOCKED = "blocked"
    PARTIAL = "partial"
    SKIP = "skip"
    NEEDS_REVIEW = "needs-review"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


# 用例 ID 自动生成规则：TC-001
TEST_ID_PREFIX = "TC-"
TEST_ID_WIDTH = 3

COPY_SUFFIX = " (Copy)"


def category_label(category: str | None) -> str:
    if not category:
        return ""
    return CATEGORY_NAMES.get(category, category)


# -------- 校验辅助函数 --------
def validate_priority(priority: str):
    if priority not in TestPriority.values():
        raise ValidationError(f"优先级必须是 {TestPriority.values()} 之一")
