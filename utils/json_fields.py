# -*- coding: utf-8 -*-
"""utils/json_fields.py
--------------------------------------------------------------------
用例中 testSteps / acceptanceCriteria / statusGuidance 以 JSON 文本落库。

读取时解析为结构化数据，缺失或无法解析时回退为 [] / {}；
写入时按固定结构规整，核心逻辑中不出现未解析的文本。
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.types import Text, TypeDecorator

from constants.test_case import StatusGuidanceKey
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _loads(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, (list, dict)):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("JSON 字段解析失败，使用默认值: %.80s", raw)
        return None


def decode_string_list(raw: Any) -> List[str]:
    value = _loads(raw)
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def decode_guidance(raw: Any) -> Dict[str, str]:
    value = _loads(raw)
    if not isinstance(value, dict):
        return {}
    allowed = StatusGuidanceKey.values()
    return {
        key: "" if value[key] is None else str(value[key])
        for key in allowed
        if key in value
    }


def normalize_string_list(value: Any, field_name: str) -> List[str]:
    """校验接口入参：必须为字符串数组（None 视为空数组）。"""
    if value is None:
        return []
    if isinstance(value, str):
        # 兼容多行文本输入
        return [line.strip() for line in value.splitlines() if line.strip()]
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name} 必须为字符串数组")
    items = []
    for item in value:
        if item is None:
            continue
        if not isinstance(item, (str, int, float)):
            raise ValidationError(f"{field_name} 必须为字符串数组")
        items.append(str(item))
    return items


def normalize_guidance(value: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError("statusGuidance 必须为对象")
    unknown = set(value) - set(StatusGuidanceKey.values())
    if unknown:
        raise ValidationError(
            f"statusGuidance 仅支持 {StatusGuidanceKey.values()}，非法键: {sorted(unknown)}"
        )
    return {key: "" if val is None else str(val) for key, val in value.items()}


class JsonStringList(TypeDecorator):
    """以 JSON 文本存储的字符串数组。"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return json.dumps(decode_string_list(value), ensure_ascii=False)

    def process_result_value(self, value, dialect):
        return decode_string_list(value)


class JsonGuidanceMap(TypeDecorator):
    """以 JSON 文本存储的状态说明映射。"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return json.dumps(decode_guidance(value), ensure_ascii=False)

    def process_result_value(self, value, dialect):
        return decode_guidance(value)
