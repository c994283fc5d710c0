# -*- coding: utf-8 -*-
"""Datetime helpers.

数据库中的 ``datetime`` 一律视为 UTC（无时区信息），接口层统一输出
带 ``+00:00`` 偏移的 ISO 字符串；测试日期只保留日历日期。
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from utils.exceptions import ValidationError


def _ensure_utc(dt: datetime) -> datetime:
    """将给定 ``datetime`` 统一转换为带 UTC 时区的对象。"""

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def datetime_to_iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return _ensure_utc(dt).isoformat()


def date_to_iso(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def parse_date(value, field_name: str = "date") -> Optional[date]:
    """解析 ``YYYY-MM-DD``；也接受完整的 ISO 时间串并截取日期部分。"""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return datetime.strptime(value[:10], "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError(f"{field_name} 格式必须为 YYYY-MM-DD")
    raise ValidationError(f"{field_name} 格式不正确")

