# controllers/auth_helpers.py
from __future__ import annotations

from functools import wraps

from flask import request, session

from services.user_service import CurrentTesterSelection
from utils.exceptions import ValidationError
from utils.response import json_response

AUTH_SESSION_KEY = "authenticated"


def is_authenticated() -> bool:
    return bool(session.get(AUTH_SESSION_KEY))


def client_address() -> str:
    """登录限流按客户端地址计数；部署在反向代理后时由 ProxyFix 改写 remote_addr"""
    return request.remote_addr or "-"


def json_body() -> dict:
    """请求体必须是 JSON 对象；缺省视为空对象"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("请求体必须为对象")
    return data


def current_selection() -> CurrentTesterSelection:
    """当前测试人员选择保存在会话中"""
    return CurrentTesterSelection(session)


def login_required():
    """
    鉴权装饰器：
      - 校验会话中的登录标记
      - 未登录返回 401
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not is_authenticated():
                return json_response(code=401, message="需要登录")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def require_confirm(data) -> bool:
    """破坏性操作需在请求体中显式携带 {"confirm": true}"""
    return isinstance(data, dict) and data.get("confirm") is True
