# extensions/logger.py
"""
日志初始化：
- 控制台 + app.log + error.log（按大小滚动）
- 可选 JSON 格式，每条记录附带 request_id 与当前测试人员
- 请求进出各记一条，响应头回写 X-Request-ID
"""
import json
import logging
import os
import sys
import time
import uuid
from logging.handlers import RotatingFileHandler

from flask import g, has_request_context, request, session

from services.user_service import CURRENT_TESTER_KEY

REQUEST_ID_HEADER = "X-Request-ID"
_MARK = "_tracker_handler"


class JsonFormatter(logging.Formatter):
    def __init__(self, app_name: str = "-"):
        super().__init__()
        self.app_name = app_name

    def format(self, record):
        payload = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "app": self.app_name,
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "tester": getattr(record, "tester", "-"),
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class RequestContextFilter(logging.Filter):
    """把请求 ID 与会话中选择的测试人员写入日志记录"""

    def filter(self, record):
        record.request_id = "-"
        record.tester = "-"
        if has_request_context():
            record.request_id = g.get("request_id", "-")
            record.tester = session.get(CURRENT_TESTER_KEY) or "-"
        return True


def _build_handlers(cfg):
    level = getattr(logging, str(cfg["LOG_LEVEL"]).upper(), logging.INFO)
    if cfg["LOG_JSON"]:
        formatter = JsonFormatter(cfg.get("APP_NAME", "-"))
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)s | %(request_id)s | %(tester)s | %(name)s | %(message)s",
            "%Y-%m-%d %H:%M:%S",
        )

    os.makedirs(cfg["LOG_DIR"], exist_ok=True)
    handlers = [(logging.StreamHandler(sys.stdout), level)]
    for filename, lvl in (("app.log", level), ("error.log", logging.ERROR)):
        handlers.append((
            RotatingFileHandler(
                os.path.join(cfg["LOG_DIR"], filename),
                maxBytes=cfg["LOG_MAX_BYTES"],
                backupCount=cfg["LOG_BACKUP_COUNT"],
                encoding="utf-8",
            ),
            lvl,
        ))

    for handler, lvl in handlers:
        handler.setLevel(lvl)
        handler.setFormatter(formatter)
        handler.addFilter(RequestContextFilter())
        setattr(handler, _MARK, True)
    return level, [h for h, _ in handlers]


def _install_handlers(app):
    root = logging.getLogger()
    if any(getattr(h, _MARK, False) for h in root.handlers):
        return
    level, handlers = _build_handlers(app.config)
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.INFO)


def init_logger(app):
    # 测试环境交给 pytest 的日志捕获
    if not app.testing:
        _install_handlers(app)

    @app.before_request
    def _start_request():
        g.request_started = time.perf_counter()
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        app.logger.info("REQ %s %s from %s", request.method, request.path, request.remote_addr)

    @app.after_request
    def _finish_request(resp):
        elapsed = (time.perf_counter() - g.get("request_started", time.perf_counter())) * 1000
        resp.headers[REQUEST_ID_HEADER] = g.get("request_id", "-")
        app.logger.info("RESP %s %s %s %.1fms", request.method, request.path, resp.status_code, elapsed)
        return resp

    app.logger.info("Logger initialized (%s)", "json" if app.config.get("LOG_JSON") else "text")
