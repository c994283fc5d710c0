# config/settings.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
load_dotenv(os.path.join(BASE_DIR, ".env"))  # 自动加载环境变量


def _as_bool(val, default=False):
    if val is None:
        return default
    return str(val).lower() in ("1", "true", "yes", "on")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")

    # 启动时自动建表（无 migrations 目录时使用）
    AUTO_CREATE_TABLES = _as_bool(os.getenv("AUTO_CREATE_TABLES", "1"), True)

    # ========= 共享口令登录 =========
    APP_PASSWORD = os.getenv("APP_PASSWORD", "change-me")
    # 会话有效期（秒），每次请求滚动续期
    SESSION_LIFETIME_SECONDS = int(os.getenv("SESSION_LIFETIME_SECONDS", 300))
    SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "test-tracker-session")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE = _as_bool(os.getenv("SESSION_COOKIE_SECURE"), False)
    SESSION_REFRESH_EACH_REQUEST = True

    # 登录失败限流
    LOGIN_RATE_LIMIT_ENABLED = _as_bool(os.getenv("LOGIN_RATE_LIMIT_ENABLED", "1"), True)
    LOGIN_FAIL_LIMIT = int(os.getenv("LOGIN_FAIL_LIMIT", 5))
    LOGIN_BLOCK_SECONDS = int(os.getenv("LOGIN_BLOCK_SECONDS", 900))
    # 反向代理层数；大于 0 时按 X-Forwarded-For 的最后 N 跳还原客户端地址
    PROXY_FIX_HOPS = int(os.getenv("PROXY_FIX_HOPS", 0))

    # 日志相关
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "./logs")
    LOG_JSON = os.getenv("LOG_JSON", "1") == "1"  # 是否 JSON 格式
    LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", 5 * 1024 * 1024))
    LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", 5))
    APP_NAME = os.getenv("APP_NAME", "test-tracker")
    APP_VERSION = "2.0"


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DEV_DATABASE_URI",
        "sqlite:///" + os.path.join(BASE_DIR, "data", "test-tracker.db"),
    )


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URI",
        "sqlite:///" + os.path.join(BASE_DIR, "data", "test-tracker.db"),
    )


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite:///:memory:")
    AUTO_CREATE_TABLES = False
    APP_PASSWORD = "test-password"
    LOGIN_RATE_LIMIT_ENABLED = False
    LOG_DIR = os.getenv("TEST_LOG_DIR", os.path.join(BASE_DIR, "logs", "test"))


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name):
    return config_map.get(config_name, DevelopmentConfig)
