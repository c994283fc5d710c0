# services/auth_service.py
import hmac
import logging

from flask import current_app

from repositories.login_attempt_repository import LoginAttemptRepository
from utils.exceptions import AuthError, RateLimitedError, ValidationError

logger = logging.getLogger(__name__)


class LoginRateLimiter:
    def __init__(self, client: str, fail_limit: int, block_seconds: int):
        self.client = client
        self.fail_limit = fail_limit
        self.block_seconds = block_seconds

    def ensure_not_blocked(self):
        count = LoginAttemptRepository.failures(self.client)
        if count >= self.fail_limit:
            ttl = LoginAttemptRepository.seconds_until_reset(self.client)
            raise RateLimitedError(message=f"尝试过多，请 {ttl} 秒后重试", data={"retryAfter": ttl})

    def record_failure(self) -> int:
        return LoginAttemptRepository.record_failure(self.client, self.block_seconds)

    def clear(self):
        LoginAttemptRepository.reset(self.client)


class AuthService:
    """单一共享口令登录；没有用户级权限模型。"""

    @staticmethod
    def _limiter(client: str):
        cfg = current_app.config
        if not cfg.get("LOGIN_RATE_LIMIT_ENABLED") or cfg.get("LOGIN_FAIL_LIMIT", 0) <= 0:
            return None
        return LoginRateLimiter(client, cfg["LOGIN_FAIL_LIMIT"], cfg["LOGIN_BLOCK_SECONDS"])

    @staticmethod
    def verify_password(password: str, client: str = "-") -> bool:
        if password is not None and not isinstance(password, str):
            raise ValidationError("密码必须为字符串")
        if not password:
            raise ValidationError("密码不能为空")

        limiter = AuthService._limiter(client)
        if limiter:
            limiter.ensure_not_blocked()

        expected = current_app.config.get("APP_PASSWORD") or ""
        if hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
            if limiter:
                limiter.clear()
            logger.info("login succeeded from %s", client)
            return True

        if limiter:
            count = limiter.record_failure()
            logger.warning("login failed from %s (%d/%d)", client, count, limiter.fail_limit)
        else:
            logger.warning("login failed from %s", client)
        raise AuthError("密码错误")
