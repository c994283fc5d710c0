# repositories/login_attempt_repository.py
from extensions.redis_client import get_redis

_KEY_PREFIX = "login:fail:"


class LoginAttemptRepository:
    """共享口令登录失败计数，按客户端地址存放在 Redis 中。"""

    @staticmethod
    def _key(client: str) -> str:
        return f"{_KEY_PREFIX}{client or 'unknown'}"

    @staticmethod
    def failures(client: str) -> int:
        v = get_redis().get(LoginAttemptRepository._key(client))
        return int(v) if v else 0

    @staticmethod
    def record_failure(client: str, window_seconds: int) -> int:
        r = get_redis()
        key = LoginAttemptRepository._key(client)
        count = r.incr(key)
        # 首次失败时开始计时，窗口内累计
        if count == 1:
            r.expire(key, window_seconds)
        return count

    @staticmethod
    def seconds_until_reset(client: str) -> int:
        ttl = get_redis().ttl(LoginAttemptRepository._key(client))
        return max(int(ttl or 0), 0)

    @staticmethod
    def reset(client: str):
        get_redis().delete(LoginAttemptRepository._key(client))
