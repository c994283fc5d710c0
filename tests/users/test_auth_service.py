# -*- coding: utf-8 -*-
"""共享口令校验与登录失败限流（Redis 以 mock 代替）。"""

from __future__ import annotations

from unittest import mock

import pytest

from services.auth_service import AuthService
from utils.exceptions import AuthError, RateLimitedError, ValidationError


@pytest.fixture()
def fake_redis(app):
    app.config.update(LOGIN_RATE_LIMIT_ENABLED=True, LOGIN_FAIL_LIMIT=3, LOGIN_BLOCK_SECONDS=60)
    client = mock.MagicMock()
    with mock.patch("repositories.login_attempt_repository.get_redis", return_value=client):
        yield client


def test_correct_password(app):
    assert AuthService.verify_password("test-password", "127.0.0.1") is True


def test_wrong_password(app):
    with pytest.raises(AuthError):
        AuthService.verify_password("nope", "127.0.0.1")


def test_empty_password(app):
    with pytest.raises(ValidationError):
        AuthService.verify_password("", "127.0.0.1")


def test_failure_is_counted_with_expiry(fake_redis):
    fake_redis.get.return_value = None
    fake_redis.incr.return_value = 1

    with pytest.raises(AuthError):
        AuthService.verify_password("nope", "10.0.0.1")

    fake_redis.incr.assert_called_once_with("login:fail:10.0.0.1")
    fake_redis.expire.assert_called_once_with("login:fail:10.0.0.1", 60)


def test_later_failures_keep_original_window(fake_redis):
    fake_redis.get.return_value = b"1"
    fake_redis.incr.return_value = 2

    with pytest.raises(AuthError):
        AuthService.verify_password("nope", "10.0.0.1")

    fake_redis.expire.assert_not_called()


def test_blocked_client_rejected_even_with_right_password(fake_redis):
    fake_redis.get.return_value = b"3"
    fake_redis.ttl.return_value = 42

    with pytest.raises(RateLimitedError) as exc:
        AuthService.verify_password("test-password", "10.0.0.1")

    assert exc.value.data == {"retryAfter": 42}
    fake_redis.incr.assert_not_called()


def test_success_clears_counter(fake_redis):
    fake_redis.get.return_value = b"2"

    assert AuthService.verify_password("test-password", "10.0.0.1") is True
    fake_redis.delete.assert_called_once_with("login:fail:10.0.0.1")


@pytest.mark.parametrize("password", [12345, b"test-password", ["test-password"]])
def test_non_string_password(fake_redis, password):
    with pytest.raises(ValidationError):
        AuthService.verify_password(password, "10.0.0.1")

    fake_redis.incr.assert_not_called()
