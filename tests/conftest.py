# -*- coding: utf-8 -*-
"""公共夹具：内存数据库上的 Flask 应用、测试客户端与基础数据工厂。"""

from __future__ import annotations

import uuid
from typing import Any, Dict

import pytest

from app import create_app
from extensions.database import db
from models import TestCase, TestResult, User
from services.result_aggregator import ResultAggregator

TEST_PASSWORD = "test-password"


@pytest.fixture()
def app():
    """每个测试独立的应用与空库。"""
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_client(client):
    resp = client.post("/api/login", json={"password": TEST_PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return client


def _suffix() -> str:
    return uuid.uuid4().hex[:6]


@pytest.fixture()
def make_user(app):
    def _make(name: str | None = None) -> User:
        user = User(name=name or f"tester-{_suffix()}")
        db.session.add(user)
        db.session.commit()
        return user

    return _make


def case_payload(test_id: str, **overrides) -> Dict[str, Any]:
    payload = {
        "id": test_id,
        "title": f"Case {test_id}",
        "story": "As a tester I want to verify the feature",
        "category": "system-admin",
        "priority": "High",
        "estimatedTime": "5 minutes",
        "prerequisites": "Logged in",
        "testSteps": ["Open page", "Click button"],
        "acceptanceCriteria": ["Page loads"],
        "statusGuidance": {"pass": "Works", "fail": "Broken"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def make_case(app):
    def _make(test_id: str, **overrides) -> TestCase:
        data = case_payload(test_id, **overrides)
        test_case = TestCase(
            id=data["id"],
            title=data["title"],
            story=data["story"],
            category=data["category"],
            priority=data["priority"],
            estimated_time=data["estimatedTime"],
            prerequisites=data["prerequisites"],
            test_steps=data["testSteps"],
            acceptance_criteria=data["acceptanceCriteria"],
            status_guidance=data["statusGuidance"],
        )
        db.session.add(test_case)
        db.session.commit()
        return test_case

    return _make


@pytest.fixture()
def add_result(app):
    """直接落库一条结果并重新汇总，绕过服务层校验。"""

    def _add(test_id: str, user: User, status: str, **fields) -> TestResult:
        result = TestResult(test_id=test_id, user_id=user.id, status=status, **fields)
        db.session.add(result)
        db.session.flush()
        ResultAggregator.recompute(test_id)
        db.session.commit()
        return result

    return _add
