# repositories/user_repository.py
from __future__ import annotations
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from extensions.database import db
from models.test_result import TestResult
from models.user import User


class UserRepository:
    """
    测试人员的仓储（数据访问）层。
    说明：
    - 不做业务规则判断，仅做纯粹的持久化读写。
    - 所有写操作不自动 commit，由上层显式调用 commit()，以便在一个事务中组合多个操作。
    """

    @staticmethod
    def find_by_id(user_id: int) -> Optional[User]:
        return db.session.get(User, user_id)

    @staticmethod
    def find_by_name(name: str) -> Optional[User]:
        stmt = select(User).where(User.name == name)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def list_all() -> List[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def count() -> int:
        return db.session.scalar(select(func.count(User.id)))

    @staticmethod
    def add(user: User) -> User:
        db.session.add(user)
        db.session.flush()
        return user

    @staticmethod
    def rename(user: User, name: str) -> User:
        user.name = name
        db.session.flush()
        return user

    @staticmethod
    def affected_test_ids(user_id: int) -> List[str]:
        """删除用户前收集其结果涉及的用例。"""
        stmt = select(TestResult.test_id).where(TestResult.user_id == user_id).distinct()
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def delete_cascade(user: User) -> int:
        """删除用户及其全部结果，返回删除的结果条数。"""
        db.session.expire(user, ["results"])
        removed = db.session.execute(
            delete(TestResult).where(TestResult.user_id == user.id)
        ).rowcount
        db.session.delete(user)
        db.session.flush()
        db.session.expire_all()
        return removed

    @staticmethod
    def delete_all() -> int:
        db.session.execute(delete(TestResult))
        removed = db.session.execute(delete(User)).rowcount
        db.session.flush()
        db.session.expire_all()
        return removed

    @staticmethod
    def commit():
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def rollback():
        db.session.rollback()
