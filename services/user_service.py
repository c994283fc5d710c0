# services/user_service.py
import logging
from typing import List, MutableMapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User
from repositories.test_case_repository import TestCaseRepository
from repositories.user_repository import UserRepository
from services.result_aggregator import ResultAggregator
from utils.exceptions import BizError, DuplicateNameError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CURRENT_TESTER_KEY = "current_tester"


class CurrentTesterSelection:
    """
    “当前测试人员”只属于某个会话/客户端，不写入数据库。
    由调用方传入存储容器（HTTP 层为 flask.session，测试中可用普通 dict）。
    """

    def __init__(self, store: MutableMapping):
        self._store = store

    @property
    def name(self) -> Optional[str]:
        return self._store.get(CURRENT_TESTER_KEY)

    def select(self, name: str):
        self._store[CURRENT_TESTER_KEY] = name

    def clear(self):
        self._store.pop(CURRENT_TESTER_KEY, None)


class UserService:

    @staticmethod
    def _normalize_name(name) -> str:
        if name is None or not isinstance(name, str) or not name.strip():
            raise ValidationError("用户名不能为空")
        name = name.strip()
        if len(name) > 100:
            raise ValidationError("用户名长度不能超过 100")
        return name

    @staticmethod
    def get(user_id: int) -> User:
        user = UserRepository.find_by_id(user_id)
        if not user:
            raise NotFoundError("用户不存在")
        return user

    @staticmethod
    def get_by_name(name: str) -> User:
        user = UserRepository.find_by_name(name)
        if not user:
            raise NotFoundError(f"用户 {name} 不存在")
        return user

    @staticmethod
    def list() -> List[User]:
        return UserRepository.list_all()

    @staticmethod
    def create_user(name: str) -> User:
        name = UserService._normalize_name(name)
        if UserRepository.find_by_name(name):
            raise DuplicateNameError(f"用户 {name} 已存在")

        user = User(name=name)
        try:
            UserRepository.add(user)
            UserRepository.commit()
        except IntegrityError:
            UserRepository.rollback()
            raise DuplicateNameError(f"用户 {name} 已存在")
        except SQLAlchemyError:
            UserRepository.rollback()
            raise BizError("数据库错误", code=500)
        logger.info("tester created: %s", name)
        return user

    @staticmethod
    def rename_user(user_id: int, name: str, selection: Optional[CurrentTesterSelection] = None) -> User:
        name = UserService._normalize_name(name)
        user = UserService.get(user_id)
        if name == user.name:
            return user
        if UserRepository.find_by_name(name):
            raise DuplicateNameError(f"用户 {name} 已存在")

        old_name = user.name
        try:
            UserRepository.rename(user, name)
            UserRepository.commit()
        except IntegrityError:
            UserRepository.rollback()
            raise DuplicateNameError(f"用户 {name} 已存在")
        if selection is not None and selection.name == old_name:
            selection.select(name)
        logger.info("tester renamed: %s -> %s", old_name, name)
        return user

    @staticmethod
    def delete_user(user_id: int, selection: Optional[CurrentTesterSelection] = None) -> dict:
        """
        删除用户：
        1. 删除该用户的全部结果
        2. 重新汇总受影响用例的状态
        3. 若该用户是当前测试人员则清除选择
        以上在同一事务中完成，任一步失败整体回滚。
        """
        user = UserService.get(user_id)
        name = user.name
        try:
            affected = UserRepository.affected_test_ids(user.id)
            removed = UserRepository.delete_cascade(user)
            statuses = ResultAggregator.recompute_many(affected)
            UserRepository.commit()
        except Exception:
            UserRepository.rollback()
            raise

        if selection is not None and selection.name == name:
            selection.clear()
        logger.info("tester deleted: %s (results removed: %d, tests recomputed: %d)",
                    name, removed, len(statuses))
        return {"removedResults": removed, "recomputedTests": statuses}

    @staticmethod
    def switch_current_user(selection: CurrentTesterSelection, name: Optional[str]) -> Optional[User]:
        """切换当前测试人员；name 为空表示清除选择。不修改任何已存数据。"""
        if not name:
            selection.clear()
            return None
        user = UserService.get_by_name(name)
        selection.select(user.name)
        return user

    @staticmethod
    def current_user(selection: CurrentTesterSelection) -> Optional[User]:
        """返回当前选择的测试人员；若该用户已不存在则清除选择。"""
        if not selection.name:
            return None
        user = UserRepository.find_by_name(selection.name)
        if user is None:
            selection.clear()
        return user

    @staticmethod
    def reset_all_user_data(selection: Optional[CurrentTesterSelection] = None) -> dict:
        """
        破坏性操作：删除全部用户与结果，所有用例回到 pending。
        是否二次确认由调用方负责。
        """
        try:
            removed_users = UserRepository.delete_all()
            reset_tests = TestCaseRepository.reset_all_statuses()
            UserRepository.commit()
        except SQLAlchemyError:
            UserRepository.rollback()
            raise
        if selection is not None:
            selection.clear()
        logger.warning("all tester data reset: users=%d tests=%d", removed_users, reset_tests)
        return {"removedUsers": removed_users, "resetTests": reset_tests}
