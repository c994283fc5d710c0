# controllers/user_controller.py
from flask import Blueprint

from controllers.auth_helpers import current_selection, json_body, login_required, require_confirm
from services.report_service import ReportService
from services.test_result_service import TestResultService
from services.user_service import UserService
from utils.response import json_response

user_bp = Blueprint("users", __name__, url_prefix="/api/users")
session_bp = Blueprint("tester_session", __name__, url_prefix="/api/session")


@user_bp.get("")
@login_required()
def list_users():
    users = UserService.list()
    return json_response(data=[u.to_dict() for u in users])


@user_bp.post("")
@login_required()
def create_user():
    data = json_body()
    user = UserService.create_user(data.get("name"))
    return json_response(message="创建成功", data=user.to_dict(), code=201)


@user_bp.get("/<int:user_id>")
@login_required()
def get_user(user_id: int):
    return json_response(data=UserService.get(user_id).to_dict())


@user_bp.put("/<int:user_id>")
@login_required()
def rename_user(user_id: int):
    data = json_body()
    user = UserService.rename_user(user_id, data.get("name"), current_selection())
    return json_response(message="更新成功", data=user.to_dict())


@user_bp.delete("/<int:user_id>")
@login_required()
def delete_user(user_id: int):
    """
    DELETE /api/users/<id>
    同时删除该用户的全部结果，并重新汇总受影响的用例
    """
    result = UserService.delete_user(user_id, current_selection())
    return json_response(message="删除成功", data=result)


@user_bp.get("/<int:user_id>/results")
@login_required()
def list_user_results(user_id: int):
    results = TestResultService.list_for_user(user_id)
    return json_response(data=[r.to_dict() for r in results])


@user_bp.get("/<int:user_id>/stats")
@login_required()
def user_stats(user_id: int):
    return json_response(data=ReportService.user_stats(user_id))


@user_bp.post("/reset")
@login_required()
def reset_all_user_data():
    data = json_body()
    if not require_confirm(data):
        return json_response(code=400, message="该操作会删除全部用户与结果，请携带 confirm=true 确认")
    result = UserService.reset_all_user_data(current_selection())
    return json_response(message="已重置全部用户数据", data=result)


# ----------------------------------------------------------------------
# 当前测试人员（仅保存在会话中）
# ----------------------------------------------------------------------
@session_bp.get("/current-user")
@login_required()
def get_current_user():
    user = UserService.current_user(current_selection())
    return json_response(data=user.to_dict() if user else None)


@session_bp.put("/current-user")
@login_required()
def switch_current_user():
    data = json_body()
    user = UserService.switch_current_user(current_selection(), data.get("name"))
    return json_response(message="已切换", data=user.to_dict() if user else None)


@session_bp.delete("/current-user")
@login_required()
def clear_current_user():
    UserService.switch_current_user(current_selection(), None)
    return json_response(message="已清除当前测试人员")
