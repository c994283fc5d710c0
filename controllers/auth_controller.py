# controllers/auth_controller.py
from flask import Blueprint, session

from controllers.auth_helpers import AUTH_SESSION_KEY, client_address, is_authenticated, json_body
from services.auth_service import AuthService
from utils.response import json_response

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/login")
def login():
    data = json_body()
    password = data.get("password") or ""
    AuthService.verify_password(password, client_address())

    # 登录后会话按 PERMANENT_SESSION_LIFETIME 滚动续期
    session.clear()
    session.permanent = True
    session[AUTH_SESSION_KEY] = True
    return json_response(message="登录成功", data={"authenticated": True})


@auth_bp.post("/logout")
def logout():
    session.clear()
    return json_response(message="已退出登录", data={"authenticated": False})


@auth_bp.get("/auth-status")
def auth_status():
    return json_response(data={"authenticated": is_authenticated()})
