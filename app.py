# app.py
import json
import os

import click
from flask import Flask
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config.settings import get_config
from extensions.database import db, migrate
from extensions.logger import init_logger
from controllers.auth_controller import auth_bp
from controllers.user_controller import user_bp, session_bp
from controllers.test_case_controller import test_case_bp
from controllers.test_result_controller import test_result_bp
from controllers.report_controller import report_bp
from services.legacy_import_service import LegacyImportService
from services.report_service import ReportService
from utils.response import json_response
from utils.exceptions import BizError


def create_app(config_name=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name or os.getenv("FLASK_ENV", "development")))
    app.permanent_session_lifetime = app.config["SESSION_LIFETIME_SECONDS"]
    if app.config.get("PROXY_FIX_HOPS", 0) > 0:
        # 只信任已配置层数的代理追加的地址
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=app.config["PROXY_FIX_HOPS"])

    # 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    init_logger(app)
    app.logger.info("当前数据库 URI: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    if app.config.get("AUTO_CREATE_TABLES"):
        # 未执行 flask db upgrade 时直接建表，便于本地启动
        uri = app.config["SQLALCHEMY_DATABASE_URI"]
        if uri.startswith("sqlite:///") and ":memory:" not in uri:
            os.makedirs(os.path.dirname(uri[len("sqlite:///"):]) or ".", exist_ok=True)
        with app.app_context():
            db.create_all()

    # 登录 / 登出
    app.register_blueprint(auth_bp)
    # 测试人员与当前测试人员
    app.register_blueprint(user_bp)
    app.register_blueprint(session_bp)
    # 用例库
    app.register_blueprint(test_case_bp)
    # 测试结果
    app.register_blueprint(test_result_bp)
    # 统计与导出
    app.register_blueprint(report_bp)

    # 错误处理
    @app.errorhandler(404)
    def not_found(e):
        return json_response(message="接口不存在", code=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return json_response(message="请求方法不被允许", code=405)

    @app.errorhandler(500)
    def server_error(e):
        return json_response(message="服务器内部错误", code=500)

    @app.errorhandler(BizError)
    def _biz_err(e: BizError):
        return json_response(code=e.code, message=e.message, data=e.data)

    @app.errorhandler(Exception)
    def _unhandled(e):
        if isinstance(e, HTTPException):
            return json_response(code=e.code or 500, message=e.description or e.name)
        db.session.rollback()
        app.logger.exception("Unhandled exception")
        return json_response(message="服务器内部错误", code=500)

    _register_commands(app)
    return app


def _register_commands(app):

    @app.cli.command("import-legacy")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    def import_legacy(path):
        """导入旧版 JSON 数据文件（testUsers / testCases）"""
        payload = LegacyImportService.load_file(path)
        stats = LegacyImportService.import_legacy_data(payload)
        click.echo(json.dumps(stats, ensure_ascii=False, indent=2))

    @app.cli.command("catalog-report")
    @click.option("-o", "--output", type=click.Path(dir_okay=False), default=None,
                  help="输出文件，缺省打印到标准输出")
    def catalog_report(output):
        """按分类生成 Markdown 用例报告"""
        content = ReportService.catalog_markdown()
        if output:
            with open(output, "w", encoding="utf-8") as fh:
                fh.write(content)
            click.echo(f"报告已写入 {output}")
        else:
            click.echo(content)


if __name__ == "__main__":
    app = create_app()
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8888")), debug=True)
