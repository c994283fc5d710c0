# controllers/report_controller.py
from datetime import date

from flask import Blueprint, current_app, request

from constants.test_result import validate_result_status
from controllers.auth_helpers import current_selection, login_required
from services.report_service import ReportService
from utils.response import file_response, json_response

report_bp = Blueprint("report", __name__, url_prefix="/api")


def _stamp() -> str:
    return date.today().isoformat()


@report_bp.get("/health")
def health():
    return json_response(
        data={
            "status": "ok",
            "app": current_app.config.get("APP_NAME"),
            "version": current_app.config.get("APP_VERSION"),
        }
    )


@report_bp.get("/stats")
@login_required()
def overall_stats():
    return json_response(data=ReportService.overall_stats())


@report_bp.get("/data")
@login_required()
def dataset():
    return json_response(data=ReportService.dataset(current_selection()))


@report_bp.get("/export/results.csv")
@login_required()
def export_results_csv():
    """
    GET /api/export/results.csv
    可选过滤：user（用户名）, status, test_id
    """
    status = request.args.get("status") or None
    if status:
        validate_result_status(status)
    content = ReportService.export_results_csv(
        user_name=request.args.get("user") or None,
        status=status,
        test_id=request.args.get("test_id") or None,
    )
    return file_response(content, f"test-results-{_stamp()}.csv")


@report_bp.get("/export/summary.csv")
@login_required()
def export_summary_csv():
    return file_response(ReportService.export_summary_csv(), f"test-summary-{_stamp()}.csv")


@report_bp.get("/export/definitions.csv")
@login_required()
def export_definitions_csv():
    return file_response(ReportService.export_definitions_csv(), f"test-definitions-{_stamp()}.csv")


@report_bp.get("/export/results.json")
@login_required()
def export_json():
    return json_response(data=ReportService.export_json())
