# Overview: Flask API routes for dashboard statistics and administrator reports.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..responses import ok, service_error, internal_error
from ..services import reporting_service


stats_bp = Blueprint("stats", __name__, url_prefix="/api")
reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@stats_bp.get("/stats")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_stats_route():
    """Dashboard figures scoped to what the principal is accountable for."""
    timeframe = request.args.get("timeframe", "daily")
    try:
        stats = reporting_service.dashboard_stats(g.current_user, timeframe)
        return ok(**stats)
    except reporting_service.ReportError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("compute dashboard statistics")


@reports_bp.get("/stats")
@require_auth
@require_permission("VIEW_REPORTS")
def summary_report_route():
    try:
        return ok(**reporting_service.summary_report())
    except Exception:
        return internal_error("build summary report")


@reports_bp.get("/by-division")
@require_auth
@require_permission("VIEW_REPORTS")
def division_report_route():
    try:
        return ok(rows=reporting_service.division_report())
    except Exception:
        return internal_error("build division report")


@reports_bp.get("/over-time")
@require_auth
@require_permission("VIEW_REPORTS")
def over_time_report_route():
    range_ = request.args.get("range", "daily")
    try:
        return ok(rows=reporting_service.over_time_report(range_))
    except reporting_service.ReportError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("build movements-over-time report")


@reports_bp.get("/top-users")
@require_auth
@require_permission("VIEW_REPORTS")
def top_users_report_route():
    try:
        return ok(rows=reporting_service.top_users_report())
    except Exception:
        return internal_error("build top users report")
