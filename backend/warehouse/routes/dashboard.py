# Overview: Flask API route for dashboard metrics; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import reporting_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.get("/dashboard")
def dashboard_route():
    """Query: as_of (ISO date/datetime, default now)."""
    try:
        metrics = reporting_service.get_dashboard_metrics(as_of=request.args.get("as_of"))
        return jsonify(metrics), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Failed to build dashboard metrics")
        return jsonify({"error": "Internal server error"}), 500
