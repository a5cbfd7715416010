"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — data source reachability
"""

import logging

from flask import Blueprint, current_app, jsonify

from coinnovation.core.exceptions import DataSourceError, DuplicateStepError
from coinnovation.integrations.data_source_gateway import DataSourceGateway
from coinnovation.models.process import ProcessModel
from coinnovation.services.record_parser import parse_envelope, parse_project, parse_step

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


def _check_source(gateway: DataSourceGateway, location: str, parse_record, validate=None) -> dict:
    result = gateway.fetch(location)
    if not result.ok:
        return {"status": "error", "detail": result.error, "latency_ms": result.duration_ms}
    try:
        records = parse_envelope(result.data, parse_record, source=location)
    except DataSourceError as exc:
        return {"status": "error", "detail": exc.reason, "latency_ms": result.duration_ms}
    if validate is not None:
        try:
            validate(records)
        except DuplicateStepError as exc:
            return {"status": "error", "detail": str(exc), "latency_ms": result.duration_ms}
    return {"status": "ok", "records": len(records), "latency_ms": result.duration_ms}


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check: both data sources must be readable.

    Without process steps the page can only show its error placeholder, so
    an empty, failing or invalid (duplicate step ids) process source
    reports "degraded". The project source may be empty.
    """
    cfg = current_app.config
    gateway = DataSourceGateway(timeout=cfg.get("DATA_FETCH_TIMEOUT", 10))

    checks = {
        "process_data": _check_source(
            gateway, cfg["PROCESS_DATA_URL"], parse_step, validate=ProcessModel,
        ),
        "projects_data": _check_source(gateway, cfg["PROJECTS_DATA_URL"], parse_project),
    }
    process = checks["process_data"]
    overall = process["status"] == "ok" and process["records"] > 0
    if not overall:
        logger.error("Health check — process data unavailable: %s", process)

    checks["app"] = {
        "name": "Co-Innovation Process Flow",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
