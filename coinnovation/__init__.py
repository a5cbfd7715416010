"""
Co-Innovation Process Flow
Flask Application Factory.

Usage:
    from coinnovation import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, redirect, request, url_for
from flask_cors import CORS

from coinnovation.config import config
from coinnovation.middleware.logging_config import configure_logging
from coinnovation.middleware.timing import init_request_timing
from coinnovation.utils.errors import E

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Blueprints ───────────────────────────────────────────────────────
    from coinnovation.blueprints import ALL_BLUEPRINTS

    for blueprint in ALL_BLUEPRINTS:
        app.register_blueprint(blueprint)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("check-flow-data")
    def check_flow_data_cmd():
        """Load both data sources and report steps, counts and untracked projects."""
        from coinnovation.core.exceptions import FlowLoadError
        from coinnovation.services.flow_service import load_from_config

        try:
            context = load_from_config(app.config)
        except FlowLoadError as exc:
            logger.error("Flow data check failed: %s", exc)
            raise SystemExit(1)

        counts = context.index.counts()
        for number, step in enumerate(context.model.steps, start=1):
            logger.info("%d. %-32s %-8s projects=%d", number, step.title, step.type, counts[step.id])
        untracked = context.index.untracked()
        if untracked:
            logger.warning("Projects at unknown stages: %s",
                           ", ".join(f"{p.id}->{p.current_stage!r}" for p in untracked))
        logger.info("Flow data OK: %d steps, %d projects", len(context.model), len(context.projects))

    @app.route("/")
    def index():
        from coinnovation.blueprints.flow_bp import PAGE_QUERY_PARAMS

        params = {k: request.args[k] for k in PAGE_QUERY_PARAMS if k in request.args}
        return redirect(url_for("flow.page", **params))

    # ── Health check (short form; detailed version at /health/live) ──────
    @app.route("/api/v1/health")
    def health():
        return {"status": "ok", "app": "Co-Innovation Process Flow"}

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith("/api/"):
            return {"error": "Not found", "code": E.NOT_FOUND, "path": request.path}, 404
        return "<h1>404 — Not Found</h1>", 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed", "code": E.METHOD_NOT_ALLOWED}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        if request.path.startswith("/api/"):
            return {"error": "Internal server error", "code": E.INTERNAL}, 500
        return "<h1>500 — Internal Server Error</h1><p>An unexpected error occurred.</p>", 500

    return app
