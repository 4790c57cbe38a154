"""
Health check blueprint.

Endpoints:
    GET /api/v1/health        — app name and version
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — database round trip and LLM provider config
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from catalyst.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")

APP_NAME = "ai-catalyst"
APP_VERSION = "1.0.0"


@health_bp.route("", methods=["GET"])
def health():
    return jsonify({"status": "ok", "app": APP_NAME, "version": APP_VERSION}), 200


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True

    # ── Database ─────────────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except SQLAlchemyError as exc:
        db.session.rollback()
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    # ── LLM gateway ──────────────────────────────────────────────────
    model = current_app.config.get("LLM_DEFAULT_CHAT_MODEL", "")
    checks["llm"] = {"status": "configured", "default_model": model}

    checks["app"] = {
        "name": APP_NAME,
        "version": APP_VERSION,
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({"status": "healthy" if overall else "degraded", "checks": checks}), status_code
