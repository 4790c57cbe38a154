"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in catalyst/__init__.py with no default
limits; this module applies limits per route category.

Usage:
    from catalyst.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_WRITE_LIMIT = "120/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Pipeline stages:  PIPELINE_RATE_LIMIT (every call spends model tokens)
        - Workshop routes:  120/minute
        - Export, health:   exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    pipeline_limit = app.config.get("PIPELINE_RATE_LIMIT") or "20/minute"
    bp = app.blueprints.get("pipeline")
    if bp:
        limiter.limit(pipeline_limit)(bp)

    bp = app.blueprints.get("workshop")
    if bp:
        limiter.limit(DEFAULT_WRITE_LIMIT)(bp)

    for bp_name in ("export", "health"):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.exempt(bp)

    app.logger.info("Rate limiter configured: pipeline=%s, workshop=%s",
                    pipeline_limit, DEFAULT_WRITE_LIMIT)
