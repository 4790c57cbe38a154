"""Import client for the two upstream analysis tools.

    ResearchApp   GET {base}/api/reports/{reportId}
    CognitionTwo  GET {base}/api/analyses/{analysisId}

Payloads are stored verbatim; only the reconciliation agent reads them.
Any transport failure or non-2xx response raises ImportSourceError.
"""
import logging
import time

import requests
from flask import current_app, has_app_context

from catalyst.core.exceptions import ImportSourceError

logger = logging.getLogger(__name__)

RESEARCH_APP = "ResearchApp"
COGNITION_TWO = "CognitionTwo"

_DEFAULT_TIMEOUT = 30


def _config(key, default=None):
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def _fetch_json(source: str, url: str, timeout: int) -> dict:
    t0 = time.perf_counter()
    try:
        resp = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout)
    except requests.Timeout:
        logger.warning("%s import timed out after %ss url=%s", source, timeout, url)
        raise ImportSourceError(source, f"request timed out after {timeout}s")
    except requests.RequestException as exc:
        logger.warning("%s import network error url=%s error=%s", source, url, exc)
        raise ImportSourceError(source, str(exc)[:500])

    duration_ms = int((time.perf_counter() - t0) * 1000)
    if not resp.ok:
        logger.warning("%s import failed status=%d url=%s duration_ms=%d",
                       source, resp.status_code, url, duration_ms)
        raise ImportSourceError(source, resp.reason or f"HTTP {resp.status_code}",
                                status_code=resp.status_code)

    try:
        data = resp.json()
    except ValueError:
        raise ImportSourceError(source, "response body is not JSON", status_code=resp.status_code)
    if not isinstance(data, dict):
        raise ImportSourceError(source, "response body is not a JSON object", status_code=resp.status_code)

    logger.info("%s import ok url=%s duration_ms=%d", source, url, duration_ms)
    return data


def fetch_research_report(report_id: str, api_url: str | None = None) -> dict:
    """Fetch one ResearchApp report payload."""
    base = (api_url or _config("RESEARCH_APP_URL") or "").rstrip("/")
    if not base:
        raise ImportSourceError(RESEARCH_APP, "no base URL configured")
    timeout = _config("IMPORT_TIMEOUT_SECONDS", _DEFAULT_TIMEOUT)
    return _fetch_json(RESEARCH_APP, f"{base}/api/reports/{report_id}", timeout)


def fetch_cognition_analysis(analysis_id: str, api_url: str | None = None) -> dict:
    """Fetch one CognitionTwo analysis payload."""
    base = (api_url or _config("COGNITION_APP_URL") or "").rstrip("/")
    if not base:
        raise ImportSourceError(COGNITION_TWO, "no base URL configured")
    timeout = _config("IMPORT_TIMEOUT_SECONDS", _DEFAULT_TIMEOUT)
    return _fetch_json(COGNITION_TWO, f"{base}/api/analyses/{analysis_id}", timeout)


def company_name_from(payload: dict) -> str | None:
    """Company name as reported by either source."""
    if not isinstance(payload, dict):
        return None
    name = payload.get("companyName")
    if name:
        return name
    profile = payload.get("organizationProfile")
    if isinstance(profile, dict):
        return profile.get("companyName")
    return None
