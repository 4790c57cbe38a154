"""Standardised API error responses.

Usage
-----
    from catalyst.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Workshop not found")
    return api_error(E.VALIDATION_REQUIRED, "companyName is required")
    return api_error(E.PRECONDITION, "No reconciled use cases. Run reconciliation first.")
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants.

    Convention:
     • ERR_  prefix for standard application errors
     • ERR_AGENT_ prefix for failures inside an agent run
    """

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Missing pipeline prerequisite – HTTP 400
    PRECONDITION = "ERR_PRECONDITION_FAILED"

    # Upstream source system unavailable – HTTP 400
    IMPORT_SOURCE = "ERR_IMPORT_SOURCE"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Agent failures – HTTP 500
    AGENT_RESPONSE = "ERR_AGENT_RESPONSE"
    AGENT_SCHEMA = "ERR_AGENT_SCHEMA"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.PRECONDITION: 400,
    E.IMPORT_SOURCE: 400,
    E.NOT_FOUND: 404,
    E.AGENT_RESPONSE: 500,
    E.AGENT_SCHEMA: 500,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | list | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict | list, optional
        Extra structured payload (field errors, schema failures, etc.).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


# ── Blueprint error handlers ──────────────────────────────────────────
def register_error_handlers(bp) -> None:
    """Map the workshop exception hierarchy onto ``api_error`` responses for *bp*."""
    from catalyst.core.exceptions import (
        AgentResponseError,
        AgentSchemaError,
        ImportSourceError,
        NotFoundError,
        PreconditionError,
        ValidationError,
    )

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, f"{error.resource} not found")

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @bp.errorhandler(PreconditionError)
    def _handle_precondition(error: PreconditionError):
        return api_error(E.PRECONDITION, str(error))

    @bp.errorhandler(ImportSourceError)
    def _handle_import_source(error: ImportSourceError):
        return api_error(E.IMPORT_SOURCE, str(error))

    @bp.errorhandler(AgentSchemaError)
    def _handle_agent_schema(error: AgentSchemaError):
        return api_error(E.AGENT_SCHEMA, str(error), details=error.errors)

    @bp.errorhandler(AgentResponseError)
    def _handle_agent_response(error: AgentResponseError):
        return api_error(E.AGENT_RESPONSE, str(error))
