"""
Workshop blueprint: CRUD, source imports and facilitator-side reads/writes.

Endpoint groups:
  Workshops        GET/POST /api/v1/workshops
                   GET/PATCH/DELETE /api/v1/workshops/<id>
  Source import    POST /api/v1/workshops/<id>/import/research
                   POST /api/v1/workshops/<id>/import/cognition
  Use cases        GET  /api/v1/workshops/<id>/use-cases
  Survey           GET  /api/v1/workshops/<id>/survey
                   PUT  /api/v1/workshops/<id>/survey/responses
                   GET  /api/v1/workshops/<id>/survey/scores
  Challenge log    GET  /api/v1/workshops/<id>/challenges
                   PUT  /api/v1/workshops/<id>/challenge/<log_id>
  Matrix           GET  /api/v1/workshops/<id>/matrix
                   PUT  /api/v1/workshops/<id>/matrix/<use_case_id>
  Workflows        GET  /api/v1/workshops/<id>/workflows/<use_case_id>
  Data lineage     GET|POST /api/v1/workshops/<id>/data-lineage

Agent-driven stages live in pipeline_bp. Services flush; this module commits.
"""

import logging

from flask import Blueprint, jsonify, request

from catalyst.models import db
from catalyst.services import import_service
from catalyst.services import workshop_service as svc
from catalyst.utils.errors import E, api_error, register_error_handlers
from catalyst.utils.helpers import parse_score

logger = logging.getLogger(__name__)

workshop_bp = Blueprint("workshop", __name__, url_prefix="/api/v1")
register_error_handlers(workshop_bp)


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ═════════════════════════════════════════════════════════════════════════
# Workshops
# ═════════════════════════════════════════════════════════════════════════


@workshop_bp.route("/workshops", methods=["POST"])
def create_workshop():
    """Create a draft workshop. Body: {companyName, industry?, facilitatorName?, workshopDate?}"""
    data = _body()
    if not (data.get("companyName") or "").strip():
        return api_error(E.VALIDATION_REQUIRED, "companyName is required")
    workshop = svc.create_workshop(data)
    db.session.commit()
    return jsonify(workshop.to_dict()), 201


@workshop_bp.route("/workshops", methods=["GET"])
def list_workshops():
    return jsonify([w.to_summary() for w in svc.list_workshops()]), 200


@workshop_bp.route("/workshops/<workshop_id>", methods=["GET"])
def get_workshop(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    include_sources = request.args.get("include_sources") == "1"
    return jsonify(workshop.to_dict(include_sources=include_sources)), 200


@workshop_bp.route("/workshops/<workshop_id>", methods=["PATCH"])
def update_workshop(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    svc.update_workshop(workshop, _body())
    db.session.commit()
    return jsonify(workshop.to_dict()), 200


@workshop_bp.route("/workshops/<workshop_id>", methods=["DELETE"])
def delete_workshop(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    svc.delete_workshop(workshop)
    db.session.commit()
    logger.info("Workshop deleted", extra={"workshop_id": workshop_id})
    return jsonify({"success": True}), 200


# ═════════════════════════════════════════════════════════════════════════
# Source import
# ═════════════════════════════════════════════════════════════════════════


def _import(workshop_id, source, ref_key, fetch):
    workshop = svc.get_workshop_or_404(workshop_id)
    data = _body()
    ref_id = data.get(ref_key)
    if ref_id in (None, ""):
        return api_error(E.VALIDATION_REQUIRED, f"{ref_key} is required")

    payload = fetch(str(ref_id), api_url=data.get("apiUrl"))
    svc.set_import_data(workshop, source, ref_id, payload)
    db.session.commit()
    return jsonify({
        "success": True,
        "companyName": import_service.company_name_from(payload),
    }), 200


@workshop_bp.route("/workshops/<workshop_id>/import/research", methods=["POST"])
def import_research(workshop_id):
    """Fetch a ResearchApp report. Body: {reportId, apiUrl?}"""
    return _import(workshop_id, import_service.RESEARCH_APP, "reportId",
                   import_service.fetch_research_report)


@workshop_bp.route("/workshops/<workshop_id>/import/cognition", methods=["POST"])
def import_cognition(workshop_id):
    """Fetch a CognitionTwo analysis. Body: {analysisId, apiUrl?}"""
    return _import(workshop_id, import_service.COGNITION_TWO, "analysisId",
                   import_service.fetch_cognition_analysis)


@workshop_bp.route("/workshops/<workshop_id>/use-cases", methods=["GET"])
def list_use_cases(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    return jsonify(workshop.use_cases), 200


# ═════════════════════════════════════════════════════════════════════════
# Survey
# ═════════════════════════════════════════════════════════════════════════


@workshop_bp.route("/workshops/<workshop_id>/survey", methods=["GET"])
def list_survey_templates(workshop_id):
    svc.get_workshop_or_404(workshop_id)
    return jsonify([t.to_dict() for t in svc.list_survey_templates(workshop_id)]), 200


@workshop_bp.route("/workshops/<workshop_id>/survey/responses", methods=["PUT"])
def save_survey_response(workshop_id):
    """Append a response set.

    Body: {templateId?, responses: [{questionId, maturityLevel, notes?}], dimensionScores?}
    When dimensionScores is omitted the scores are computed from the answers.
    """
    workshop = svc.get_workshop_or_404(workshop_id)
    data = _body()
    row = svc.save_survey_response(
        workshop,
        template_id=data.get("templateId"),
        responses=data.get("responses"),
        dimension_scores=data.get("dimensionScores"),
    )
    db.session.commit()
    return jsonify(row.to_dict()), 200


@workshop_bp.route("/workshops/<workshop_id>/survey/scores", methods=["GET"])
def get_survey_scores(workshop_id):
    svc.get_workshop_or_404(workshop_id)
    return jsonify(svc.latest_dimension_scores(workshop_id)), 200


# ═════════════════════════════════════════════════════════════════════════
# Challenge log
# ═════════════════════════════════════════════════════════════════════════


@workshop_bp.route("/workshops/<workshop_id>/challenges", methods=["GET"])
def list_challenges(workshop_id):
    svc.get_workshop_or_404(workshop_id)
    return jsonify([c.to_dict() for c in svc.list_challenges(workshop_id)]), 200


@workshop_bp.route("/workshops/<workshop_id>/challenge/<int:log_id>", methods=["PUT"])
def update_challenge(workshop_id, log_id):
    """Record the facilitator's response. Body: {status, respondedBy?}"""
    svc.get_workshop_or_404(workshop_id)
    data = _body()
    if not data.get("status"):
        return api_error(E.VALIDATION_REQUIRED, "status is required")
    row = svc.update_challenge_status(workshop_id, log_id, data["status"], data.get("respondedBy"))
    db.session.commit()
    return jsonify(row.to_dict()), 200


# ═════════════════════════════════════════════════════════════════════════
# Prioritization matrix
# ═════════════════════════════════════════════════════════════════════════


@workshop_bp.route("/workshops/<workshop_id>/matrix", methods=["GET"])
def get_matrix(workshop_id):
    svc.get_workshop_or_404(workshop_id)
    return jsonify([p.to_dict() for p in svc.list_priorities(workshop_id)]), 200


@workshop_bp.route("/workshops/<workshop_id>/matrix/<use_case_id>", methods=["PUT"])
def override_matrix(workshop_id, use_case_id):
    """Move one use case. Body: {impactScore, feasibilityScore, overrideReason?}"""
    svc.get_workshop_or_404(workshop_id)
    data = _body()
    impact = parse_score(data.get("impactScore"), "impactScore")
    feasibility = parse_score(data.get("feasibilityScore"), "feasibilityScore")
    row = svc.override_priority(workshop_id, use_case_id, impact, feasibility, data.get("overrideReason"))
    db.session.commit()
    return jsonify(row.to_dict()), 200


# ═════════════════════════════════════════════════════════════════════════
# Workflows & data lineage
# ═════════════════════════════════════════════════════════════════════════


@workshop_bp.route("/workshops/<workshop_id>/workflows/<use_case_id>", methods=["GET"])
def get_workflow(workshop_id, use_case_id):
    """Stored workflow map for one use case, or null."""
    workshop = svc.get_workshop_or_404(workshop_id)
    match = next(
        (wf for wf in workshop.workflow_maps or [] if str(wf.get("useCaseId")) == use_case_id),
        None,
    )
    return jsonify(match), 200


@workshop_bp.route("/workshops/<workshop_id>/data-lineage", methods=["GET", "POST"])
def get_data_lineage(workshop_id):
    """Stored lineage list. POST is accepted for older clients and is read-only too."""
    workshop = svc.get_workshop_or_404(workshop_id)
    return jsonify(workshop.data_lineage or []), 200
