"""
Agent pipeline blueprint: one endpoint per pipeline stage.

    POST /api/v1/workshops/<id>/reconcile
    POST /api/v1/workshops/<id>/survey/generate
    POST /api/v1/workshops/<id>/challenge-and-validate
    POST /api/v1/workshops/<id>/challenge
    POST /api/v1/workshops/<id>/validate
    POST /api/v1/workshops/<id>/prioritize
    POST /api/v1/workshops/<id>/workflows
    POST /api/v1/workshops/<id>/synthesize

Every stage after reconciliation needs a non-empty use-case list; the
check runs before any model call. A stage either persists all of its
results and commits, or rolls back and answers 500.
"""

import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

from catalyst.ai import get_pipeline
from catalyst.ai.context import (
    CHALLENGE_AGENT,
    LINEAGE_AGENT,
    PRIORITIZATION_AGENT,
    RECONCILIATION_AGENT,
    SURVEY_AGENT,
    SYNTHESIS_AGENT,
    VALIDATION_AGENT,
    WORKFLOW_AGENT,
)
from catalyst.core.exceptions import PreconditionError
from catalyst.models import db
from catalyst.services import workshop_service as svc
from catalyst.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

pipeline_bp = Blueprint("pipeline", __name__, url_prefix="/api/v1")
register_error_handlers(pipeline_bp)

NO_SOURCES = "No imported source data. Import from ResearchApp or CognitionTwo first."
NO_USE_CASES = "No reconciled use cases. Run reconciliation first."


@pipeline_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    db.session.rollback()
    logger.exception("Pipeline stage failed endpoint=%s", request.endpoint,
                     extra={"workshop_id": (request.view_args or {}).get("workshop_id")})
    return api_error(E.INTERNAL, str(error) or error.__class__.__name__)


def _workshop_with_use_cases(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    if not workshop.use_cases:
        raise PreconditionError(NO_USE_CASES)
    return workshop


def _stage_log(workshop, stage):
    logger.info("Stage %s requested", stage, extra={"workshop_id": workshop.id, "stage": stage})


# ═════════════════════════════════════════════════════════════════════════
# Stage 1: reconciliation
# ═════════════════════════════════════════════════════════════════════════


@pipeline_bp.route("/workshops/<workshop_id>/reconcile", methods=["POST"])
def reconcile(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    if workshop.research_app_data is None and workshop.cognition_two_data is None:
        raise PreconditionError(NO_SOURCES)
    _stage_log(workshop, "reconciliation")

    context = svc.build_context(workshop, include_sources=True)
    output = get_pipeline().run_reconciliation(context)[RECONCILIATION_AGENT]

    svc.persist_reconciliation(workshop, output)
    db.session.commit()
    data = output.structured_data
    return jsonify({
        "success": True,
        "useCaseCount": len(data.get("reconciledUseCases") or []),
        "matchedCount": data.get("matchedCount", 0),
        "conflicts": data.get("conflicts") or [],
        "insights": output.insights,
        "durationMs": output.duration_ms,
    }), 200


# ═════════════════════════════════════════════════════════════════════════
# Stage 2: survey generation
# ═════════════════════════════════════════════════════════════════════════


@pipeline_bp.route("/workshops/<workshop_id>/survey/generate", methods=["POST"])
def generate_survey(workshop_id):
    workshop = _workshop_with_use_cases(workshop_id)
    _stage_log(workshop, "survey_generation")

    context = svc.build_context(workshop)
    output = get_pipeline().run_survey_generation(context)[SURVEY_AGENT]

    templates = svc.persist_survey(workshop, output)
    db.session.commit()
    return jsonify({
        "success": True,
        "totalQuestions": output.structured_data.get("totalQuestions", 0),
        "dimensions": [
            {"dimension": t.dimension, "questionCount": len(t.questions or [])}
            for t in templates
        ],
        "insights": output.insights,
        "durationMs": output.duration_ms,
    }), 200


# ═════════════════════════════════════════════════════════════════════════
# Stage 3: challenge ∥ validation
# ═════════════════════════════════════════════════════════════════════════


def _challenge_body(output):
    data = output.structured_data
    return {
        "totalChallenges": data.get("totalChallenges", 0),
        "highSeverityCount": data.get("highSeverityCount", 0),
        "insights": output.insights,
        "durationMs": output.duration_ms,
    }


def _validation_body(output):
    data = output.structured_data
    return {
        "totalOriginalValue": data.get("totalOriginalValue", 0),
        "totalValidatedValue": data.get("totalValidatedValue", 0),
        "averageConfidence": data.get("averageConfidence", 0),
        "insights": output.insights,
        "durationMs": output.duration_ms,
    }


@pipeline_bp.route("/workshops/<workshop_id>/challenge-and-validate", methods=["POST"])
def challenge_and_validate(workshop_id):
    workshop = _workshop_with_use_cases(workshop_id)
    _stage_log(workshop, "challenge_and_validation")

    context = svc.build_context(workshop)
    step = get_pipeline().run_challenge_and_validation(context)
    challenge, validation = step[CHALLENGE_AGENT], step[VALIDATION_AGENT]

    svc.persist_challenge(workshop, challenge)
    svc.persist_validation(workshop, validation)
    db.session.commit()
    return jsonify({
        "success": True,
        "challenge": _challenge_body(challenge),
        "validation": _validation_body(validation),
    }), 200


@pipeline_bp.route("/workshops/<workshop_id>/challenge", methods=["POST"])
def challenge(workshop_id):
    workshop = _workshop_with_use_cases(workshop_id)
    _stage_log(workshop, "challenge")

    context = svc.build_context(workshop)
    output = get_pipeline().run_challenge(context)[CHALLENGE_AGENT]

    svc.persist_challenge(workshop, output)
    db.session.commit()
    return jsonify({"success": True, **_challenge_body(output)}), 200


@pipeline_bp.route("/workshops/<workshop_id>/validate", methods=["POST"])
def validate(workshop_id):
    workshop = _workshop_with_use_cases(workshop_id)
    _stage_log(workshop, "validation")

    # Stored challenge findings feed the validation prompt when present
    context = svc.build_context(workshop, include_previous=True)
    output = get_pipeline().run_validation(context)[VALIDATION_AGENT]

    svc.persist_validation(workshop, output)
    db.session.commit()
    return jsonify({"success": True, **_validation_body(output)}), 200


# ═════════════════════════════════════════════════════════════════════════
# Stage 4: prioritization
# ═════════════════════════════════════════════════════════════════════════


@pipeline_bp.route("/workshops/<workshop_id>/prioritize", methods=["POST"])
def prioritize(workshop_id):
    workshop = _workshop_with_use_cases(workshop_id)
    _stage_log(workshop, "prioritization")

    context = svc.build_context(workshop, include_previous=True)
    output = get_pipeline().run_prioritization(context)[PRIORITIZATION_AGENT]

    svc.persist_prioritization(workshop, output)
    db.session.commit()
    data = output.structured_data
    return jsonify({
        "success": True,
        "quickWinCount": data.get("quickWinCount", 0),
        "strategicCount": data.get("strategicCount", 0),
        "totalPrioritized": len(data.get("priorities") or []),
        "insights": output.insights,
        "durationMs": output.duration_ms,
    }), 200


# ═════════════════════════════════════════════════════════════════════════
# Stage 5: workflows ∥ lineage
# ═════════════════════════════════════════════════════════════════════════


@pipeline_bp.route("/workshops/<workshop_id>/workflows", methods=["POST"])
def workflows(workshop_id):
    workshop = _workshop_with_use_cases(workshop_id)
    _stage_log(workshop, "workflows_and_lineage")

    # Stored priorities decide which use cases get a workflow map
    context = svc.build_context(workshop, include_previous=True)
    step = get_pipeline().run_workflows_and_lineage(context)
    workflow, lineage = step[WORKFLOW_AGENT], step[LINEAGE_AGENT]

    svc.persist_workflows_and_lineage(workshop, workflow, lineage)
    db.session.commit()
    return jsonify({
        "success": True,
        "workflowCount": len(workflow.structured_data.get("workflows") or []),
        "lineageCount": len(lineage.structured_data.get("lineages") or []),
        "workflowInsights": workflow.insights,
        "lineageInsights": lineage.insights,
        "durationMs": max(workflow.duration_ms, lineage.duration_ms),
    }), 200


# ═════════════════════════════════════════════════════════════════════════
# Stage 6: synthesis
# ═════════════════════════════════════════════════════════════════════════


@pipeline_bp.route("/workshops/<workshop_id>/synthesize", methods=["POST"])
def synthesize(workshop_id):
    workshop = _workshop_with_use_cases(workshop_id)
    _stage_log(workshop, "synthesis")

    context = svc.build_context(workshop, include_previous=True)
    output = get_pipeline().run_synthesis(context)[SYNTHESIS_AGENT]

    svc.persist_synthesis(workshop, output)
    db.session.commit()
    return jsonify({
        "success": True,
        "synthesis": output.structured_data,
        "insights": output.insights,
        "durationMs": output.duration_ms,
    }), 200
