"""Workshop service layer: persistence for workshops and their side tables.

Transaction policy: functions use flush() for ID generation, never commit().
Caller (route handler) is responsible for db.session.commit().

Operations:
- Workshop CRUD and import payload storage
- Survey templates (replaced per dimension), append-only survey responses
- Use case priorities (replaced per use case), human overrides
- Challenge log (pipeline rows still pending are replaced, resolved rows kept)
- WorkshopContext construction for the agent pipeline
- Stage persistence for every pipeline step
"""
import logging

from catalyst.ai.context import (
    CHALLENGE_AGENT,
    LINEAGE_AGENT,
    PRIORITIZATION_AGENT,
    VALIDATION_AGENT,
    WORKFLOW_AGENT,
    AgentOutput,
    WorkshopContext,
)
from catalyst.core.exceptions import NotFoundError, ValidationError
from catalyst.models import db
from catalyst.models.workshop import (
    CHALLENGE_STATUSES,
    CHALLENGE_TYPES,
    SEVERITY_LEVELS,
    SURVEY_DIMENSIONS,
    WORKSHOP_STATUSES,
    ChallengeLogEntry,
    SurveyResponse,
    SurveyTemplate,
    UseCasePriority,
    Workshop,
)
from catalyst.services.import_service import COGNITION_TWO, RESEARCH_APP
from catalyst.services.survey_scoring import (
    compute_dimension_scores,
    has_scores,
    normalize_dimension_scores,
)
from catalyst.utils.helpers import parse_date

logger = logging.getLogger(__name__)


def _millions(value) -> str:
    return f"${(value or 0) / 1_000_000:.1f}M"


# ── Workshop ─────────────────────────────────────────────────────────────


def list_workshops():
    return Workshop.query.order_by(Workshop.created_at, Workshop.id).all()


def get_workshop(workshop_id):
    return db.session.get(Workshop, workshop_id)


def get_workshop_or_404(workshop_id):
    workshop = get_workshop(workshop_id)
    if workshop is None:
        raise NotFoundError(resource="Workshop", resource_id=workshop_id)
    return workshop


def create_workshop(data):
    """Create a draft workshop.

    Returns:
        Workshop instance (already flushed).
    """
    company_name = (data.get("companyName") or "").strip()
    if not company_name:
        raise ValidationError("companyName is required", details={"companyName": "required"})

    workshop = Workshop(
        company_name=company_name,
        industry=data.get("industry") or "",
        facilitator_name=data.get("facilitatorName") or "",
        workshop_date=parse_date(data.get("workshopDate")),
        status="draft",
    )
    db.session.add(workshop)
    db.session.flush()
    logger.info("Workshop created id=%s company=%s", workshop.id, company_name,
                extra={"workshop_id": workshop.id})
    return workshop


def update_workshop(workshop, data):
    """Patch the editable header fields of a workshop."""
    if "companyName" in data:
        company_name = (data.get("companyName") or "").strip()
        if not company_name:
            raise ValidationError("companyName cannot be empty", details={"companyName": "required"})
        workshop.company_name = company_name
    if "industry" in data:
        workshop.industry = data.get("industry") or ""
    if "facilitatorName" in data:
        workshop.facilitator_name = data.get("facilitatorName") or ""
    if "workshopDate" in data:
        workshop.workshop_date = parse_date(data.get("workshopDate"))
    if "status" in data:
        status = data.get("status")
        if status not in WORKSHOP_STATUSES:
            raise ValidationError(
                f"status must be one of {', '.join(WORKSHOP_STATUSES)}",
                details={"status": "invalid"},
            )
        workshop.status = status
    db.session.flush()
    return workshop


def delete_workshop(workshop):
    db.session.delete(workshop)
    db.session.flush()


def set_import_data(workshop, source, ref_id, payload):
    """Store a raw upstream payload and its reference id on the workshop."""
    if source == RESEARCH_APP:
        workshop.research_app_report_id = str(ref_id)
        workshop.research_app_data = payload
    elif source == COGNITION_TWO:
        workshop.cognition_two_analysis_id = str(ref_id)
        workshop.cognition_two_data = payload
    else:
        raise ValueError(f"Unknown import source: {source}")
    db.session.flush()
    logger.info("Imported %s payload ref=%s", source, ref_id, extra={"workshop_id": workshop.id})
    return workshop


# ── Survey ───────────────────────────────────────────────────────────────


def list_survey_templates(workshop_id):
    return SurveyTemplate.query.filter_by(workshop_id=workshop_id).order_by(SurveyTemplate.id).all()


def replace_survey_templates(workshop_id, dimensions, generated_by="ai"):
    """Upsert one template per dimension; dimensions absent from the new set are dropped."""
    merged = {}
    for entry in dimensions:
        dim = entry.get("dimension")
        if dim not in SURVEY_DIMENSIONS:
            continue
        merged.setdefault(dim, []).extend(entry.get("questions") or [])

    existing = {t.dimension: t for t in list_survey_templates(workshop_id)}
    for dim, template in existing.items():
        if dim not in merged:
            db.session.delete(template)

    rows = []
    for dim in SURVEY_DIMENSIONS:
        if dim not in merged:
            continue
        template = existing.get(dim)
        if template is None:
            template = SurveyTemplate(workshop_id=workshop_id, dimension=dim)
            db.session.add(template)
        template.questions = list(merged[dim])
        template.generated_by = generated_by
        rows.append(template)
    db.session.flush()
    return rows


def list_survey_responses(workshop_id):
    return SurveyResponse.query.filter_by(workshop_id=workshop_id).order_by(SurveyResponse.id).all()


def latest_survey_response(workshop_id):
    return (
        SurveyResponse.query.filter_by(workshop_id=workshop_id)
        .order_by(SurveyResponse.id.desc())
        .first()
    )


def latest_dimension_scores(workshop_id):
    """Scores of the most recently submitted response, or None.

    A response with no answered dimension counts as no survey.
    """
    latest = latest_survey_response(workshop_id)
    if latest is None or not has_scores(latest.dimension_scores):
        return None
    return latest.dimension_scores


def save_survey_response(workshop, template_id=None, responses=None, dimension_scores=None):
    """Append a survey response; scores are computed from the answers when not supplied."""
    responses = responses or []
    if not isinstance(responses, list):
        raise ValidationError("responses must be a list", details={"responses": "not a list"})

    if dimension_scores is None:
        scores = compute_dimension_scores(list_survey_templates(workshop.id), responses)
    else:
        scores = normalize_dimension_scores(dimension_scores)

    row = SurveyResponse(
        workshop_id=workshop.id,
        template_id=str(template_id) if template_id is not None else None,
        responses=responses,
        dimension_scores=scores,
    )
    db.session.add(row)
    workshop.status = "in_progress"
    db.session.flush()
    logger.info("Survey response saved overall=%s", scores.get("overall"),
                extra={"workshop_id": workshop.id})
    return row


# ── Priorities ───────────────────────────────────────────────────────────


def list_priorities(workshop_id):
    return UseCasePriority.query.filter_by(workshop_id=workshop_id).order_by(UseCasePriority.id).all()


def replace_priorities(workshop_id, priorities):
    """Upsert one priority row per use case; rows for vanished use cases are dropped."""
    incoming = {}
    for item in priorities:
        incoming[str(item["useCaseId"])] = item

    existing = {p.use_case_id: p for p in list_priorities(workshop_id)}
    for use_case_id, row in existing.items():
        if use_case_id not in incoming:
            db.session.delete(row)

    rows = []
    for use_case_id, item in incoming.items():
        row = existing.get(use_case_id)
        if row is None:
            row = UseCasePriority(workshop_id=workshop_id, use_case_id=use_case_id)
            db.session.add(row)
        row.use_case_title = item.get("useCaseTitle") or ""
        row.apply_scores(float(item["impactScore"]), float(item["feasibilityScore"]))
        row.survey_alignment = {
            "impact": item.get("impactBreakdown"),
            "feasibility": item.get("feasibilityBreakdown"),
        }
        row.override_reason = None
        rows.append(row)
    db.session.flush()
    return rows


def override_priority(workshop_id, use_case_id, impact, feasibility, reason=None):
    """Facilitator override of one placement; the quadrant is recomputed."""
    row = UseCasePriority.query.filter_by(workshop_id=workshop_id, use_case_id=use_case_id).first()
    if row is None:
        raise NotFoundError(resource="UseCasePriority", resource_id=use_case_id)
    row.apply_scores(impact, feasibility)
    row.override_reason = reason
    db.session.flush()
    logger.info("Priority override use_case=%s quadrant=%s", use_case_id, row.quadrant,
                extra={"workshop_id": workshop_id})
    return row


# ── Challenge log ────────────────────────────────────────────────────────


def list_challenges(workshop_id):
    return ChallengeLogEntry.query.filter_by(workshop_id=workshop_id).order_by(ChallengeLogEntry.id).all()


def replace_pending_challenges(workshop_id, challenges):
    """Swap pipeline rows that nobody has acted on for a fresh set."""
    for row in ChallengeLogEntry.query.filter_by(workshop_id=workshop_id, status="pending").all():
        db.session.delete(row)

    rows = []
    for item in challenges:
        challenge_type = item.get("challengeType")
        severity = item.get("severity")
        row = ChallengeLogEntry(
            workshop_id=workshop_id,
            use_case_id=str(item.get("useCaseId")),
            challenge_type=challenge_type if challenge_type in CHALLENGE_TYPES else "assumption",
            field_name=item.get("fieldName") or "",
            original_value=item.get("originalValue"),
            challenged_value=item.get("challengedValue"),
            evidence=item.get("evidence") or "",
            severity=severity if severity in SEVERITY_LEVELS else "medium",
            status="pending",
        )
        db.session.add(row)
        rows.append(row)
    db.session.flush()
    return rows


def update_challenge_status(workshop_id, log_id, status, responded_by=None):
    if status not in CHALLENGE_STATUSES:
        raise ValidationError(
            f"status must be one of {', '.join(CHALLENGE_STATUSES)}",
            details={"status": "invalid"},
        )
    row = ChallengeLogEntry.query.filter_by(workshop_id=workshop_id, id=log_id).first()
    if row is None:
        raise NotFoundError(resource="ChallengeLogEntry", resource_id=log_id)
    row.status = status
    row.responded_by = responded_by
    db.session.flush()
    return row


# ── Context bridge ───────────────────────────────────────────────────────


def _stored_outputs(workshop):
    """Rebuild AgentOutputs from the stage results stored on the workshop."""
    outputs = {}

    challenge = workshop.challenge_results
    if challenge:
        total = challenge.get("totalChallenges") or len(challenge.get("challenges") or [])
        high = challenge.get("highSeverityCount") or 0
        outputs[CHALLENGE_AGENT] = AgentOutput(
            agent_name=CHALLENGE_AGENT,
            insights=[f"{total} challenges found, {high} high severity"],
            structured_data=challenge,
            confidence=0.8,
        )

    validation = workshop.validation_results
    if validation:
        average = validation.get("averageConfidence") or 0
        outputs[VALIDATION_AGENT] = AgentOutput(
            agent_name=VALIDATION_AGENT,
            insights=[
                f"Validated value: {_millions(validation.get('totalValidatedValue'))} "
                f"of {_millions(validation.get('totalOriginalValue'))} originally projected",
                f"Average confidence: {average:g}%",
            ],
            structured_data=validation,
            confidence=average / 100,
        )

    matrix = workshop.prioritization_matrix
    rows = list_priorities(workshop.id)
    if rows or matrix:
        # Priority rows carry facilitator overrides, so they win over the stored matrix
        if rows:
            priorities = [
                {
                    "useCaseId": p.use_case_id,
                    "useCaseTitle": p.use_case_title,
                    "impactScore": p.impact_score,
                    "feasibilityScore": p.feasibility_score,
                    "quadrant": p.quadrant,
                }
                for p in rows
            ]
        else:
            priorities = list(matrix.get("priorities") or [])
        quick_wins = sum(1 for p in priorities if p.get("quadrant") == "quick_win")
        strategic = sum(1 for p in priorities if p.get("quadrant") == "strategic")
        outputs[PRIORITIZATION_AGENT] = AgentOutput(
            agent_name=PRIORITIZATION_AGENT,
            insights=[f"{quick_wins} quick wins, {strategic} strategic bets"],
            structured_data={
                "priorities": priorities,
                "quickWinCount": quick_wins,
                "strategicCount": strategic,
            },
            confidence=0.85,
        )

    if workshop.workflow_maps:
        outputs[WORKFLOW_AGENT] = AgentOutput(
            agent_name=WORKFLOW_AGENT,
            insights=[f"{len(workshop.workflow_maps)} workflow maps"],
            structured_data={"workflows": workshop.workflow_maps},
            confidence=0.85,
        )

    if workshop.data_lineage:
        sources = {
            source
            for lineage in workshop.data_lineage
            for source in (lineage.get("dataSources") or [])
        }
        outputs[LINEAGE_AGENT] = AgentOutput(
            agent_name=LINEAGE_AGENT,
            insights=[
                f"Lineage mapped for {len(workshop.data_lineage)} use cases",
                f"{len(sources)} distinct data sources",
            ],
            structured_data={"lineages": workshop.data_lineage},
            confidence=0.8,
        )

    return outputs


def build_context(workshop, include_sources=False, include_previous=False):
    """WorkshopContext for the next pipeline step.

    Args:
        include_sources: attach the raw ResearchApp / CognitionTwo payloads.
        include_previous: rehydrate stored stage results as previous outputs.
    """
    return WorkshopContext(
        workshop_id=workshop.id,
        company_name=workshop.company_name,
        industry=workshop.industry or "",
        research_app_data=workshop.research_app_data if include_sources else None,
        cognition_two_data=workshop.cognition_two_data if include_sources else None,
        reconciled_use_cases=workshop.use_cases,
        survey_dimension_scores=latest_dimension_scores(workshop.id),
        previous_agent_outputs=_stored_outputs(workshop) if include_previous else {},
    )


# ── Stage persistence ────────────────────────────────────────────────────


def persist_reconciliation(workshop, output):
    workshop.reconciled_use_cases = list(output.structured_data.get("reconciledUseCases") or [])
    workshop.status = "in_progress"
    db.session.flush()
    return workshop


def persist_survey(workshop, output):
    return replace_survey_templates(workshop.id, output.structured_data.get("dimensions") or [])


def persist_challenge(workshop, output):
    data = output.structured_data
    rows = replace_pending_challenges(workshop.id, data.get("challenges") or [])
    workshop.challenge_results = data
    db.session.flush()
    return rows


def persist_validation(workshop, output):
    workshop.validation_results = output.structured_data
    db.session.flush()
    return workshop


def persist_prioritization(workshop, output):
    data = output.structured_data
    rows = replace_priorities(workshop.id, data.get("priorities") or [])
    workshop.prioritization_matrix = data
    db.session.flush()
    return rows


def persist_workflows_and_lineage(workshop, workflow_output, lineage_output):
    workshop.workflow_maps = list(workflow_output.structured_data.get("workflows") or [])
    workshop.data_lineage = list(lineage_output.structured_data.get("lineages") or [])
    db.session.flush()
    return workshop


def persist_synthesis(workshop, output):
    workshop.workshop_synthesis = output.structured_data
    workshop.status = "completed"
    db.session.flush()
    return workshop

