"""
AI Catalyst Workshop
Workshop domain models.

Models:
    - Workshop: one row per engagement, accumulates every stage result as JSON
    - SurveyTemplate: generated question list per readiness dimension
    - SurveyResponse: append-only answer sets; the latest row is the active score snapshot
    - UseCasePriority: impact / feasibility placement per use case, human-overridable
    - ChallengeLogEntry: one challenged assumption, resolvable by a facilitator

API serialisation uses camelCase keys, matching the use-case payloads the
agents produce.
"""

import uuid
from datetime import datetime, timezone

from catalyst.models import db


# ── Constants ────────────────────────────────────────────────────────────────

WORKSHOP_STATUSES = ("draft", "in_progress", "completed")

SURVEY_DIMENSIONS = ("skills", "data", "infrastructure", "governance")
SURVEY_GENERATORS = ("ai", "manual")
MATURITY_LEVELS = {
    1: "Ad hoc",
    2: "Initial",
    3: "Defined",
    4: "Managed",
    5: "Optimized",
}

CHALLENGE_TYPES = ("assumption", "kpi", "friction", "benefit")
CHALLENGE_STATUSES = ("pending", "accepted", "rejected")
SEVERITY_LEVELS = ("low", "medium", "high")

QUADRANT_THRESHOLD = 6
QUADRANTS = ("quick_win", "strategic", "fill_in", "deprioritize")
QUADRANT_LABELS = {
    "quick_win": "Quick Win",
    "strategic": "Strategic Bet",
    "fill_in": "Fill-In",
    "deprioritize": "Deprioritize",
}


def quadrant_for(impact: float, feasibility: float) -> str:
    """Place a use case in the 2x2 matrix. Both thresholds are inclusive at 6."""
    high_impact = impact >= QUADRANT_THRESHOLD
    high_feasibility = feasibility >= QUADRANT_THRESHOLD
    if high_impact and high_feasibility:
        return "quick_win"
    if high_impact:
        return "strategic"
    if high_feasibility:
        return "fill_in"
    return "deprioritize"


def _utcnow():
    return datetime.now(timezone.utc)


def _uuid():
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


# ── Workshop ─────────────────────────────────────────────────────────────────

class Workshop(db.Model):
    """
    One AI readiness engagement.

    Each pipeline stage overwrites its own JSON column; re-running a stage
    replaces the previous result (last write wins, single facilitator).
    """

    __tablename__ = "workshops"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    company_name = db.Column(db.String(200), nullable=False)
    industry = db.Column(db.String(120), default="")
    facilitator_name = db.Column(db.String(150), default="")
    workshop_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="draft",
                       comment="draft | in_progress | completed")

    # Source systems
    research_app_report_id = db.Column(db.String(100), nullable=True)
    cognition_two_analysis_id = db.Column(db.String(100), nullable=True)
    research_app_data = db.Column(db.JSON, nullable=True, comment="Raw ResearchApp report payload")
    cognition_two_data = db.Column(db.JSON, nullable=True, comment="Raw CognitionTwo analysis payload")

    # Stage results
    reconciled_use_cases = db.Column(db.JSON, nullable=True, comment="Unified use-case list")
    challenge_results = db.Column(db.JSON, nullable=True)
    validation_results = db.Column(db.JSON, nullable=True)
    prioritization_matrix = db.Column(db.JSON, nullable=True)
    workflow_maps = db.Column(db.JSON, nullable=True)
    data_lineage = db.Column(db.JSON, nullable=True)
    workshop_synthesis = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    survey_templates = db.relationship(
        "SurveyTemplate", backref="workshop", lazy="dynamic",
        cascade="all, delete-orphan", order_by="SurveyTemplate.id",
    )
    survey_responses = db.relationship(
        "SurveyResponse", backref="workshop", lazy="dynamic",
        cascade="all, delete-orphan", order_by="SurveyResponse.id",
    )
    priorities = db.relationship(
        "UseCasePriority", backref="workshop", lazy="dynamic",
        cascade="all, delete-orphan", order_by="UseCasePriority.id",
    )
    challenges = db.relationship(
        "ChallengeLogEntry", backref="workshop", lazy="dynamic",
        cascade="all, delete-orphan", order_by="ChallengeLogEntry.id",
    )

    @property
    def use_cases(self) -> list:
        return list(self.reconciled_use_cases or [])

    def to_dict(self, include_sources=False):
        result = {
            "id": self.id,
            "companyName": self.company_name,
            "industry": self.industry or "",
            "facilitatorName": self.facilitator_name or "",
            "workshopDate": _iso(self.workshop_date),
            "status": self.status,
            "researchAppReportId": self.research_app_report_id,
            "cognitionTwoAnalysisId": self.cognition_two_analysis_id,
            "hasResearchAppData": self.research_app_data is not None,
            "hasCognitionTwoData": self.cognition_two_data is not None,
            "reconciledUseCases": self.reconciled_use_cases,
            "challengeResults": self.challenge_results,
            "validationResults": self.validation_results,
            "prioritizationMatrix": self.prioritization_matrix,
            "workflowMaps": self.workflow_maps,
            "dataLineage": self.data_lineage,
            "workshopSynthesis": self.workshop_synthesis,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_sources:
            result["researchAppData"] = self.research_app_data
            result["cognitionTwoData"] = self.cognition_two_data
        return result

    def to_summary(self):
        """Compact row for list views."""
        return {
            "id": self.id,
            "companyName": self.company_name,
            "industry": self.industry or "",
            "facilitatorName": self.facilitator_name or "",
            "workshopDate": _iso(self.workshop_date),
            "status": self.status,
            "useCaseCount": len(self.use_cases),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def to_snapshot(self):
        """Everything the export renderers read, with no audit timestamps."""
        return {
            "id": self.id,
            "companyName": self.company_name,
            "industry": self.industry or "",
            "facilitatorName": self.facilitator_name or "",
            "workshopDate": _iso(self.workshop_date),
            "status": self.status,
            "reconciledUseCases": self.use_cases,
            "challengeResults": self.challenge_results,
            "validationResults": self.validation_results,
            "prioritizationMatrix": self.prioritization_matrix,
            "workflowMaps": self.workflow_maps or [],
            "dataLineage": self.data_lineage or [],
            "workshopSynthesis": self.workshop_synthesis,
            "priorities": [p.to_dict() for p in self.priorities],
        }

    def __repr__(self):
        return f"<Workshop {self.id} {self.company_name!r} [{self.status}]>"


# ── SurveyTemplate ───────────────────────────────────────────────────────────

class SurveyTemplate(db.Model):
    """Question list for one readiness dimension of one workshop."""

    __tablename__ = "survey_templates"
    __table_args__ = (
        db.UniqueConstraint("workshop_id", "dimension", name="uq_survey_template_dimension"),
    )

    id = db.Column(db.Integer, primary_key=True)
    workshop_id = db.Column(
        db.String(36), db.ForeignKey("workshops.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    dimension = db.Column(db.String(30), nullable=False,
                          comment="skills | data | infrastructure | governance")
    questions = db.Column(db.JSON, nullable=False, default=list)
    generated_by = db.Column(db.String(10), default="ai", comment="ai | manual")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "workshopId": self.workshop_id,
            "dimension": self.dimension,
            "questions": self.questions or [],
            "generatedBy": self.generated_by,
            "createdAt": _iso(self.created_at),
        }


# ── SurveyResponse ───────────────────────────────────────────────────────────

class SurveyResponse(db.Model):
    """A submitted answer set. Insertion order decides which row is current."""

    __tablename__ = "survey_responses"

    id = db.Column(db.Integer, primary_key=True)
    workshop_id = db.Column(
        db.String(36), db.ForeignKey("workshops.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    template_id = db.Column(db.String(64), nullable=True,
                            comment="Template the answers were collected against, if any")
    responses = db.Column(db.JSON, nullable=False, default=list,
                          comment="[{questionId, maturityLevel, notes}]")
    dimension_scores = db.Column(db.JSON, nullable=True,
                                 comment="{skills, data, infrastructure, governance, overall}")
    completed_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "workshopId": self.workshop_id,
            "templateId": self.template_id,
            "responses": self.responses or [],
            "dimensionScores": self.dimension_scores,
            "completedAt": _iso(self.completed_at),
        }


# ── UseCasePriority ──────────────────────────────────────────────────────────

class UseCasePriority(db.Model):
    """Matrix placement for one use case; the quadrant always follows quadrant_for()."""

    __tablename__ = "use_case_priorities"
    __table_args__ = (
        db.UniqueConstraint("workshop_id", "use_case_id", name="uq_priority_use_case"),
    )

    id = db.Column(db.Integer, primary_key=True)
    workshop_id = db.Column(
        db.String(36), db.ForeignKey("workshops.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    use_case_id = db.Column(db.String(64), nullable=False)
    use_case_title = db.Column(db.String(300), default="")
    impact_score = db.Column(db.Float, nullable=False, default=0.0, comment="0-10")
    feasibility_score = db.Column(db.Float, nullable=False, default=0.0, comment="0-10")
    quadrant = db.Column(db.String(20), nullable=False, default="deprioritize")
    survey_alignment = db.Column(db.JSON, nullable=True,
                                 comment="{impact: breakdown, feasibility: breakdown}")
    override_reason = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def apply_scores(self, impact: float, feasibility: float):
        self.impact_score = impact
        self.feasibility_score = feasibility
        self.quadrant = quadrant_for(impact, feasibility)

    def to_dict(self):
        return {
            "id": self.id,
            "workshopId": self.workshop_id,
            "useCaseId": self.use_case_id,
            "useCaseTitle": self.use_case_title or "",
            "impactScore": self.impact_score,
            "feasibilityScore": self.feasibility_score,
            "quadrant": self.quadrant,
            "surveyAlignment": self.survey_alignment,
            "overrideReason": self.override_reason,
        }


# ── ChallengeLogEntry ────────────────────────────────────────────────────────

class ChallengeLogEntry(db.Model):
    """One challenged assumption, KPI, friction point or benefit claim."""

    __tablename__ = "challenge_log"

    id = db.Column(db.Integer, primary_key=True)
    workshop_id = db.Column(
        db.String(36), db.ForeignKey("workshops.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    use_case_id = db.Column(db.String(64), nullable=False)
    challenge_type = db.Column(db.String(20), nullable=False, default="assumption",
                               comment="assumption | kpi | friction | benefit")
    field_name = db.Column(db.String(100), default="")
    original_value = db.Column(db.JSON, nullable=True)
    challenged_value = db.Column(db.JSON, nullable=True)
    evidence = db.Column(db.Text, default="")
    severity = db.Column(db.String(10), default="medium", comment="low | medium | high")
    status = db.Column(db.String(20), nullable=False, default="pending",
                       comment="pending | accepted | rejected")
    responded_by = db.Column(db.String(150), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "workshopId": self.workshop_id,
            "useCaseId": self.use_case_id,
            "challengeType": self.challenge_type,
            "fieldName": self.field_name or "",
            "originalValue": self.original_value,
            "challengedValue": self.challenged_value,
            "evidence": self.evidence or "",
            "severity": self.severity,
            "status": self.status,
            "respondedBy": self.responded_by,
            "createdAt": _iso(self.created_at),
        }
