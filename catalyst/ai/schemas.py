"""
AI Catalyst Workshop
Response schemas for the eight workshop agents.

Field names are snake_case in Python and camelCase on the wire. Unknown
fields are kept so use-case attributes the models add flow through to
storage untouched.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


def _as_id(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


UseCaseId = Annotated[str, BeforeValidator(_as_id), Field(min_length=1)]


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


def dump(model: BaseModel) -> dict:
    """Serialise a validated payload with camelCase keys."""
    return model.model_dump(by_alias=True, mode="json")


# ── Reconciliation ───────────────────────────────────────────────────────────

class ReconciledUseCase(WireModel):
    """One merged use case. Financial fields come from ResearchApp, cognitive ones from CognitionTwo."""

    id: UseCaseId
    title: str = Field(min_length=1)
    description: str = ""
    business_function: str = ""
    ai_primitives: list[str] = Field(default_factory=list)
    total_annual_value: float | None = None
    three_year_npv: float | None = Field(default=None, alias="threeYearNPV")
    data_readiness: float | None = None
    effort_score: float | None = None
    agentic_pattern: str | None = None
    horizon: str | None = None


class ReconciliationConflict(WireModel):
    use_case_id: str = ""
    field: str = ""
    research_value: Any = None
    cognition_value: Any = None
    resolved_value: Any = None


class ReconciliationPayload(WireModel):
    reconciled_use_cases: list[ReconciledUseCase]
    matched_count: int = 0
    research_only_count: int = 0
    cognition_only_count: int = 0
    conflicts: list[ReconciliationConflict] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> "ReconciliationPayload":
        seen = set()
        for use_case in self.reconciled_use_cases:
            if use_case.id in seen:
                raise ValueError(f"duplicate use case id {use_case.id!r}")
            seen.add(use_case.id)
        return self


# ── Survey generation ────────────────────────────────────────────────────────

class SurveyQuestion(WireModel):
    id: UseCaseId
    category: str = ""
    question: str = Field(min_length=1)
    hint: str = ""
    weight: float = Field(default=1, gt=0)
    use_case_ids: list[str] = Field(default_factory=list)


class SurveyDimension(WireModel):
    dimension: Literal["skills", "data", "infrastructure", "governance"]
    questions: list[SurveyQuestion] = Field(default_factory=list)


class SurveyPayload(WireModel):
    dimensions: list[SurveyDimension]
    total_questions: int | None = None
    rationale: str = ""


# ── Assumption challenge ─────────────────────────────────────────────────────

class ChallengeItem(WireModel):
    use_case_id: UseCaseId
    challenge_type: Literal["assumption", "kpi", "friction", "benefit"] = "assumption"
    field_name: str = ""
    original_value: Any = None
    challenged_value: Any = None
    evidence: str = ""
    severity: Literal["low", "medium", "high"] = "medium"


class ChallengePayload(WireModel):
    challenges: list[ChallengeItem]
    total_challenges: int | None = None
    high_severity_count: int | None = None
    summary: str = ""


# ── Benefit validation ───────────────────────────────────────────────────────

class ValidationItem(WireModel):
    use_case_id: UseCaseId
    original_benefit: float | None = None
    validated_benefit: float | None = None
    confidence_level: float | None = Field(default=None, ge=0, le=100)
    adjustment_reason: str = ""
    benchmark_source: str = ""
    risk_flags: list[str] = Field(default_factory=list)


class ValidationPayload(WireModel):
    validations: list[ValidationItem]
    total_original_value: float | None = None
    total_validated_value: float | None = None
    average_confidence: float | None = None
    summary: str = ""


# ── Prioritization ───────────────────────────────────────────────────────────

class ImpactBreakdown(WireModel):
    annual_value_weight: float = 0
    strategic_alignment_weight: float = 0
    scope_weight: float = 0
    benefit_mix_weight: float = 0
    npv_weight: float = 0


class FeasibilityBreakdown(WireModel):
    survey_score_weight: float = 0
    data_readiness_weight: float = 0
    complexity_weight: float = 0
    change_management_weight: float = 0
    infra_alignment_weight: float = 0


class PriorityItem(WireModel):
    use_case_id: UseCaseId
    use_case_title: str = ""
    impact_score: float = Field(ge=0, le=10)
    feasibility_score: float = Field(ge=0, le=10)
    quadrant: str | None = None
    impact_breakdown: ImpactBreakdown | None = None
    feasibility_breakdown: FeasibilityBreakdown | None = None


class PrioritizationPayload(WireModel):
    priorities: list[PriorityItem]
    quick_win_count: int | None = None
    strategic_count: int | None = None
    summary: str = ""


# ── Workflow visualization ───────────────────────────────────────────────────

class WorkflowStep(WireModel):
    step_number: int | None = None
    step_name: str = ""
    description: str = ""
    actor: str = ""
    duration: str = ""
    systems: list[str] = Field(default_factory=list)
    is_bottleneck: bool = False
    is_friction_point: bool = False
    pain_points: list[str] = Field(default_factory=list)
    is_ai_enabled: bool = Field(default=False, alias="isAIEnabled")
    ai_capabilities: list[str] = Field(default_factory=list)
    agent_type: str | None = None
    automation_level: str | None = None


class MetricComparison(WireModel):
    before: str = ""
    after: str = ""
    improvement: str = ""


class ComparisonMetrics(WireModel):
    time_reduction: MetricComparison | None = None
    cost_reduction: MetricComparison | None = None
    quality_improvement: MetricComparison | None = None
    throughput_increase: MetricComparison | None = None


class WorkflowMap(WireModel):
    use_case_id: UseCaseId
    use_case_title: str = ""
    agentic_pattern: str = ""
    pattern_rationale: str = ""
    current_state_workflow: list[WorkflowStep] = Field(default_factory=list)
    target_state_workflow: list[WorkflowStep] = Field(default_factory=list)
    comparison_metrics: ComparisonMetrics | None = None

    @property
    def has_bottleneck(self) -> bool:
        return any(step.is_bottleneck for step in self.current_state_workflow)


class WorkflowPayload(WireModel):
    workflows: list[WorkflowMap]


# ── Data lineage ─────────────────────────────────────────────────────────────

class LineageItem(WireModel):
    use_case_id: UseCaseId
    data_sources: list[str] = Field(default_factory=list)
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    explainability: str = ""
    observability: str = ""
    governance: str = ""


class LineagePayload(WireModel):
    lineages: list[LineageItem]


# ── Synthesis ────────────────────────────────────────────────────────────────

class Roadmap(WireModel):
    thirty_day: list[str] = Field(default_factory=list)
    sixty_day: list[str] = Field(default_factory=list)
    ninety_day: list[str] = Field(default_factory=list)


class RiskEntry(WireModel):
    risk: str = ""
    likelihood: str = ""
    impact: str = ""
    mitigation: str = ""


class SynthesisPayload(WireModel):
    executive_summary: str = ""
    top_recommendations: list[str] = Field(default_factory=list)
    implementation_roadmap: Roadmap = Field(default_factory=Roadmap)
    risk_register: list[RiskEntry] = Field(default_factory=list)
    resource_requirements: list[str] = Field(default_factory=list)
    total_estimated_value: float = 0
    top_quick_wins: list[str] = Field(default_factory=list)
