"""
AI Catalyst Workshop
Pipeline context and agent output envelope.

The context is immutable: each pipeline step returns a new context with
its outputs merged in, so parallel agents read the same snapshot and
never observe each other's writes.
"""

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

RECONCILIATION_AGENT = "Import Reconciliation Agent"
SURVEY_AGENT = "Survey Generation Agent"
CHALLENGE_AGENT = "Assumption Challenge Agent"
VALIDATION_AGENT = "Benefit Validation Agent"
PRIORITIZATION_AGENT = "Prioritization Agent"
WORKFLOW_AGENT = "Workflow Visualization Agent"
LINEAGE_AGENT = "Data Lineage Agent"
SYNTHESIS_AGENT = "Workshop Synthesis Agent"

AGENT_NAMES = (
    RECONCILIATION_AGENT,
    SURVEY_AGENT,
    CHALLENGE_AGENT,
    VALIDATION_AGENT,
    PRIORITIZATION_AGENT,
    WORKFLOW_AGENT,
    LINEAGE_AGENT,
    SYNTHESIS_AGENT,
)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass
class AgentOutput:
    """Uniform result envelope returned by every agent."""

    agent_name: str
    insights: list[str] = field(default_factory=list)
    structured_data: dict = field(default_factory=dict)
    confidence: float = 0.0
    reasoning: str = ""
    duration_ms: int = 0

    def __post_init__(self):
        self.confidence = _clamp(self.confidence)

    def to_dict(self) -> dict:
        return {
            "agentName": self.agent_name,
            "insights": list(self.insights),
            "structuredData": self.structured_data,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "durationMs": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AgentOutput":
        return cls(
            agent_name=data.get("agentName", ""),
            insights=list(data.get("insights") or []),
            structured_data=dict(data.get("structuredData") or {}),
            confidence=data.get("confidence", 0.0) or 0.0,
            reasoning=data.get("reasoning", "") or "",
            duration_ms=int(data.get("durationMs", 0) or 0),
        )


def _freeze(outputs: Mapping[str, AgentOutput] | None) -> Mapping[str, AgentOutput]:
    return MappingProxyType(dict(outputs or {}))


@dataclass(frozen=True)
class WorkshopContext:
    """Read-only view of a workshop handed to each agent."""

    workshop_id: str
    company_name: str
    industry: str = ""
    research_app_data: Any = None
    cognition_two_data: Any = None
    reconciled_use_cases: tuple = ()
    survey_dimension_scores: Mapping[str, float] | None = None
    previous_agent_outputs: Mapping[str, AgentOutput] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "reconciled_use_cases", tuple(self.reconciled_use_cases or ()))
        object.__setattr__(self, "previous_agent_outputs", _freeze(self.previous_agent_outputs))

    @property
    def has_use_cases(self) -> bool:
        return len(self.reconciled_use_cases) > 0

    def output_of(self, agent_name: str) -> AgentOutput | None:
        return self.previous_agent_outputs.get(agent_name)

    def with_output(self, agent_name: str, output: AgentOutput) -> "WorkshopContext":
        return self.with_outputs({agent_name: output})

    def with_outputs(self, outputs: Mapping[str, AgentOutput]) -> "WorkshopContext":
        merged = dict(self.previous_agent_outputs)
        merged.update(outputs)
        return dataclasses.replace(self, previous_agent_outputs=merged)

    def with_use_cases(self, use_cases) -> "WorkshopContext":
        return dataclasses.replace(self, reconciled_use_cases=tuple(use_cases or ()))
