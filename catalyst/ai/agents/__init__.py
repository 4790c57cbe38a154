"""
AI Catalyst Workshop
Workshop agents.

    ReconciliationAgent     → merged use-case list
    SurveyGenerationAgent   → readiness survey (4 dimensions)
    ChallengeAgent          → challenged assumptions
    ValidationAgent         → risk-adjusted benefits
    PrioritizationAgent     → impact / feasibility matrix
    WorkflowAgent           → current vs target workflows
    LineageAgent            → data lineage and controls
    SynthesisAgent          → executive report
"""

from catalyst.ai.agents.base import PromptedAgent
from catalyst.ai.agents.challenge import ChallengeAgent
from catalyst.ai.agents.lineage import LineageAgent
from catalyst.ai.agents.prioritization import PrioritizationAgent
from catalyst.ai.agents.reconciliation import ReconciliationAgent
from catalyst.ai.agents.survey import SurveyGenerationAgent
from catalyst.ai.agents.synthesis import SynthesisAgent
from catalyst.ai.agents.validation import ValidationAgent
from catalyst.ai.agents.workflow import WorkflowAgent

AGENT_CLASSES = (
    ReconciliationAgent,
    SurveyGenerationAgent,
    ChallengeAgent,
    ValidationAgent,
    PrioritizationAgent,
    WorkflowAgent,
    LineageAgent,
    SynthesisAgent,
)


def build_agents(gateway, prompt_registry=None, model=None) -> dict:
    """Instantiate every agent once, keyed by canonical agent name."""
    return {
        cls.name: cls(gateway, prompt_registry=prompt_registry, model=model)
        for cls in AGENT_CLASSES
    }


__all__ = [
    "AGENT_CLASSES",
    "build_agents",
    "PromptedAgent",
    "ReconciliationAgent",
    "SurveyGenerationAgent",
    "ChallengeAgent",
    "ValidationAgent",
    "PrioritizationAgent",
    "WorkflowAgent",
    "LineageAgent",
    "SynthesisAgent",
]
