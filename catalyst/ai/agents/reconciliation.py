"""Import Reconciliation Agent: merges ResearchApp and CognitionTwo use cases."""

import json
import logging

from catalyst.ai.agents.base import PromptedAgent, to_json
from catalyst.ai.context import RECONCILIATION_AGENT
from catalyst.ai.schemas import ReconciliationPayload, dump

logger = logging.getLogger(__name__)

NOT_IMPORTED = "None imported"


def _research_section(payload) -> str:
    """Use cases (step 4), benefits (step 5) and company overview from a ResearchApp report."""
    if not payload:
        return NOT_IMPORTED
    analysis = payload.get("analysisData") if isinstance(payload, dict) else None
    if isinstance(analysis, str):
        try:
            analysis = json.loads(analysis)
        except json.JSONDecodeError:
            logger.warning("ResearchApp analysisData is not valid JSON; sending it as text")
            return analysis
    if not isinstance(analysis, dict):
        return NOT_IMPORTED

    steps = {step.get("step"): step for step in analysis.get("steps") or [] if isinstance(step, dict)}
    use_cases = (steps.get(4) or {}).get("data")
    benefits = (steps.get(5) or {}).get("data")
    if not use_cases and not benefits:
        return NOT_IMPORTED
    return to_json({
        "useCases": use_cases or [],
        "benefits": benefits or [],
        "companyOverview": analysis.get("companyOverview"),
    })


def _cognition_section(payload) -> str:
    if not payload or not isinstance(payload, dict):
        return NOT_IMPORTED
    return to_json({
        "useCases": payload.get("useCases") or [],
        "cognitiveNodes": payload.get("cognitiveNodes") or [],
        "executiveSummary": payload.get("executiveSummary"),
    })


class ReconciliationAgent(PromptedAgent):
    name = RECONCILIATION_AGENT
    role = "Data Integration Specialist"
    goal = "Merge use case data from ResearchApp and CognitionTwo into a unified model"
    prompt_name = "reconciliation"
    schema = ReconciliationPayload
    max_tokens = 8192

    def build_variables(self, context):
        return {
            "research_data": _research_section(context.research_app_data),
            "cognition_data": _cognition_section(context.cognition_two_data),
        }

    def summarize(self, payload, context):
        structured = dump(payload)
        insights = [
            f"Matched {payload.matched_count} use cases across both sources",
            f"{payload.research_only_count} use cases only in ResearchApp",
            f"{payload.cognition_only_count} use cases only in CognitionTwo",
            f"{len(payload.conflicts)} data conflicts detected",
        ]
        reasoning = (
            "Matched on title/description similarity above 70%. Financial fields come from "
            "ResearchApp, cognitive fields from CognitionTwo."
        )
        return insights, structured, 0.85, reasoning
