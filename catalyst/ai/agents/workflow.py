"""Workflow Visualization Agent: current vs AI-enabled workflows for the top use cases."""

from catalyst.ai.agents.base import PromptedAgent, pick, to_json
from catalyst.ai.agents.prioritization import rank_use_cases
from catalyst.ai.context import WORKFLOW_AGENT
from catalyst.ai.schemas import WorkflowPayload, dump

MAX_WORKFLOW_USE_CASES = 6

_FIELDS = (
    "id", "title", "businessFunction", "frictionPoint", "aiPrimitives",
    "agenticPattern", "legacyProcessSteps", "legacyPainPoints", "legacyAnnualCost",
    "agenticTransformSteps", "agenticAutomationLevel",
)


class WorkflowAgent(PromptedAgent):
    name = WORKFLOW_AGENT
    role = "Process Transformation Architect"
    goal = "Generate side-by-side current vs AI-automated workflows for prioritized use cases"
    prompt_name = "workflow_visualization"
    schema = WorkflowPayload
    max_tokens = 8192

    def build_variables(self, context):
        selected = rank_use_cases(context)[:MAX_WORKFLOW_USE_CASES]
        return {"use_cases": to_json([pick(uc, _FIELDS) for uc in selected])}

    def summarize(self, payload, context):
        bottlenecks = sum(1 for workflow in payload.workflows if workflow.has_bottleneck)
        insights = [
            f"Generated {len(payload.workflows)} workflow maps",
            f"{bottlenecks} workflows with bottlenecks identified",
        ]
        reasoning = (
            "Workflows built from use case details, legacy process data and agentic "
            "transformation patterns."
        )
        return insights, {"workflows": dump(payload)["workflows"]}, 0.85, reasoning
