"""Survey Generation Agent: tailored four-dimension readiness survey."""

from catalyst.ai.agents.base import PromptedAgent, pick, to_json
from catalyst.ai.context import SURVEY_AGENT
from catalyst.ai.schemas import SurveyPayload, dump
from catalyst.models.workshop import SURVEY_DIMENSIONS

_FIELDS = (
    "id", "title", "businessFunction", "aiPrimitives", "agenticPattern",
    "dataReadiness", "horizon",
)


class SurveyGenerationAgent(PromptedAgent):
    name = SURVEY_AGENT
    role = "Assessment Designer"
    goal = "Generate a tailored 4-dimension AI readiness survey based on the client's use cases"
    prompt_name = "survey_generation"
    schema = SurveyPayload
    max_tokens = 4096

    def build_variables(self, context):
        return {"use_cases": to_json([pick(uc, _FIELDS) for uc in context.reconciled_use_cases])}

    def summarize(self, payload, context):
        per_dimension = {dim: 0 for dim in SURVEY_DIMENSIONS}
        for dimension in payload.dimensions:
            per_dimension[dimension.dimension] += len(dimension.questions)
        total = sum(per_dimension.values())

        structured = {
            "dimensions": dump(payload)["dimensions"],
            "totalQuestions": total,
        }
        insights = [f"Generated {total} tailored questions across 4 dimensions"]
        insights += [f"{dim.title()}: {count} questions" for dim, count in per_dimension.items()]
        reasoning = payload.rationale or (
            "Questions generated from the client's use cases, industry context "
            "and AI primitive requirements."
        )
        return insights, structured, 0.9, reasoning
