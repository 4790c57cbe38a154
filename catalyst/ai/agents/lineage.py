"""Data Lineage Agent: sources, inputs, outputs and controls per use case."""

from catalyst.ai.agents.base import PromptedAgent, pick, survey_block, to_json
from catalyst.ai.context import LINEAGE_AGENT
from catalyst.ai.schemas import LineagePayload, dump

NO_SURVEY_FALLBACK = "Not available. Flag potential data and governance gaps."

_FIELDS = ("id", "title", "businessFunction", "aiPrimitives", "agenticPattern", "dataReadiness")


class LineageAgent(PromptedAgent):
    name = LINEAGE_AGENT
    role = "Data Governance Specialist"
    goal = "Map data lineage, explainability, observability and governance for each use case"
    prompt_name = "data_lineage"
    schema = LineagePayload

    def build_variables(self, context):
        return {
            "use_cases": to_json([pick(uc, _FIELDS) for uc in context.reconciled_use_cases]),
            "survey_scores": survey_block(context, NO_SURVEY_FALLBACK),
        }

    def summarize(self, payload, context):
        sources = {source for lineage in payload.lineages for source in lineage.data_sources}
        insights = [
            f"Mapped data lineage for {len(payload.lineages)} use cases",
            f"Total data sources identified: {len(sources)}",
        ]
        reasoning = (
            "Lineage derived from use case data requirements and AI primitives, "
            "cross-referenced with survey readiness scores."
        )
        return insights, {"lineages": dump(payload)["lineages"]}, 0.8, reasoning
