"""Workshop Synthesis Agent: executive summary, roadmap and risk register."""

from catalyst.ai.agents.base import PromptedAgent, millions, survey_block, to_json
from catalyst.ai.agents.prioritization import priority_lookup
from catalyst.ai.context import AGENT_NAMES, SYNTHESIS_AGENT
from catalyst.ai.schemas import SynthesisPayload, dump

NO_SURVEY_FALLBACK = "Not available"
NO_INSIGHTS_FALLBACK = "No earlier agent results are stored for this workshop."


def _previous_insights(context) -> str:
    blocks = []
    # Pipeline order first, then anything else that was supplied
    ordered = [name for name in AGENT_NAMES if name in context.previous_agent_outputs]
    ordered += sorted(name for name in context.previous_agent_outputs if name not in AGENT_NAMES)
    for name in ordered:
        if name == SYNTHESIS_AGENT:
            continue
        output = context.previous_agent_outputs[name]
        blocks.append(f"{name}: {'; '.join(output.insights)}")
    return "\n\n".join(blocks) or NO_INSIGHTS_FALLBACK


class SynthesisAgent(PromptedAgent):
    name = SYNTHESIS_AGENT
    role = "Strategic Advisor"
    goal = "Generate executive summary, recommendations, roadmap and final workshop report"
    prompt_name = "workshop_synthesis"
    schema = SynthesisPayload

    def build_variables(self, context):
        lookup = priority_lookup(context)
        use_cases = [
            {
                "id": uc.get("id"),
                "title": uc.get("title"),
                "totalAnnualValue": uc.get("totalAnnualValue"),
                "quadrant": (lookup.get(uc.get("id")) or {}).get("quadrant") or uc.get("quadrant"),
                "agenticPattern": uc.get("agenticPattern"),
                "horizon": uc.get("horizon"),
            }
            for uc in context.reconciled_use_cases
        ]
        return {
            "use_cases": to_json(use_cases),
            "use_case_count": len(use_cases),
            "survey_scores": survey_block(context, NO_SURVEY_FALLBACK),
            "previous_insights": _previous_insights(context),
        }

    def summarize(self, payload, context):
        structured = dump(payload)
        insights = [
            f"{len(payload.top_recommendations)} recommendations generated",
            f"{len(payload.top_quick_wins)} quick wins identified",
            f"{len(payload.risk_register)} risks in register",
            f"Estimated portfolio value: {millions(payload.total_estimated_value)}",
        ]
        reasoning = (
            "Synthesised from every earlier agent output, survey scores and industry context."
        )
        return insights, structured, 0.85, reasoning
