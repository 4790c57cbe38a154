"""Prioritization Agent: impact / feasibility scoring for the 2x2 matrix."""

from catalyst.ai.agents.base import PromptedAgent, insights_block, pick, survey_block, to_json
from catalyst.ai.context import CHALLENGE_AGENT, PRIORITIZATION_AGENT, VALIDATION_AGENT
from catalyst.ai.schemas import PrioritizationPayload, dump
from catalyst.models.workshop import QUADRANTS, quadrant_for

NO_SURVEY_FALLBACK = "Not available. Use conservative feasibility estimates."

_FIELDS = (
    "id", "title", "businessFunction", "totalAnnualValue", "threeYearNPV",
    "dataReadiness", "effortScore", "timeToValue", "horizon", "agenticPattern",
    "aiPrimitives", "strategicTheme", "revenueBenefit", "costBenefit",
    "riskBenefit", "implementationRisk", "legacyAnnualCost",
)

_QUADRANT_RANK = {quadrant: rank for rank, quadrant in enumerate(QUADRANTS)}


def priority_lookup(context) -> dict:
    """useCaseId -> priority row from the prioritization output in the context, if any."""
    output = context.output_of(PRIORITIZATION_AGENT)
    if output is None:
        return {}
    rows = output.structured_data.get("priorities") or []
    return {row.get("useCaseId"): row for row in rows if isinstance(row, dict)}


def rank_use_cases(context) -> list[dict]:
    """
    Use cases ordered by quadrant (quick wins first) then impact x feasibility.

    Falls back to reconciliation order when there is no priority table.
    """
    use_cases = list(context.reconciled_use_cases)
    lookup = priority_lookup(context)
    if not lookup:
        return use_cases

    def key(item):
        index, use_case = item
        row = lookup.get(use_case.get("id"))
        if row is None:
            return (len(QUADRANTS), 0.0, index)
        score = (row.get("impactScore") or 0) * (row.get("feasibilityScore") or 0)
        return (_QUADRANT_RANK.get(row.get("quadrant"), len(QUADRANTS)), -score, index)

    return [uc for _, uc in sorted(enumerate(use_cases), key=key)]


class PrioritizationAgent(PromptedAgent):
    name = PRIORITIZATION_AGENT
    role = "Strategic Decision Analyst"
    goal = "Score each use case on Impact and Feasibility for 2x2 matrix placement"
    prompt_name = "prioritization"
    schema = PrioritizationPayload

    def build_variables(self, context):
        return {
            "use_cases": to_json([pick(uc, _FIELDS) for uc in context.reconciled_use_cases]),
            "survey_scores": survey_block(context, NO_SURVEY_FALLBACK),
            "validation_insights": insights_block(context, VALIDATION_AGENT, "VALIDATION INSIGHTS"),
            "challenge_insights": insights_block(context, CHALLENGE_AGENT, "CHALLENGE INSIGHTS"),
        }

    def summarize(self, payload, context):
        priorities = dump(payload)["priorities"]
        # The quadrant always follows the scores, whatever label the model chose
        for row, item in zip(priorities, payload.priorities):
            row["quadrant"] = quadrant_for(item.impact_score, item.feasibility_score)

        counts = {quadrant: 0 for quadrant in QUADRANTS}
        for row in priorities:
            counts[row["quadrant"]] += 1

        structured = {
            "priorities": priorities,
            "quickWinCount": counts["quick_win"],
            "strategicCount": counts["strategic"],
        }
        insights = [
            f"{counts['quick_win']} Quick Wins identified (high value + high feasibility)",
            f"{counts['strategic']} Strategic Bets (high value, needs investment)",
            f"{counts['fill_in']} Fill-Ins (easy but lower value)",
            f"{counts['deprioritize']} Deprioritized",
            payload.summary,
        ]
        reasoning = (
            "Impact weighs value, NPV and strategic alignment; feasibility weighs survey "
            "readiness, data readiness and complexity."
        )
        return insights, structured, 0.85, reasoning
