"""Assumption Challenge Agent: evidence-based skeptic over the use case portfolio."""

from catalyst.ai.agents.base import PromptedAgent, pick, to_json
from catalyst.ai.context import CHALLENGE_AGENT
from catalyst.ai.schemas import ChallengePayload, dump

NO_SURVEY_FALLBACK = (
    "No survey scores yet. Challenge data readiness assumptions more aggressively."
)

_FIELDS = (
    "id", "title", "businessFunction", "revenueBenefit", "costBenefit",
    "cashFlowBenefit", "riskBenefit", "totalAnnualValue", "threeYearNPV",
    "timeToValue", "dataReadiness", "effortScore", "agenticPattern", "horizon",
    "trustTaxPercent", "legacyAnnualCost",
)


class ChallengeAgent(PromptedAgent):
    name = CHALLENGE_AGENT
    role = "Evidence-Based Skeptic"
    goal = "Stress-test every assumption, KPI and financial projection in the portfolio"
    prompt_name = "assumption_challenge"
    schema = ChallengePayload

    def build_variables(self, context):
        if context.survey_dimension_scores:
            scores = "SURVEY READINESS SCORES: " + to_json(dict(context.survey_dimension_scores))
        else:
            scores = NO_SURVEY_FALLBACK
        return {
            "use_cases": to_json([pick(uc, _FIELDS) for uc in context.reconciled_use_cases]),
            "survey_scores": scores,
        }

    def summarize(self, payload, context):
        challenges = dump(payload)["challenges"]
        high = sum(1 for c in payload.challenges if c.severity == "high")
        structured = {
            "challenges": challenges,
            "totalChallenges": len(challenges),
            "highSeverityCount": high,
        }
        insights = [
            f"Found {len(challenges)} challenges across {len(context.reconciled_use_cases)} use cases",
            f"{high} high-severity issues",
            payload.summary,
        ]
        reasoning = (
            "Challenges drawn from industry benchmarks and published case studies, "
            "cross-checked against survey readiness scores."
        )
        return insights, structured, 0.8, reasoning
