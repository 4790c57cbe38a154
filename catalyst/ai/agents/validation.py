"""Benefit Validation Agent: risk-adjusts projected benefits."""

from catalyst.ai.agents.base import PromptedAgent, insights_block, millions, pick, survey_block, to_json
from catalyst.ai.context import CHALLENGE_AGENT, VALIDATION_AGENT
from catalyst.ai.schemas import ValidationPayload, dump

NO_SURVEY_FALLBACK = "Not yet available. Apply moderate discount factors across the board."

_FIELDS = (
    "id", "title", "businessFunction", "revenueBenefit", "costBenefit",
    "cashFlowBenefit", "riskBenefit", "totalAnnualValue", "threeYearNPV",
    "dataReadiness", "horizon", "agenticPattern", "legacyAnnualCost",
)


class ValidationAgent(PromptedAgent):
    name = VALIDATION_AGENT
    role = "Financial Verification Specialist"
    goal = "Verify financial projections against industry benchmarks and readiness levels"
    prompt_name = "benefit_validation"
    schema = ValidationPayload

    def build_variables(self, context):
        return {
            "use_cases": to_json([pick(uc, _FIELDS) for uc in context.reconciled_use_cases]),
            "survey_scores": survey_block(context, NO_SURVEY_FALLBACK),
            "challenge_findings": insights_block(context, CHALLENGE_AGENT, "CHALLENGE AGENT FINDINGS"),
        }

    def summarize(self, payload, context):
        rows = payload.validations
        # The model's own totals win when present and non-zero
        total_original = payload.total_original_value or sum(v.original_benefit or 0 for v in rows)
        total_validated = payload.total_validated_value or sum(v.validated_benefit or 0 for v in rows)
        average = payload.average_confidence or round(
            sum(v.confidence_level or 0 for v in rows) / (len(rows) or 1)
        )
        reduction = round((1 - total_validated / total_original) * 100) if total_original > 0 else 0

        structured = {
            "validations": dump(payload)["validations"],
            "totalOriginalValue": total_original,
            "totalValidatedValue": total_validated,
            "averageConfidence": average,
        }
        insights = [
            f"Original portfolio value: {millions(total_original)}",
            f"Validated portfolio value: {millions(total_validated)}",
            f"Average confidence: {average:g}%",
            f"Overall adjustment: {reduction}% reduction",
            payload.summary,
        ]
        reasoning = (
            "Benefits risk-adjusted using survey readiness scores, industry benchmarks "
            "and challenge findings."
        )
        return insights, structured, average / 100, reasoning
