"""
Tests — workshop agents.

Covers:
    - Reconciliation: source sections in the prompt, merged output, matchedCount
    - Survey: flattened question count and per-dimension insights
    - Challenge: totals recomputed from the challenge rows
    - Validation: "no survey" discount fallback, totals computed when omitted
    - Prioritization: quadrant re-derived from scores, ranking helper
    - Workflow / Lineage / Synthesis: prompt inputs and summaries
    - Failure modes: invalid JSON and schema mismatch surface as agent errors
"""

import pytest

from conftest import SAMPLE_USE_CASES, ScriptedGateway

from catalyst.ai.agents import build_agents
from catalyst.ai.agents.challenge import ChallengeAgent
from catalyst.ai.agents.lineage import LineageAgent
from catalyst.ai.agents.prioritization import PrioritizationAgent, rank_use_cases
from catalyst.ai.agents.reconciliation import NOT_IMPORTED, ReconciliationAgent
from catalyst.ai.agents.survey import SurveyGenerationAgent
from catalyst.ai.agents.synthesis import NO_INSIGHTS_FALLBACK, SynthesisAgent
from catalyst.ai.agents.validation import NO_SURVEY_FALLBACK, ValidationAgent
from catalyst.ai.agents.workflow import WorkflowAgent
from catalyst.ai.context import (
    AGENT_NAMES,
    CHALLENGE_AGENT,
    PRIORITIZATION_AGENT,
    AgentOutput,
    WorkshopContext,
)
from catalyst.ai.prompt_registry import PromptRegistry
from catalyst.core.exceptions import AgentResponseError, AgentSchemaError

SCORES = {"skills": 3.0, "data": 2.5, "infrastructure": 3.5, "governance": 2.0, "overall": 2.8}


def _context(**overrides):
    values = {
        "workshop_id": "ws-1",
        "company_name": "Acme Corp",
        "industry": "Manufacturing",
        "reconciled_use_cases": SAMPLE_USE_CASES,
    }
    values.update(overrides)
    return WorkshopContext(**values)


def _agent(cls, replies=None):
    gateway = ScriptedGateway(replies)
    return cls(gateway, prompt_registry=PromptRegistry(prompts_dir="")), gateway


def _priorities_output(rows):
    return AgentOutput(agent_name=PRIORITIZATION_AGENT, structured_data={"priorities": rows})


# ═════════════════════════════════════════════════════════════════════════════
# Registry
# ═════════════════════════════════════════════════════════════════════════════


def test_build_agents_registers_every_agent_by_name():
    agents = build_agents(ScriptedGateway(), prompt_registry=PromptRegistry(prompts_dir=""))
    assert tuple(agents) == AGENT_NAMES
    assert all(agent.name == name for name, agent in agents.items())


# ═════════════════════════════════════════════════════════════════════════════
# Reconciliation
# ═════════════════════════════════════════════════════════════════════════════


RESEARCH_PAYLOAD = {
    "companyName": "Acme Corp",
    "analysisData": {
        "companyOverview": "Mid-size discrete manufacturer",
        "steps": [
            {"step": 4, "data": [{"id": "R-1", "title": "Automated Invoice Processing",
                                  "businessFunction": "Finance"}]},
            {"step": 5, "data": [{"useCaseId": "R-1", "totalAnnualValue": 1200000}]},
        ],
    },
}
COGNITION_PAYLOAD = {
    "companyName": "Acme Corp",
    "useCases": [{"id": "C-1", "title": "Invoice Processing Automation", "agenticPattern": "tool-user"}],
    "cognitiveNodes": [{"id": "N-1", "label": "Document Understanding"}],
    "executiveSummary": "Finance back office is the strongest candidate.",
}
MERGED_REPLY = {
    "reconciledUseCases": [{
        "id": "UC-001", "title": "Invoice Processing Automation",
        "businessFunction": "Finance", "totalAnnualValue": 1200000,
        "agenticPattern": "tool-user", "sourceIds": ["R-1", "C-1"],
    }],
    "matchedCount": 1,
    "researchOnlyCount": 0,
    "cognitionOnlyCount": 0,
    "conflicts": [],
}


class TestReconciliationAgent:
    def test_similar_titles_merge_into_one_use_case(self):
        agent, gateway = _agent(ReconciliationAgent, {"reconciliation": MERGED_REPLY})
        ctx = _context(reconciled_use_cases=(), research_app_data=RESEARCH_PAYLOAD,
                       cognition_two_data=COGNITION_PAYLOAD)

        out = agent.execute(ctx)

        prompt = gateway.user_prompt("reconciliation")
        assert "Automated Invoice Processing" in prompt
        assert "Invoice Processing Automation" in prompt
        assert "Mid-size discrete manufacturer" in prompt
        assert len(out.structured_data["reconciledUseCases"]) == 1
        assert out.structured_data["matchedCount"] == 1
        assert out.insights[0] == "Matched 1 use cases across both sources"
        assert out.confidence == 0.85

    def test_extra_use_case_fields_are_kept(self):
        agent, _ = _agent(ReconciliationAgent, {"reconciliation": MERGED_REPLY})
        out = agent.execute(_context(research_app_data=RESEARCH_PAYLOAD))
        assert out.structured_data["reconciledUseCases"][0]["sourceIds"] == ["R-1", "C-1"]
        assert out.structured_data["reconciledUseCases"][0]["threeYearNPV"] is None

    def test_missing_sources_are_marked_not_imported(self):
        agent, gateway = _agent(ReconciliationAgent)
        agent.execute(_context(reconciled_use_cases=(), cognition_two_data=COGNITION_PAYLOAD))
        assert f"RESEARCHAPP DATA:\n{NOT_IMPORTED}" in gateway.user_prompt("reconciliation")

    def test_analysis_data_as_json_string_is_decoded(self):
        import json
        payload = dict(RESEARCH_PAYLOAD, analysisData=json.dumps(RESEARCH_PAYLOAD["analysisData"]))
        agent, gateway = _agent(ReconciliationAgent)
        agent.execute(_context(research_app_data=payload))
        assert "Automated Invoice Processing" in gateway.user_prompt("reconciliation")


# ═════════════════════════════════════════════════════════════════════════════
# Survey
# ═════════════════════════════════════════════════════════════════════════════


def test_survey_total_counts_every_question():
    reply = {
        "dimensions": [
            {"dimension": "skills", "questions": [
                {"id": "S-1", "question": "Do you have ML engineers?"},
                {"id": "S-2", "question": "Is there an AI training plan?"},
            ]},
            {"dimension": "data", "questions": [{"id": "D-1", "question": "Is invoice data digitised?"}]},
        ],
        "totalQuestions": 40,
    }
    agent, _ = _agent(SurveyGenerationAgent, {"survey_generation": reply})

    out = agent.execute(_context())

    assert out.structured_data["totalQuestions"] == 3
    assert "Skills: 2 questions" in out.insights
    assert "Governance: 0 questions" in out.insights
    assert out.reasoning.startswith("Questions generated")


# ═════════════════════════════════════════════════════════════════════════════
# Challenge
# ═════════════════════════════════════════════════════════════════════════════


class TestChallengeAgent:
    def test_totals_follow_the_rows(self):
        reply = {
            "challenges": [
                {"useCaseId": "UC-001", "challengeType": "benefit", "severity": "high"},
                {"useCaseId": "UC-002", "challengeType": "kpi", "severity": "low"},
            ],
            "totalChallenges": 99,
            "highSeverityCount": 0,
        }
        agent, _ = _agent(ChallengeAgent, {"assumption_challenge": reply})

        out = agent.execute(_context())

        assert out.structured_data["totalChallenges"] == 2
        assert out.structured_data["highSeverityCount"] == 1
        assert out.insights[:2] == ["Found 2 challenges across 2 use cases", "1 high-severity issues"]

    def test_without_survey_challenges_readiness_harder(self):
        agent, gateway = _agent(ChallengeAgent)
        agent.execute(_context())
        assert "Challenge data readiness assumptions more aggressively" in gateway.user_prompt("assumption_challenge")

    def test_unknown_severity_is_a_schema_error(self):
        reply = {"challenges": [{"useCaseId": "UC-001", "severity": "catastrophic"}]}
        agent, _ = _agent(ChallengeAgent, {"assumption_challenge": reply})
        with pytest.raises(AgentSchemaError):
            agent.execute(_context())


# ═════════════════════════════════════════════════════════════════════════════
# Validation
# ═════════════════════════════════════════════════════════════════════════════


class TestValidationAgent:
    @pytest.mark.parametrize("scores", [None, {}])
    def test_no_survey_uses_moderate_discount_fallback(self, scores):
        agent, gateway = _agent(ValidationAgent)

        out = agent.execute(_context(survey_dimension_scores=scores))

        assert NO_SURVEY_FALLBACK in gateway.user_prompt("benefit_validation")
        assert out.structured_data["validations"]

    def test_survey_scores_are_sent_when_present(self):
        agent, gateway = _agent(ValidationAgent)
        agent.execute(_context(survey_dimension_scores=SCORES))
        prompt = gateway.user_prompt("benefit_validation")
        assert NO_SURVEY_FALLBACK not in prompt
        assert '"governance": 2.0' in prompt

    def test_totals_computed_when_model_omits_them(self):
        agent, _ = _agent(ValidationAgent)

        out = agent.execute(_context())

        data = out.structured_data
        assert data["totalOriginalValue"] == 1200000
        assert data["totalValidatedValue"] == 900000
        assert data["averageConfidence"] == 75
        assert out.confidence == pytest.approx(0.75)
        assert "Overall adjustment: 25% reduction" in out.insights
        assert "Validated portfolio value: $0.9M" in out.insights

    def test_challenge_findings_are_forwarded(self):
        challenge = AgentOutput(agent_name=CHALLENGE_AGENT, insights=["Invoice savings look 30% high"])
        agent, gateway = _agent(ValidationAgent)
        agent.execute(_context(previous_agent_outputs={CHALLENGE_AGENT: challenge}))
        assert "Invoice savings look 30% high" in gateway.user_prompt("benefit_validation")


# ═════════════════════════════════════════════════════════════════════════════
# Prioritization
# ═════════════════════════════════════════════════════════════════════════════


class TestPrioritizationAgent:
    def test_quadrant_follows_scores_not_model_label(self):
        reply = {"priorities": [
            {"useCaseId": "UC-001", "impactScore": 6, "feasibilityScore": 6, "quadrant": "deprioritize"},
            {"useCaseId": "UC-002", "impactScore": 5.999, "feasibilityScore": 6, "quadrant": "quick_win"},
        ]}
        agent, _ = _agent(PrioritizationAgent, {"prioritization": reply})

        out = agent.execute(_context())

        quadrants = [p["quadrant"] for p in out.structured_data["priorities"]]
        assert quadrants == ["quick_win", "fill_in"]
        assert out.structured_data["quickWinCount"] == 1
        assert out.structured_data["strategicCount"] == 0
        assert "1 Fill-Ins (easy but lower value)" in out.insights

    def test_rank_use_cases_orders_by_quadrant_then_score(self):
        use_cases = SAMPLE_USE_CASES + [{"id": "UC-003", "title": "Contract review"}]
        ctx = _context(
            reconciled_use_cases=use_cases,
            previous_agent_outputs={PRIORITIZATION_AGENT: _priorities_output([
                {"useCaseId": "UC-001", "impactScore": 7, "feasibilityScore": 4, "quadrant": "strategic"},
                {"useCaseId": "UC-002", "impactScore": 6, "feasibilityScore": 6, "quadrant": "quick_win"},
                {"useCaseId": "UC-003", "impactScore": 9, "feasibilityScore": 9, "quadrant": "quick_win"},
            ])},
        )
        assert [uc["id"] for uc in rank_use_cases(ctx)] == ["UC-003", "UC-002", "UC-001"]

    def test_rank_use_cases_without_priorities_keeps_order(self):
        assert [uc["id"] for uc in rank_use_cases(_context())] == ["UC-001", "UC-002"]


# ═════════════════════════════════════════════════════════════════════════════
# Workflow / Lineage / Synthesis
# ═════════════════════════════════════════════════════════════════════════════


def test_workflow_maps_at_most_six_use_cases():
    use_cases = [{"id": f"UC-{i:03d}", "title": f"Use case {i}"} for i in range(1, 9)]
    agent, gateway = _agent(WorkflowAgent)

    out = agent.execute(_context(reconciled_use_cases=use_cases))

    prompt = gateway.user_prompt("workflow_visualization")
    assert "UC-006" in prompt
    assert "UC-007" not in prompt
    assert out.insights == ["Generated 1 workflow maps", "1 workflows with bottlenecks identified"]


def test_lineage_counts_distinct_sources():
    reply = {"lineages": [
        {"useCaseId": "UC-001", "dataSources": ["ERP", "Email inbox"]},
        {"useCaseId": "UC-002", "dataSources": ["ERP", "Data warehouse"]},
    ]}
    agent, _ = _agent(LineageAgent, {"data_lineage": reply})

    out = agent.execute(_context())

    assert out.insights == ["Mapped data lineage for 2 use cases", "Total data sources identified: 3"]


class TestSynthesisAgent:
    def test_previous_insights_in_pipeline_order(self):
        outputs = {
            PRIORITIZATION_AGENT: _priorities_output(
                [{"useCaseId": "UC-001", "impactScore": 8, "feasibilityScore": 7, "quadrant": "quick_win"}],
            ),
            CHALLENGE_AGENT: AgentOutput(agent_name=CHALLENGE_AGENT, insights=["2 challenges"]),
        }
        agent, gateway = _agent(SynthesisAgent)

        out = agent.execute(_context(previous_agent_outputs=outputs))

        prompt = gateway.user_prompt("workshop_synthesis")
        assert prompt.index(CHALLENGE_AGENT) < prompt.index(PRIORITIZATION_AGENT)
        assert '"quadrant": "quick_win"' in prompt
        assert "USE CASES (2 total)" in prompt
        assert "Estimated portfolio value: $0.9M" in out.insights

    def test_without_previous_outputs(self):
        agent, gateway = _agent(SynthesisAgent)
        agent.execute(_context())
        assert NO_INSIGHTS_FALLBACK in gateway.user_prompt("workshop_synthesis")


# ═════════════════════════════════════════════════════════════════════════════
# Failure modes
# ═════════════════════════════════════════════════════════════════════════════


def test_fenced_reply_is_accepted():
    agent, _ = _agent(LineageAgent, {"data_lineage": '```json\n{"lineages": []}\n```'})
    out = agent.execute(_context())
    assert out.structured_data == {"lineages": []}


def test_prose_reply_raises_response_error():
    agent, _ = _agent(LineageAgent, {"data_lineage": "I could not map the lineage."})
    with pytest.raises(AgentResponseError):
        agent.execute(_context())


def test_gateway_exception_propagates_unchanged():
    agent, _ = _agent(SurveyGenerationAgent, {"survey_generation": TimeoutError("model timed out")})
    with pytest.raises(TimeoutError, match="model timed out"):
        agent.execute(_context())
