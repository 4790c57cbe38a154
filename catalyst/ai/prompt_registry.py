"""
AI Catalyst Workshop
Prompt Registry.

Prompt template management with:
    - Built-in templates for the eight workshop agents
    - Optional YAML overrides loaded from PROMPTS_DIR
    - {{variable}} rendering
    - Version tracking

Usage:
    from catalyst.ai.prompt_registry import PromptRegistry
    registry = PromptRegistry()
    messages = registry.render("prioritization", company_name="Acme",
                               industry="Retail", use_cases="[...]")
"""

import logging
import os
import re
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_PROMPTS_DIR = os.getenv("PROMPTS_DIR", "")


class PromptTemplate:
    """A single prompt template with metadata."""

    def __init__(self, name: str, version: str, system: str, user: str,
                 description: str = "", metadata: dict | None = None):
        self.name = name
        self.version = version
        self.system = system
        self.user = user
        self.description = description
        self.metadata = metadata or {}

    def render(self, **variables) -> list[dict]:
        """
        Render template with variables, returning chat messages.

        Variables are replaced using {{variable_name}} syntax. Unknown
        placeholders are left in place.

        Returns:
            List of message dicts: [{"role": "system", "content": "..."}, ...]
        """
        system_rendered = self._substitute(self.system, variables)
        user_rendered = self._substitute(self.user, variables)

        messages = []
        if system_rendered.strip():
            messages.append({"role": "system", "content": system_rendered})
        if user_rendered.strip():
            messages.append({"role": "user", "content": user_rendered})
        return messages

    @staticmethod
    def _substitute(template: str, variables: dict) -> str:
        """Replace {{var}} placeholders with values."""
        def replacer(match):
            key = match.group(1).strip()
            return str(variables.get(key, f"{{{{{key}}}}}"))
        return re.sub(r'\{\{(\s*\w+\s*)\}\}', replacer, template)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "system_preview": self.system[:200],
            "user_preview": self.user[:200],
        }


class PromptRegistry:
    """
    Registry for loading and managing prompt templates.

    Built-in templates are always registered; YAML files in the prompts
    directory override them by (name, version).
    """

    def __init__(self, prompts_dir: str | None = None):
        self._prompts_dir = prompts_dir if prompts_dir is not None else _PROMPTS_DIR
        self._templates: dict[str, dict[str, PromptTemplate]] = {}  # name → {version → template}
        self._load_defaults()
        self._load_from_dir()

    def _load_defaults(self):
        """Register built-in default prompt templates."""
        for tpl in _DEFAULT_TEMPLATES:
            self._register(tpl)

    def _load_from_dir(self):
        """Load prompt templates from YAML files."""
        if not self._prompts_dir:
            return
        prompts_path = Path(self._prompts_dir)
        if not prompts_path.exists():
            logger.info("Prompts directory not found: %s. Using defaults only.", self._prompts_dir)
            return

        for yaml_file in sorted(prompts_path.glob("*.yaml")):
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                logger.error("Failed to load prompt %s: %s", yaml_file.name, e)
                continue
            if not data or not isinstance(data, dict):
                continue

            tpl = PromptTemplate(
                name=data.get("name", yaml_file.stem),
                version=data.get("version", "v1"),
                system=data.get("system", ""),
                user=data.get("user", ""),
                description=data.get("description", ""),
                metadata=data.get("metadata", {}),
            )
            self._register(tpl)
            logger.info("Loaded prompt template: %s (%s) from %s",
                        tpl.name, tpl.version, yaml_file.name)

    def _register(self, template: PromptTemplate):
        """Add template to registry."""
        if template.name not in self._templates:
            self._templates[template.name] = {}
        self._templates[template.name][template.version] = template

    def get(self, name: str, version: str = "v1") -> PromptTemplate | None:
        """Get a prompt template by name and version."""
        versions = self._templates.get(name, {})
        return versions.get(version)

    def render(self, name: str, version: str = "v1", **variables) -> list[dict]:
        """
        Render a prompt template with variables.

        Raises:
            KeyError: If template not found.
        """
        tpl = self.get(name, version)
        if not tpl:
            raise KeyError(f"Prompt template not found: {name} {version}")
        return tpl.render(**variables)

    def list_templates(self) -> list[dict]:
        """List all registered templates."""
        result = []
        for versions in self._templates.values():
            for tpl in versions.values():
                result.append(tpl.to_dict())
        return result

    def get_versions(self, name: str) -> list[str]:
        """Get available versions for a template."""
        return list(self._templates.get(name, {}).keys())


# ── Built-in Default Templates ────────────────────────────────────────────────

_JSON_ONLY = "Respond with a single JSON object and nothing else."

_DEFAULT_TEMPLATES = [
    PromptTemplate(
        name="reconciliation",
        version="v1",
        description="Merge ResearchApp and CognitionTwo use cases into one list",
        system=(
            "You reconcile AI use cases coming from two analysis tools into one unified list.\n\n"
            "ResearchApp contributes the financial view: business function, friction point, "
            "AI primitives, revenue / cost / cash-flow / risk benefits in dollars, totalAnnualValue, "
            "threeYearNPV, priorityScore, tokenCost, dataReadiness, effortScore, timeToValue.\n"
            "CognitionTwo contributes the cognitive view: agentic pattern (drafter-critic, "
            "reasoning-engine, orchestrator, tool-user), horizon H1/H2/H3, businessValue and "
            "implementationRisk on 1-10, trustTaxPercent, lcoai, legacy process details and "
            "agentic transformation details.\n\n"
            "Rules:\n"
            "1. Treat two use cases as the same when title and description are more than 70% similar.\n"
            "2. Matched use cases keep every field from both sources.\n"
            "3. Unmatched use cases are kept with whatever fields their source provides.\n"
            "4. Record a conflict when both sources disagree on the same field.\n"
            "5. Normalise business function names and AI primitive labels.\n"
            "6. Assign each use case a unique id of the form UC-001, UC-002, ...\n\n"
            "Output shape:\n"
            '{"reconciledUseCases": [{"id": "UC-001", "title": "...", "description": "...", '
            '"businessFunction": "...", "aiPrimitives": [], "totalAnnualValue": 0, '
            '"threeYearNPV": 0, "dataReadiness": 0, "effortScore": 0, "agenticPattern": "...", '
            '"horizon": "H1", "...": "other source fields"}], "matchedCount": 0, '
            '"researchOnlyCount": 0, "cognitionOnlyCount": 0, "conflicts": [{"useCaseId": "UC-001", '
            '"field": "...", "researchValue": null, "cognitionValue": null, "resolvedValue": null}]}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Reconcile the use cases for {{company_name}} ({{industry}}).\n\n"
            "RESEARCHAPP DATA:\n{{research_data}}\n\n"
            "COGNITIONTWO DATA:\n{{cognition_data}}\n\n"
            "Match on title and description similarity and return the unified list."
        ),
    ),
    PromptTemplate(
        name="survey_generation",
        version="v1",
        description="Generate a four-dimension AI readiness survey tailored to the use cases",
        system=(
            "You design AI readiness surveys for enterprise workshops. Every survey covers four "
            "dimensions: skills, data, infrastructure and governance.\n\n"
            "Write 4-5 questions per dimension that are specific to the client's use cases and "
            "industry. Each question names a category inside its dimension, lists the use case "
            "ids it assesses, gives a hint describing what good looks like, and carries a weight "
            "(1 = standard, 2 = critical for these use cases).\n\n"
            "Respondents rate each question on a maturity scale: 1 Ad hoc, 2 Initial, "
            "3 Defined, 4 Managed, 5 Optimized.\n\n"
            "Output shape:\n"
            '{"dimensions": [{"dimension": "skills", "questions": [{"id": "S-001", '
            '"category": "...", "question": "...", "hint": "...", "weight": 1, '
            '"useCaseIds": ["UC-001"]}]}], "totalQuestions": 0, "rationale": "..."}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Build the readiness survey for {{company_name}} ({{industry}}).\n\n"
            "USE CASES:\n{{use_cases}}\n\n"
            "Tie questions to the primitives, agentic patterns and horizons above. "
            "Aim for 16-20 questions in total."
        ),
    ),
    PromptTemplate(
        name="assumption_challenge",
        version="v1",
        description="Stress-test benefit claims, KPIs and timelines",
        system=(
            "You are an evidence-based skeptic reviewing an AI use case portfolio.\n\n"
            "For each use case examine benefit claims against industry benchmarks, adoption "
            "timelines and time-to-value, data readiness versus what the use case needs, "
            "understated friction, over-engineered agentic patterns and optimistic KPIs.\n\n"
            "Each challenge names the field, the original value, a proposed value or range, "
            "the evidence, a challengeType (assumption, kpi, friction or benefit) and a "
            "severity (low, medium or high).\n\n"
            "Output shape:\n"
            '{"challenges": [{"useCaseId": "UC-001", "challengeType": "benefit", '
            '"fieldName": "costBenefit", "originalValue": 0, "challengedValue": 0, '
            '"evidence": "...", "severity": "high"}], "totalChallenges": 0, '
            '"highSeverityCount": 0, "summary": "..."}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Challenge the assumptions behind these use cases for {{company_name}} ({{industry}}).\n\n"
            "USE CASES:\n{{use_cases}}\n\n"
            "{{survey_scores}}\n\n"
            "Focus on challenges that would materially change the business case."
        ),
    ),
    PromptTemplate(
        name="benefit_validation",
        version="v1",
        description="Risk-adjust projected benefits using readiness-based discounts",
        system=(
            "You validate AI benefit projections against published ROI data and the client's "
            "readiness.\n\n"
            "Discount bands by readiness score:\n"
            "- 1 Ad hoc: 60-70%\n"
            "- 2 Initial: 40-50%\n"
            "- 3 Defined: 20-30%\n"
            "- 4 Managed: 5-15%\n"
            "- 5 Optimized: 0-5%\n\n"
            "Account for industry adoption curves, flag benefits with no supporting evidence, "
            "and give each validation a confidenceLevel between 0 and 100.\n\n"
            "Output shape:\n"
            '{"validations": [{"useCaseId": "UC-001", "originalBenefit": 0, '
            '"validatedBenefit": 0, "confidenceLevel": 75, "adjustmentReason": "...", '
            '"benchmarkSource": "...", "riskFlags": []}], "totalOriginalValue": 0, '
            '"totalValidatedValue": 0, "averageConfidence": 0, "summary": "..."}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Validate the projected benefits for {{company_name}} ({{industry}}).\n\n"
            "USE CASES:\n{{use_cases}}\n\n"
            "SURVEY READINESS SCORES:\n{{survey_scores}}\n\n"
            "{{challenge_findings}}\n\n"
            "Check each totalAnnualValue against benchmarks and apply the discount band."
        ),
    ),
    PromptTemplate(
        name="prioritization",
        version="v1",
        description="Score impact and feasibility for the 2x2 matrix",
        system=(
            "You place AI use cases on a 2x2 matrix.\n\n"
            "Impact (0-10): total annual value 30%, strategic alignment 20%, scope of "
            "improvement 20%, benefit mix 15%, three-year NPV 15%.\n"
            "Feasibility (0-10): survey dimensions mapped to the use case's needs 40%, data "
            "readiness 20%, implementation complexity 20%, change management 10%, "
            "infrastructure alignment 10%.\n\n"
            "Quadrants: quick_win (impact >= 6, feasibility >= 6), strategic (impact >= 6, "
            "feasibility < 6), fill_in (impact < 6, feasibility >= 6), deprioritize (both < 6).\n\n"
            "Output shape:\n"
            '{"priorities": [{"useCaseId": "UC-001", "useCaseTitle": "...", "impactScore": 7.5, '
            '"feasibilityScore": 8.2, "quadrant": "quick_win", "impactBreakdown": '
            '{"annualValueWeight": 0, "strategicAlignmentWeight": 0, "scopeWeight": 0, '
            '"benefitMixWeight": 0, "npvWeight": 0}, "feasibilityBreakdown": '
            '{"surveyScoreWeight": 0, "dataReadinessWeight": 0, "complexityWeight": 0, '
            '"changeManagementWeight": 0, "infraAlignmentWeight": 0}}], "quickWinCount": 0, '
            '"strategicCount": 0, "summary": "..."}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Score these use cases for {{company_name}} ({{industry}}).\n\n"
            "USE CASES:\n{{use_cases}}\n\n"
            "SURVEY READINESS SCORES:\n{{survey_scores}}\n\n"
            "{{validation_insights}}\n\n"
            "{{challenge_insights}}\n\n"
            "Apply the weighted model and map survey dimensions to each use case's requirements."
        ),
    ),
    PromptTemplate(
        name="workflow_visualization",
        version="v1",
        description="Current vs AI-enabled target state workflows",
        system=(
            "You draw current-state and AI-enabled target-state workflows for AI use cases.\n\n"
            "Current state: 6-8 steps with stepNumber, stepName, description, actor, duration, "
            "systems, isBottleneck, isFrictionPoint and painPoints.\n"
            "Target state: 6-10 steps with the same fields plus isAIEnabled, aiCapabilities, "
            "agentType and automationLevel (full, assisted, supervised or manual).\n"
            "Comparison metrics give before / after / improvement for time, cost, quality and "
            "throughput.\n\n"
            "Output shape:\n"
            '{"workflows": [{"useCaseId": "UC-001", "useCaseTitle": "...", '
            '"agenticPattern": "...", "patternRationale": "...", "currentStateWorkflow": [], '
            '"targetStateWorkflow": [], "comparisonMetrics": {"timeReduction": {"before": "", '
            '"after": "", "improvement": ""}, "costReduction": {}, "qualityImprovement": {}, '
            '"throughputIncrease": {}}}]}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Map workflows for these use cases at {{company_name}} ({{industry}}).\n\n"
            "USE CASES:\n{{use_cases}}\n\n"
            "Reuse the legacy process data where it is present."
        ),
    ),
    PromptTemplate(
        name="data_lineage",
        version="v1",
        description="Data sources, inputs, outputs and controls per use case",
        system=(
            "You map data lineage for AI use cases: data sources, inputs, outputs, "
            "explainability, observability and governance controls.\n\n"
            "Use the readiness scores to flag risks: a low data score means availability or "
            "quality risk, a low governance score means compliance and audit gaps, a low "
            "infrastructure score means scalability concerns.\n\n"
            "Output shape:\n"
            '{"lineages": [{"useCaseId": "UC-001", "dataSources": [], "inputs": [], '
            '"outputs": [], "explainability": "...", "observability": "...", '
            '"governance": "..."}]}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Map data lineage for these use cases at {{company_name}} ({{industry}}).\n\n"
            "USE CASES:\n{{use_cases}}\n\n"
            "SURVEY READINESS SCORES:\n{{survey_scores}}"
        ),
    ),
    PromptTemplate(
        name="workshop_synthesis",
        version="v1",
        description="Executive summary, roadmap and risk register from the whole workshop",
        system=(
            "You write the closing report of an AI readiness workshop from everything the "
            "earlier steps produced: reconciled use cases, readiness scores, challenges, "
            "validated benefits, the prioritisation matrix, workflows and data lineage.\n\n"
            "Deliver an executive summary of two or three paragraphs, five ranked "
            "recommendations, a 30/60/90 day roadmap, a risk register with likelihood, impact "
            "and mitigation, resource requirements, the risk-adjusted total estimated value and "
            "the quick wins to start immediately.\n\n"
            "Output shape:\n"
            '{"executiveSummary": "...", "topRecommendations": [], "implementationRoadmap": '
            '{"thirtyDay": [], "sixtyDay": [], "ninetyDay": []}, "riskRegister": [{"risk": "...", '
            '"likelihood": "medium", "impact": "high", "mitigation": "..."}], '
            '"resourceRequirements": [], "totalEstimatedValue": 0, '
            '"topQuickWins": ["UC-001: ..."]}\n\n'
            + _JSON_ONLY
        ),
        user=(
            "Synthesize the workshop for {{company_name}} ({{industry}}).\n\n"
            "USE CASES ({{use_case_count}} total):\n{{use_cases}}\n\n"
            "SURVEY READINESS SCORES:\n{{survey_scores}}\n\n"
            "PREVIOUS AGENT INSIGHTS:\n{{previous_insights}}\n\n"
            "Be specific to the company's industry and use cases."
        ),
    ),
]
