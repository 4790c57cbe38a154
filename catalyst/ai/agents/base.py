"""
AI Catalyst Workshop
Prompted agent base class.

Every workshop agent follows the same pipeline:
    1. Build prompt variables from the WorkshopContext
    2. Render the agent's prompt template
    3. One gateway call (no retry at this level)
    4. Strip the code fence, decode JSON, validate against the agent schema
    5. Summarise into insights / structuredData / confidence / reasoning

Agents never touch the database; the caller decides what to persist.
"""

import json
import logging
import time

from catalyst.ai.context import AgentOutput, WorkshopContext
from catalyst.ai.parsing import parse_model_json, validate_payload
from catalyst.ai.prompt_registry import PromptRegistry

logger = logging.getLogger(__name__)


def to_json(value) -> str:
    return json.dumps(value, indent=2, default=str)


def pick(use_case: dict, keys: tuple) -> dict:
    """Project a use case onto the fields one agent needs."""
    return {key: use_case.get(key) for key in keys}


def millions(value) -> str:
    return f"${(value or 0) / 1_000_000:.1f}M"


def survey_block(context: WorkshopContext, fallback: str) -> str:
    if context.survey_dimension_scores:
        return to_json(dict(context.survey_dimension_scores))
    return fallback


def insights_block(context: WorkshopContext, agent_name: str, heading: str) -> str:
    """Previous agent insights as a prompt section, or empty when that agent has not run."""
    output = context.output_of(agent_name)
    if output is None:
        return ""
    return f"{heading}:\n{to_json(list(output.insights))}"


class PromptedAgent:
    """
    Shared execute() for the workshop agents.

    Subclasses set the class attributes and implement build_variables()
    and summarize().
    """

    name = ""
    role = ""
    goal = ""
    prompt_name = ""
    schema = None
    max_tokens = 6144

    def __init__(self, gateway, prompt_registry: PromptRegistry | None = None, model: str | None = None):
        self.gateway = gateway
        self.prompt_registry = prompt_registry or PromptRegistry()
        self.model = model

    def build_variables(self, context: WorkshopContext) -> dict:
        raise NotImplementedError

    def summarize(self, payload, context: WorkshopContext) -> tuple[list[str], dict, float, str]:
        """Return (insights, structured_data, confidence, reasoning)."""
        raise NotImplementedError

    def execute(self, context: WorkshopContext) -> AgentOutput:
        start = time.monotonic()
        variables = {
            "company_name": context.company_name,
            "industry": context.industry or "unspecified industry",
        }
        variables.update(self.build_variables(context))
        messages = self.prompt_registry.render(self.prompt_name, **variables)

        result = self.gateway.chat(
            messages,
            self.model,
            purpose=self.prompt_name,
            workshop_id=context.workshop_id,
            max_tokens=self.max_tokens,
        )

        data = parse_model_json(result.get("content"), self.name)
        payload = validate_payload(data, self.schema, self.name)
        insights, structured, confidence, reasoning = self.summarize(payload, context)

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "%s produced %d insights in %dms", self.name, len(insights), duration_ms,
            extra={"workshop_id": context.workshop_id, "agent": self.name},
        )
        return AgentOutput(
            agent_name=self.name,
            insights=[text for text in insights if text],
            structured_data=structured,
            confidence=confidence,
            reasoning=reasoning,
            duration_ms=duration_ms,
        )
