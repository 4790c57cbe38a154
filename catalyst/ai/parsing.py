"""
AI Catalyst Workshop
Model response parsing shared by all agents.

Models often wrap JSON in a markdown fence; the fence is removed before
decoding and the decoded object is then checked against the agent's
pydantic schema.
"""

import json
import logging

import pydantic

from catalyst.core.exceptions import AgentResponseError, AgentSchemaError

logger = logging.getLogger(__name__)


def strip_code_fence(text: str) -> str:
    """Trim whitespace and one surrounding ```json / ``` fence."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[len("```"):]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-len("```")]
    return cleaned.strip()


def parse_model_json(text, agent: str) -> dict:
    """Decode a model reply into a JSON object or raise AgentResponseError."""
    if not isinstance(text, str):
        raise AgentResponseError(agent, f"Unexpected response type from {agent}")

    cleaned = strip_code_fence(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("%s returned non-JSON text: %s", agent, exc, extra={"agent": agent})
        raise AgentResponseError(agent, f"{agent} returned invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise AgentResponseError(
            agent, f"{agent} returned a JSON {type(data).__name__}, expected an object",
        )
    return data


def validate_payload(data: dict, model: type[pydantic.BaseModel], agent: str) -> pydantic.BaseModel:
    """Validate decoded JSON against the agent's schema."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        ]
        logger.warning("%s schema mismatch: %s", agent, errors[:5], extra={"agent": agent})
        raise AgentSchemaError(agent, errors) from exc
