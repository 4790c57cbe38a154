"""
AI Catalyst Workshop
LLM Gateway.

Provider-agnostic LLM router with:
    - Multi-provider support (Anthropic Claude, OpenAI, Gemini, local stub)
    - Optional retry with exponential backoff (off by default)
    - Token tracking, cost and latency logging

Usage:
    from catalyst.ai.gateway import LLMGateway
    gw = LLMGateway()
    result = gw.chat(messages, purpose="prioritization", max_tokens=6144)
"""

import json
import logging
import os
import threading
import time
from abc import ABC, abstractmethod

from catalyst.core.exceptions import AgentResponseError

logger = logging.getLogger(__name__)


# Prices per 1M tokens (USD)
TOKEN_COSTS = {
    "claude-sonnet-4-5-20250929":  {"input": 3.00, "output": 15.00},
    "claude-3-5-haiku-20241022":   {"input": 1.00, "output": 5.00},
    "claude-3-5-sonnet-20241022":  {"input": 3.00, "output": 15.00},
    "gpt-4o-mini":                 {"input": 0.15, "output": 0.60},
    "gpt-4o":                      {"input": 2.50, "output": 10.00},
    # Google Gemini free tier
    "gemini-2.5-flash":            {"input": 0.00, "output": 0.00},
    "gemini-2.5-pro":              {"input": 0.00, "output": 0.00},
}


def calculate_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float:
    """Calculate USD cost for a given model + token counts."""
    costs = TOKEN_COSTS.get(model, {"input": 0.0, "output": 0.0})
    return (prompt_tokens * costs["input"] + completion_tokens * costs["output"]) / 1_000_000


# ── Provider Abstract Base ────────────────────────────────────────────────────

class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def chat(self, messages: list, model: str, **kwargs) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: List of {"role": "...", "content": "..."} dicts.
            model: Model identifier string.
            **kwargs: temperature, max_tokens, purpose.

        Returns:
            dict with keys: content, prompt_tokens, completion_tokens, model
        """
        ...


# ── Anthropic Provider ────────────────────────────────────────────────────────

class AnthropicProvider(LLMProvider):
    """Claude API (Anthropic) provider."""

    def __init__(self):
        self.api_key = os.getenv("ANTHROPIC_API_KEY", "")
        self.base_url = os.getenv("ANTHROPIC_BASE_URL") or None
        self._client = None

    def _get_client(self):
        if self._client is None:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def chat(self, messages: list, model: str = "claude-sonnet-4-5-20250929", **kwargs) -> dict:
        client = self._get_client()

        # Separate system message
        system_msg = ""
        chat_messages = []
        for m in messages:
            if m["role"] == "system":
                system_msg = m["content"]
            else:
                chat_messages.append(m)

        params = {
            "model": model,
            "messages": chat_messages,
            "max_tokens": kwargs.get("max_tokens", 4096),
        }
        if "temperature" in kwargs:
            params["temperature"] = kwargs["temperature"]
        if system_msg:
            params["system"] = system_msg

        response = client.messages.create(**params)

        block = response.content[0] if response.content else None
        if block is None or block.type != "text":
            purpose = kwargs.get("purpose") or "model"
            raise AgentResponseError(purpose, f"Unexpected response type from {purpose}")

        return {
            "content": block.text,
            "prompt_tokens": response.usage.input_tokens,
            "completion_tokens": response.usage.output_tokens,
            "model": model,
        }


# ── OpenAI Provider ───────────────────────────────────────────────────────────

class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider."""

    def __init__(self):
        self.api_key = os.getenv("OPENAI_API_KEY", "")
        self._client = None

    def _get_client(self):
        if self._client is None:
            import openai
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    def chat(self, messages: list, model: str = "gpt-4o-mini", **kwargs) -> dict:
        client = self._get_client()
        response = client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=kwargs.get("max_tokens", 4096),
            temperature=kwargs.get("temperature", 0.3),
        )
        choice = response.choices[0]
        return {
            "content": choice.message.content,
            "prompt_tokens": response.usage.prompt_tokens,
            "completion_tokens": response.usage.completion_tokens,
            "model": model,
        }


# ── Google Gemini Provider ───────────────────────────────────────────────────

class GeminiProvider(LLMProvider):
    """
    Google Gemini API provider.

    Environment:
        GEMINI_API_KEY
    """

    def __init__(self):
        self.api_key = os.getenv("GEMINI_API_KEY", "")
        self._client = None

    def _get_client(self):
        if self._client is None:
            from google import genai
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def chat(self, messages: list, model: str = "gemini-2.5-flash", **kwargs) -> dict:
        client = self._get_client()
        from google.genai import types

        # Separate system instruction from conversation messages
        system_parts = []
        contents = []
        for m in messages:
            if m["role"] == "system":
                system_parts.append(m["content"])
            else:
                # Gemini uses "user" and "model" roles
                role = "model" if m["role"] == "assistant" else "user"
                contents.append(
                    types.Content(role=role, parts=[types.Part(text=m["content"])])
                )

        config = types.GenerateContentConfig(
            temperature=kwargs.get("temperature", 0.3),
            max_output_tokens=kwargs.get("max_tokens", 4096),
            response_mime_type="application/json",
        )
        if system_parts:
            config.system_instruction = "\n\n".join(system_parts)

        response = client.models.generate_content(model=model, contents=contents, config=config)

        prompt_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
        completion_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

        return {
            "content": response.text or "",
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "model": model,
        }


# ── Local Stub Provider (for dev without API keys) ───────────────────────────

class LocalStubProvider(LLMProvider):
    """
    Local stub that returns deterministic, schema-valid JSON per agent purpose.
    No API key required.
    """

    def chat(self, messages: list, model: str = "local-stub", **kwargs) -> dict:
        user_msg = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_msg = m["content"]
                break

        content = json.dumps(self._generate_stub_response(kwargs.get("purpose", "")))
        return {
            "content": content,
            "prompt_tokens": len(user_msg.split()) * 2,  # rough estimate
            "completion_tokens": len(content.split()) * 2,
            "model": "local-stub",
        }

    @staticmethod
    def _generate_stub_response(purpose: str) -> dict:
        if purpose == "reconciliation":
            return {
                "reconciledUseCases": [
                    {"id": "UC-001", "title": "Invoice Processing Automation",
                     "businessFunction": "Finance", "aiPrimitives": ["Document Understanding"],
                     "totalAnnualValue": 1200000, "threeYearNPV": 2800000,
                     "dataReadiness": 3, "effortScore": 4, "agenticPattern": "tool-user",
                     "horizon": "H1"},
                    {"id": "UC-002", "title": "Demand Forecasting Copilot",
                     "businessFunction": "Supply Chain", "aiPrimitives": ["Prediction"],
                     "totalAnnualValue": 800000, "threeYearNPV": 1700000,
                     "dataReadiness": 2, "effortScore": 6, "agenticPattern": "reasoning-engine",
                     "horizon": "H2"},
                ],
                "matchedCount": 1,
                "researchOnlyCount": 1,
                "cognitionOnlyCount": 0,
                "conflicts": [],
            }
        if purpose == "survey_generation":
            return {
                "dimensions": [
                    {"dimension": dim, "questions": [
                        {"id": f"{dim[0].upper()}-001", "category": dim.title(),
                         "question": f"How mature is your {dim} capability for the identified use cases?",
                         "hint": "Look for documented, measured practices.", "weight": 1,
                         "useCaseIds": ["UC-001"]},
                    ]}
                    for dim in ("skills", "data", "infrastructure", "governance")
                ],
                "totalQuestions": 4,
                "rationale": "Stub survey, one question per dimension.",
            }
        if purpose == "assumption_challenge":
            return {
                "challenges": [
                    {"useCaseId": "UC-001", "challengeType": "benefit",
                     "fieldName": "costBenefit", "originalValue": 500000,
                     "challengedValue": 350000,
                     "evidence": "Benchmarks for document automation show 30-40% savings.",
                     "severity": "medium"},
                ],
                "summary": "Cost savings appear optimistic.",
            }
        if purpose == "benefit_validation":
            return {
                "validations": [
                    {"useCaseId": "UC-001", "originalBenefit": 1200000,
                     "validatedBenefit": 900000, "confidenceLevel": 75,
                     "adjustmentReason": "Moderate readiness discount applied.",
                     "benchmarkSource": "Industry automation surveys", "riskFlags": []},
                ],
                "summary": "Portfolio value adjusted for readiness.",
            }
        if purpose == "prioritization":
            return {
                "priorities": [
                    {"useCaseId": "UC-001", "useCaseTitle": "Invoice Processing Automation",
                     "impactScore": 7.5, "feasibilityScore": 6.5, "quadrant": "quick_win"},
                    {"useCaseId": "UC-002", "useCaseTitle": "Demand Forecasting Copilot",
                     "impactScore": 6.8, "feasibilityScore": 4.2, "quadrant": "strategic"},
                ],
                "summary": "One quick win, one strategic bet.",
            }
        if purpose == "workflow_visualization":
            return {
                "workflows": [
                    {"useCaseId": "UC-001", "useCaseTitle": "Invoice Processing Automation",
                     "agenticPattern": "tool-user", "patternRationale": "Structured extraction",
                     "currentStateWorkflow": [
                         {"stepNumber": 1, "stepName": "Receive invoice", "actor": "human",
                          "duration": "15 min", "isBottleneck": True},
                     ],
                     "targetStateWorkflow": [
                         {"stepNumber": 1, "stepName": "Auto-capture invoice", "actor": "ai_agent",
                          "duration": "1 min", "isAIEnabled": True, "automationLevel": "full"},
                     ]},
                ],
            }
        if purpose == "data_lineage":
            return {
                "lineages": [
                    {"useCaseId": "UC-001", "dataSources": ["ERP", "Email inbox"],
                     "inputs": ["Invoice PDFs"], "outputs": ["Posted documents"],
                     "explainability": "Field-level extraction confidence.",
                     "observability": "Extraction accuracy dashboard.",
                     "governance": "Human approval above threshold."},
                ],
            }
        if purpose == "workshop_synthesis":
            return {
                "executiveSummary": "Start with invoice automation and build data foundations.",
                "topRecommendations": ["Launch invoice automation pilot"],
                "implementationRoadmap": {
                    "thirtyDay": ["Pilot scope"], "sixtyDay": ["Scale pilot"],
                    "ninetyDay": ["Measure ROI"],
                },
                "riskRegister": [
                    {"risk": "Data quality", "likelihood": "medium", "impact": "high",
                     "mitigation": "Data cleansing sprint"},
                ],
                "resourceRequirements": ["ML engineer"],
                "totalEstimatedValue": 900000,
                "topQuickWins": ["UC-001: Invoice Processing Automation"],
            }
        return {"summary": "Local stub response", "purpose": purpose}


# ── LLM Gateway (Router) ─────────────────────────────────────────────────────

class LLMGateway:
    """
    Provider-agnostic LLM router.

    Routes model names to the right provider, logs tokens, cost and latency
    for every call, and retries only when asked to.
    """

    # Model → Provider mapping
    PROVIDER_MAP = {
        # Anthropic
        "claude-sonnet-4-5-20250929": "anthropic",
        "claude-3-5-haiku-20241022": "anthropic",
        "claude-3-5-sonnet-20241022": "anthropic",
        # OpenAI
        "gpt-4o-mini": "openai",
        "gpt-4o": "openai",
        # Google Gemini
        "gemini-2.5-flash": "gemini",
        "gemini-2.5-pro": "gemini",
        # Local stub (dev/test)
        "local-stub": "local",
    }

    DEFAULT_CHAT_MODEL = os.getenv("LLM_DEFAULT_CHAT_MODEL", "claude-sonnet-4-5-20250929")
    DEFAULT_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "1"))

    def __init__(self, app=None):
        self._providers = {}
        self.default_model = self.DEFAULT_CHAT_MODEL
        self.max_retries = self.DEFAULT_MAX_RETRIES
        if app is not None:
            self.default_model = app.config.get("LLM_DEFAULT_CHAT_MODEL", self.default_model)
            self.max_retries = app.config.get("LLM_MAX_RETRIES", self.max_retries)
        self._init_providers()

    def _init_providers(self):
        """Initialize available providers based on environment."""
        # Always register local stub
        self._providers["local"] = LocalStubProvider()

        # Register real providers if API keys present
        if os.getenv("ANTHROPIC_API_KEY"):
            self._providers["anthropic"] = AnthropicProvider()
        if os.getenv("OPENAI_API_KEY"):
            self._providers["openai"] = OpenAIProvider()
        if os.getenv("GEMINI_API_KEY"):
            self._providers["gemini"] = GeminiProvider()

    def _get_provider(self, model: str) -> tuple[LLMProvider, str]:
        """
        Resolve model to provider. Falls back to local stub if real provider unavailable.
        Returns (provider, provider_name).
        """
        provider_name = self.PROVIDER_MAP.get(model, "local")

        if provider_name in self._providers:
            return self._providers[provider_name], provider_name

        logger.warning(
            "Provider '%s' not available (no API key?). Falling back to local stub for model '%s'.",
            provider_name, model,
        )
        return self._providers["local"], "local"

    def chat(
        self,
        messages: list,
        model: str | None = None,
        *,
        purpose: str = "",
        workshop_id: str | None = None,
        max_retries: int | None = None,
        **kwargs,
    ) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: Chat messages.
            model: Model identifier (defaults to LLM_DEFAULT_CHAT_MODEL).
            purpose: Agent purpose key (e.g. "prioritization").
            workshop_id: Workshop the call belongs to, for log correlation.
            max_retries: Total attempts; defaults to LLM_MAX_RETRIES (1 = no retry).
            **kwargs: temperature, max_tokens passed to provider.

        Returns:
            dict: {content, prompt_tokens, completion_tokens, model, cost_usd,
                   latency_ms, provider}

        Raises:
            The provider's exception from the final attempt, unchanged.
        """
        if model is None:
            model = self.default_model
        attempts = max(1, max_retries if max_retries is not None else self.max_retries)

        provider, provider_name = self._get_provider(model)
        log_extra = {"workshop_id": workshop_id, "agent": purpose}

        for attempt in range(1, attempts + 1):
            start_time = time.time()
            try:
                result = provider.chat(messages, model, purpose=purpose, **kwargs)
            except Exception as e:
                logger.warning(
                    "LLM call attempt %d/%d failed (%s/%s, purpose=%s): %s",
                    attempt, attempts, provider_name, model, purpose, e, extra=log_extra,
                )
                if attempt >= attempts:
                    raise
                backoff = min(2 ** (attempt - 1), 4)
                threading.Event().wait(backoff)
                continue

            latency_ms = int((time.time() - start_time) * 1000)
            cost = calculate_cost(model, result["prompt_tokens"], result["completion_tokens"])
            result["cost_usd"] = cost
            result["latency_ms"] = latency_ms
            result["provider"] = provider_name

            logger.info(
                "LLM call ok provider=%s model=%s purpose=%s tokens=%d/%d cost=$%.4f latency=%dms",
                provider_name, model, purpose,
                result["prompt_tokens"], result["completion_tokens"], cost, latency_ms,
                extra=log_extra,
            )
            return result
