"""
AI Catalyst Workshop
Workshop pipeline orchestrator.

Fixed stage topology:

    reconciliation → survey_generation → {challenge ∥ validation}
        → prioritization → {workflows ∥ lineage} → synthesis

Each step takes a WorkshopContext and returns a StepResult holding the
new agent outputs and a new context with those outputs merged in. Parallel
pairs share one input snapshot; both agents finish before the step returns,
and if either fails the exception propagates and no output is returned.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from catalyst.ai.agents import build_agents
from catalyst.ai.context import (
    CHALLENGE_AGENT,
    LINEAGE_AGENT,
    PRIORITIZATION_AGENT,
    RECONCILIATION_AGENT,
    SURVEY_AGENT,
    SYNTHESIS_AGENT,
    VALIDATION_AGENT,
    WORKFLOW_AGENT,
    AgentOutput,
    WorkshopContext,
)

logger = logging.getLogger(__name__)


# ── Stage Definitions ─────────────────────────────────────────────────────

STAGES = (
    {"stage": "reconciliation", "agents": (RECONCILIATION_AGENT,), "parallel": False},
    {"stage": "survey_generation", "agents": (SURVEY_AGENT,), "parallel": False},
    {"stage": "challenge_and_validation", "agents": (CHALLENGE_AGENT, VALIDATION_AGENT), "parallel": True},
    {"stage": "prioritization", "agents": (PRIORITIZATION_AGENT,), "parallel": False},
    {"stage": "workflows_and_lineage", "agents": (WORKFLOW_AGENT, LINEAGE_AGENT), "parallel": True},
    {"stage": "synthesis", "agents": (SYNTHESIS_AGENT,), "parallel": False},
)


@dataclass
class StepResult:
    outputs: dict[str, AgentOutput] = field(default_factory=dict)
    context: WorkshopContext | None = None

    def __getitem__(self, agent_name: str) -> AgentOutput:
        return self.outputs[agent_name]


def _numeric_summary(output: AgentOutput) -> dict:
    """Top-level numbers and list lengths from structuredData, for log lines."""
    summary = {}
    for key, value in output.structured_data.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            summary[key] = value
        elif isinstance(value, list):
            summary[key] = len(value)
    return summary


class WorkshopPipeline:
    """Runs workshop agents stage by stage."""

    def __init__(self, agents: dict | None = None, *, gateway=None, prompt_registry=None,
                 model: str | None = None, max_workers: int = 2):
        if agents is None:
            if gateway is None:
                raise ValueError("WorkshopPipeline needs either agents or a gateway")
            agents = build_agents(gateway, prompt_registry=prompt_registry, model=model)
        self.agents = agents
        self.gateway = gateway
        self.max_workers = max(1, max_workers)

    # ── Internals ─────────────────────────────────────────────────────────

    def _agent(self, name: str):
        try:
            return self.agents[name]
        except KeyError:
            raise KeyError(f"No agent registered for {name!r}") from None

    def _run_single(self, stage: str, agent_name: str, context: WorkshopContext) -> StepResult:
        extra = {"workshop_id": context.workshop_id, "stage": stage, "agent": agent_name}
        logger.info("[%s] %s started", stage, agent_name, extra=extra)
        start = time.monotonic()

        output = self._agent(agent_name).execute(context)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "[%s] %s completed in %dms %s", stage, agent_name, elapsed_ms,
            _numeric_summary(output), extra=extra,
        )
        outputs = {agent_name: output}
        return StepResult(outputs=outputs, context=context.with_outputs(outputs))

    def _run_pair(self, stage: str, first: str, second: str, context: WorkshopContext) -> StepResult:
        extra = {"workshop_id": context.workshop_id, "stage": stage}
        logger.info("[%s] %s + %s started in parallel", stage, first, second, extra=extra)
        start = time.monotonic()

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                name: pool.submit(self._agent(name).execute, context)
                for name in (first, second)
            }
            wait(futures.values())

        failures = {name: fut.exception() for name, fut in futures.items() if fut.exception()}
        if failures:
            for name, exc in failures.items():
                logger.error("[%s] %s failed: %s", stage, name, exc, extra={**extra, "agent": name})
            raise next(iter(failures.values()))

        outputs = {name: fut.result() for name, fut in futures.items()}
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "[%s] completed in %dms %s", stage, elapsed_ms,
            {name: _numeric_summary(out) for name, out in outputs.items()}, extra=extra,
        )
        return StepResult(outputs=outputs, context=context.with_outputs(outputs))

    # ── Steps ─────────────────────────────────────────────────────────────

    def run_reconciliation(self, context: WorkshopContext) -> StepResult:
        return self._run_single("reconciliation", RECONCILIATION_AGENT, context)

    def run_survey_generation(self, context: WorkshopContext) -> StepResult:
        return self._run_single("survey_generation", SURVEY_AGENT, context)

    def run_challenge_and_validation(self, context: WorkshopContext) -> StepResult:
        return self._run_pair("challenge_and_validation", CHALLENGE_AGENT, VALIDATION_AGENT, context)

    def run_challenge(self, context: WorkshopContext) -> StepResult:
        return self._run_single("challenge", CHALLENGE_AGENT, context)

    def run_validation(self, context: WorkshopContext) -> StepResult:
        return self._run_single("validation", VALIDATION_AGENT, context)

    def run_prioritization(self, context: WorkshopContext) -> StepResult:
        return self._run_single("prioritization", PRIORITIZATION_AGENT, context)

    def run_workflows_and_lineage(self, context: WorkshopContext) -> StepResult:
        return self._run_pair("workflows_and_lineage", WORKFLOW_AGENT, LINEAGE_AGENT, context)

    def run_synthesis(self, context: WorkshopContext) -> StepResult:
        return self._run_single("synthesis", SYNTHESIS_AGENT, context)


# ── Module-level convenience ──────────────────────────────────────────────

_default_pipeline: WorkshopPipeline | None = None


def get_default_pipeline() -> WorkshopPipeline:
    """Pipeline backed by a plain LLMGateway, created on first use."""
    global _default_pipeline
    if _default_pipeline is None:
        from catalyst.ai.gateway import LLMGateway
        _default_pipeline = WorkshopPipeline(gateway=LLMGateway())
    return _default_pipeline


def run_reconciliation(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_reconciliation(context)


def run_survey_generation(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_survey_generation(context)


def run_challenge_and_validation(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_challenge_and_validation(context)


def run_challenge(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_challenge(context)


def run_validation(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_validation(context)


def run_prioritization(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_prioritization(context)


def run_workflows_and_lineage(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_workflows_and_lineage(context)


def run_synthesis(context: WorkshopContext) -> StepResult:
    return get_default_pipeline().run_synthesis(context)
