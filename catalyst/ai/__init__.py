"""
AI Catalyst Workshop
AI layer: LLM gateway, prompt registry, agents and pipeline orchestrator.

Usage:
    from catalyst.ai import get_pipeline
    step = get_pipeline().run_prioritization(context)
"""

import logging

from flask import current_app

logger = logging.getLogger(__name__)


def get_gateway():
    """Per-app LLMGateway, created lazily on first use."""
    gateway = getattr(current_app, "_ai_gateway", None)
    if gateway is None:
        from catalyst.ai.gateway import LLMGateway
        gateway = LLMGateway(app=current_app)
        current_app._ai_gateway = gateway
    return gateway


def get_prompt_registry():
    registry = getattr(current_app, "_prompt_registry", None)
    if registry is None:
        from catalyst.ai.prompt_registry import PromptRegistry
        registry = PromptRegistry(prompts_dir=current_app.config.get("PROMPTS_DIR") or "")
        current_app._prompt_registry = registry
    return registry


def get_pipeline():
    """
    Pipeline bound to the current app's gateway.

    Rebuilt when the gateway object changes so tests can swap in a fake.
    """
    gateway = get_gateway()
    pipeline = getattr(current_app, "_ai_pipeline", None)
    if pipeline is None or pipeline.gateway is not gateway:
        from catalyst.ai.orchestrator import WorkshopPipeline
        pipeline = WorkshopPipeline(
            gateway=gateway,
            prompt_registry=get_prompt_registry(),
            max_workers=current_app.config.get("PIPELINE_MAX_WORKERS", 2),
        )
        current_app._ai_pipeline = pipeline
        logger.debug("Workshop pipeline initialised")
    return pipeline
