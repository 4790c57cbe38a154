"""
Workshop-wide exception hierarchy.

Services, agents and the import client raise these types; blueprints
register handlers against them once and get consistent HTTP status
codes everywhere.

Usage:
    from catalyst.core.exceptions import NotFoundError, PreconditionError

    raise NotFoundError(resource="Workshop", resource_id=workshop_id)
    raise PreconditionError("No reconciled use cases. Run reconciliation first.")
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Workshop", "UseCasePriority").
        resource_id: The key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when request input is well-formed JSON but violates a field rule.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class PreconditionError(Exception):
    """Raised when a pipeline stage is invoked before its inputs exist.

    Detected by the HTTP layer before any model call is issued, so no
    partial work is ever performed.
    """


class ImportSourceError(Exception):
    """Raised when an external source system cannot deliver its payload.

    Args:
        source: "ResearchApp" or "CognitionTwo".
        message: Transport or HTTP failure description.
        status_code: Upstream HTTP status, when one was received.
    """

    def __init__(self, source: str, message: str, status_code: int | None = None) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(f"Failed to fetch from {source}: {message}")


class AgentError(Exception):
    """Base class for failures raised while an agent handles a model response."""

    def __init__(self, agent: str, message: str) -> None:
        self.agent = agent
        super().__init__(message)


class AgentResponseError(AgentError):
    """The model returned a non-text block, or text that is not a JSON object."""


class AgentSchemaError(AgentError):
    """The model returned JSON whose shape does not match the agent's schema.

    Args:
        agent: Agent name.
        errors: One "location: message" string per failing field.
    """

    def __init__(self, agent: str, errors: list[str]) -> None:
        self.errors = list(errors)
        summary = "; ".join(self.errors[:5])
        if len(self.errors) > 5:
            summary += f" (+{len(self.errors) - 5} more)"
        super().__init__(agent, f"{agent} returned an unexpected payload shape: {summary}")
