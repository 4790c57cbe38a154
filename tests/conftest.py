"""
Shared pytest fixtures for the AI Catalyst Workshop test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - scripted_gateway: fake LLM gateway installed on the app
    - workshop / workshop_with_use_cases: pre-created Workshop entities
"""

import json
import threading

import pytest

from catalyst import create_app
from catalyst.ai.gateway import LocalStubProvider
from catalyst.models import db as _db
from catalyst.models.workshop import Workshop


SAMPLE_USE_CASES = [
    {
        "id": "UC-001",
        "title": "Invoice Processing Automation",
        "description": "Extract and post supplier invoices",
        "businessFunction": "Finance",
        "aiPrimitives": ["Document Understanding"],
        "totalAnnualValue": 1200000,
        "threeYearNPV": 2800000,
        "dataReadiness": 3,
        "effortScore": 4,
        "agenticPattern": "tool-user",
        "horizon": "H1",
    },
    {
        "id": "UC-002",
        "title": "Demand Forecasting Copilot",
        "description": "Weekly demand forecast with planner review",
        "businessFunction": "Supply Chain",
        "aiPrimitives": ["Prediction"],
        "totalAnnualValue": 800000,
        "threeYearNPV": 1700000,
        "dataReadiness": 2,
        "effortScore": 6,
        "agenticPattern": "reasoning-engine",
        "horizon": "H2",
    },
]


class ScriptedGateway:
    """
    Stands in for LLMGateway.

    ``replies`` maps a prompt purpose to a reply: a str is returned as the
    model text, a dict is JSON-encoded, an Exception is raised. Purposes
    without a scripted reply get the LocalStubProvider payload.
    """

    def __init__(self, replies=None):
        self.replies = dict(replies or {})
        self.calls = []
        self._lock = threading.Lock()
        self._stub = LocalStubProvider()

    def chat(self, messages, model=None, *, purpose="", workshop_id=None, **kwargs):
        with self._lock:
            self.calls.append({"purpose": purpose, "messages": messages, "workshop_id": workshop_id})
        reply = self.replies.get(purpose)
        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            content = self._stub.chat(messages, "local-stub", purpose=purpose)["content"]
        elif isinstance(reply, str):
            content = reply
        else:
            content = json.dumps(reply)
        return {
            "content": content,
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "model": "scripted",
            "cost_usd": 0.0,
            "latency_ms": 0,
            "provider": "scripted",
        }

    @property
    def purposes(self):
        return [call["purpose"] for call in self.calls]

    def user_prompt(self, purpose):
        for call in self.calls:
            if call["purpose"] == purpose:
                return next(m["content"] for m in call["messages"] if m["role"] == "user")
        raise KeyError(purpose)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def scripted_gateway(app):
    """Install a ScriptedGateway as the app's LLM gateway for one test."""
    gateway = ScriptedGateway()
    app._ai_gateway = gateway
    yield gateway
    app._ai_gateway = None
    app._ai_pipeline = None


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def workshop(client):
    """Create and return a draft Workshop via the API (as JSON)."""
    res = client.post(
        "/api/v1/workshops",
        json={"companyName": "Acme Corp", "industry": "Manufacturing", "facilitatorName": "Dana Reyes"},
    )
    assert res.status_code == 201
    return res.get_json()


@pytest.fixture()
def workshop_with_use_cases(workshop):
    """Workshop JSON whose row already holds SAMPLE_USE_CASES."""
    row = _db.session.get(Workshop, workshop["id"])
    row.reconciled_use_cases = [dict(uc) for uc in SAMPLE_USE_CASES]
    row.status = "in_progress"
    _db.session.commit()
    return workshop
