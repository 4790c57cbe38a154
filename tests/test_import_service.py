"""
Tests — source import client.

Covers:
    - URL building from configured and explicit base URLs
    - Non-2xx, timeout, network and non-JSON failures → ImportSourceError
    - Company name extraction from either payload shape
"""

import pytest
import requests

from catalyst.core.exceptions import ImportSourceError
from catalyst.services import import_service


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK", json_error=False):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.reason = reason
        self._payload = payload
        self._json_error = json_error

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value")
        return self._payload


@pytest.fixture()
def fake_get(monkeypatch):
    """Replace requests.get; set ``fake_get.response`` or ``fake_get.error`` per test."""

    class Recorder:
        response = FakeResponse(payload={"companyName": "Acme Corp"})
        error = None
        calls = []

        def __call__(self, url, **kwargs):
            self.calls.append({"url": url, **kwargs})
            if self.error is not None:
                raise self.error
            return self.response

    recorder = Recorder()
    recorder.calls = []
    monkeypatch.setattr("catalyst.services.import_service.requests.get", recorder)
    return recorder


def test_research_report_uses_configured_base(app, fake_get):
    payload = import_service.fetch_research_report("42")

    assert payload == {"companyName": "Acme Corp"}
    call = fake_get.calls[0]
    assert call["url"] == f"{app.config['RESEARCH_APP_URL']}/api/reports/42"
    assert call["timeout"] == app.config["IMPORT_TIMEOUT_SECONDS"]


def test_cognition_analysis_uses_explicit_base(fake_get):
    import_service.fetch_cognition_analysis("abc", api_url="https://cognition.example.com/")
    assert fake_get.calls[0]["url"] == "https://cognition.example.com/api/analyses/abc"


def test_non_2xx_raises_with_status(fake_get):
    fake_get.response = FakeResponse(status_code=404, reason="Not Found")

    with pytest.raises(ImportSourceError) as exc:
        import_service.fetch_research_report("missing")

    assert exc.value.status_code == 404
    assert exc.value.source == "ResearchApp"
    assert str(exc.value) == "Failed to fetch from ResearchApp: Not Found"


def test_timeout_raises(fake_get):
    fake_get.error = requests.Timeout("read timed out")
    with pytest.raises(ImportSourceError, match="timed out"):
        import_service.fetch_cognition_analysis("abc")


def test_network_error_raises(fake_get):
    fake_get.error = requests.ConnectionError("connection refused")
    with pytest.raises(ImportSourceError, match="connection refused"):
        import_service.fetch_research_report("42")


def test_non_json_body_raises(fake_get):
    fake_get.response = FakeResponse(json_error=True)
    with pytest.raises(ImportSourceError, match="not JSON"):
        import_service.fetch_research_report("42")


def test_json_array_body_raises(fake_get):
    fake_get.response = FakeResponse(payload=[1, 2])
    with pytest.raises(ImportSourceError, match="not a JSON object"):
        import_service.fetch_research_report("42")


@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"companyName": "Acme Corp"}, "Acme Corp"),
        ({"organizationProfile": {"companyName": "Globex"}}, "Globex"),
        ({"title": "report"}, None),
        ("not a dict", None),
    ],
)
def test_company_name_from(payload, expected):
    assert import_service.company_name_from(payload) == expected
