"""
Tests — workshop CRUD, imports and facilitator endpoints.

Covers:
    - Workshop create / list / get / patch / delete
    - Source import (requests patched) and error mapping
    - Survey responses: computed and supplied scores, latest wins
    - Challenge status updates
    - Matrix override recomputes the quadrant
    - Workflow / lineage reads
"""

import pytest

from catalyst.core.exceptions import ImportSourceError
from catalyst.models import db
from catalyst.models.workshop import ChallengeLogEntry, UseCasePriority, Workshop
from catalyst.services import workshop_service as svc


def _url(workshop, suffix=""):
    return f"/api/v1/workshops/{workshop['id']}{suffix}"


# ═════════════════════════════════════════════════════════════════════════════
# Workshops
# ═════════════════════════════════════════════════════════════════════════════


class TestWorkshopCrud:
    def test_create_returns_draft(self, workshop):
        assert workshop["companyName"] == "Acme Corp"
        assert workshop["facilitatorName"] == "Dana Reyes"
        assert workshop["status"] == "draft"
        assert workshop["reconciledUseCases"] is None
        assert workshop["hasResearchAppData"] is False

    def test_create_requires_company_name(self, client):
        res = client.post("/api/v1/workshops", json={"companyName": "  ", "industry": "Retail"})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_create_parses_date(self, client):
        res = client.post("/api/v1/workshops", json={"companyName": "Globex", "workshopDate": "2026-03-04"})
        assert res.status_code == 201
        assert res.get_json()["workshopDate"] == "2026-03-04"

    def test_create_ignores_unparseable_date(self, client):
        res = client.post("/api/v1/workshops", json={"companyName": "Globex", "workshopDate": "next week"})
        assert res.status_code == 201
        assert res.get_json()["workshopDate"] is None

    def test_list_returns_summaries(self, client, workshop_with_use_cases):
        res = client.get("/api/v1/workshops")
        assert res.status_code == 200
        rows = res.get_json()
        assert len(rows) == 1
        assert rows[0]["useCaseCount"] == 2
        assert "reconciledUseCases" not in rows[0]

    def test_get_hides_sources_unless_asked(self, client, workshop):
        row = db.session.get(Workshop, workshop["id"])
        row.research_app_data = {"companyName": "Acme Corp"}
        db.session.commit()

        plain = client.get(_url(workshop)).get_json()
        full = client.get(_url(workshop) + "?include_sources=1").get_json()

        assert "researchAppData" not in plain
        assert plain["hasResearchAppData"] is True
        assert full["researchAppData"] == {"companyName": "Acme Corp"}

    def test_get_unknown_is_404(self, client):
        res = client.get("/api/v1/workshops/does-not-exist")
        assert res.status_code == 404
        assert res.get_json() == {"error": "Workshop not found", "code": "ERR_NOT_FOUND"}

    def test_patch_updates_fields(self, client, workshop):
        res = client.patch(_url(workshop), json={"industry": "Retail", "status": "in_progress"})
        assert res.status_code == 200
        body = res.get_json()
        assert body["industry"] == "Retail"
        assert body["status"] == "in_progress"
        assert body["companyName"] == "Acme Corp"

    def test_patch_rejects_unknown_status(self, client, workshop):
        res = client.patch(_url(workshop), json={"status": "archived"})
        assert res.status_code == 400
        assert res.get_json()["details"] == {"status": "invalid"}

    def test_delete_cascades(self, client, workshop_with_use_cases):
        ws = workshop_with_use_cases
        svc.replace_priorities(ws["id"], [{"useCaseId": "UC-001", "impactScore": 7, "feasibilityScore": 7}])
        db.session.commit()

        res = client.delete(_url(ws))

        assert res.status_code == 200
        assert res.get_json() == {"success": True}
        assert client.get(_url(ws)).status_code == 404
        assert UseCasePriority.query.count() == 0

    def test_non_json_body_is_415(self, client):
        res = client.post("/api/v1/workshops", data="companyName=Acme", content_type="text/plain")
        assert res.status_code == 415


# ═════════════════════════════════════════════════════════════════════════════
# Source import
# ═════════════════════════════════════════════════════════════════════════════


class TestImport:
    def test_import_research_stores_payload(self, client, workshop, monkeypatch):
        seen = {}

        def fake_fetch(report_id, api_url=None):
            seen.update(report_id=report_id, api_url=api_url)
            return {"companyName": "Acme Corporation", "analysisData": {"steps": []}}

        monkeypatch.setattr("catalyst.services.import_service.fetch_research_report", fake_fetch)

        res = client.post(_url(workshop, "/import/research"),
                          json={"reportId": 42, "apiUrl": "https://research.example.com"})

        assert res.status_code == 200
        assert res.get_json() == {"success": True, "companyName": "Acme Corporation"}
        assert seen == {"report_id": "42", "api_url": "https://research.example.com"}
        row = db.session.get(Workshop, workshop["id"])
        assert row.research_app_report_id == "42"
        assert row.research_app_data["companyName"] == "Acme Corporation"

    def test_import_cognition_requires_id(self, client, workshop):
        res = client.post(_url(workshop, "/import/cognition"), json={})
        assert res.status_code == 400
        assert res.get_json()["error"] == "analysisId is required"

    def test_import_failure_is_400(self, client, workshop, monkeypatch):
        def failing_fetch(analysis_id, api_url=None):
            raise ImportSourceError("CognitionTwo", "Service Unavailable", status_code=503)

        monkeypatch.setattr("catalyst.services.import_service.fetch_cognition_analysis", failing_fetch)

        res = client.post(_url(workshop, "/import/cognition"), json={"analysisId": "abc"})

        assert res.status_code == 400
        assert res.get_json()["error"] == "Failed to fetch from CognitionTwo: Service Unavailable"
        assert db.session.get(Workshop, workshop["id"]).cognition_two_data is None

    def test_use_cases_list(self, client, workshop_with_use_cases):
        res = client.get(_url(workshop_with_use_cases, "/use-cases"))
        assert [uc["id"] for uc in res.get_json()] == ["UC-001", "UC-002"]


# ═════════════════════════════════════════════════════════════════════════════
# Survey
# ═════════════════════════════════════════════════════════════════════════════


class TestSurvey:
    @pytest.fixture()
    def templates(self, workshop):
        svc.replace_survey_templates(workshop["id"], [
            {"dimension": "skills", "questions": [{"id": "S-001", "question": "ML depth?", "weight": 1}]},
            {"dimension": "data", "questions": [{"id": "D-001", "question": "Data quality?", "weight": 1}]},
        ])
        db.session.commit()
        return workshop

    def test_templates_listed_in_dimension_order(self, client, templates):
        res = client.get(_url(templates, "/survey"))
        assert [t["dimension"] for t in res.get_json()] == ["skills", "data"]

    def test_scores_computed_from_answers(self, client, templates):
        res = client.put(_url(templates, "/survey/responses"), json={
            "templateId": "v1",
            "responses": [
                {"questionId": "S-001", "maturityLevel": 4},
                {"questionId": "D-001", "maturityLevel": 2, "notes": "Mostly spreadsheets"},
            ],
        })

        assert res.status_code == 200
        scores = res.get_json()["dimensionScores"]
        assert scores == {"skills": 4.0, "data": 2.0, "infrastructure": 0.0, "governance": 0.0, "overall": 1.5}
        assert client.get(_url(templates)).get_json()["status"] == "in_progress"

    def test_latest_response_wins(self, client, templates):
        client.put(_url(templates, "/survey/responses"), json={"dimensionScores": {
            "skills": 1, "data": 1, "infrastructure": 1, "governance": 1}})
        client.put(_url(templates, "/survey/responses"), json={"dimensionScores": {
            "skills": 3, "data": 2, "infrastructure": 4, "governance": 3}})

        scores = client.get(_url(templates, "/survey/scores")).get_json()

        assert scores["skills"] == 3.0
        assert scores["overall"] == 3.0

    def test_no_scores_is_null(self, client, workshop):
        res = client.get(_url(workshop, "/survey/scores"))
        assert res.status_code == 200
        assert res.get_json() is None

    def test_empty_submission_counts_as_no_survey(self, client, templates):
        res = client.put(_url(templates, "/survey/responses"), json={"responses": []})
        assert res.status_code == 200
        assert client.get(_url(templates, "/survey/scores")).get_json() is None

    def test_out_of_range_maturity_is_400(self, client, templates):
        res = client.put(_url(templates, "/survey/responses"),
                         json={"responses": [{"questionId": "S-001", "maturityLevel": 9}]})
        assert res.status_code == 400
        assert res.get_json()["details"] == {"S-001": "out of range [1, 5]"}


# ═════════════════════════════════════════════════════════════════════════════
# Challenge log & matrix
# ═════════════════════════════════════════════════════════════════════════════


class TestChallengeLog:
    @pytest.fixture()
    def entry(self, workshop_with_use_cases):
        rows = svc.replace_pending_challenges(workshop_with_use_cases["id"], [
            {"useCaseId": "UC-001", "challengeType": "benefit", "severity": "high",
             "evidence": "Benchmarks show 30% savings"},
        ])
        db.session.commit()
        return rows[0]

    def test_list(self, client, workshop_with_use_cases, entry):
        body = client.get(_url(workshop_with_use_cases, "/challenges")).get_json()
        assert len(body) == 1
        assert body[0]["status"] == "pending"
        assert body[0]["severity"] == "high"

    def test_accept(self, client, workshop_with_use_cases, entry):
        res = client.put(_url(workshop_with_use_cases, f"/challenge/{entry.id}"),
                         json={"status": "accepted", "respondedBy": "Dana Reyes"})
        assert res.status_code == 200
        assert res.get_json()["status"] == "accepted"
        assert db.session.get(ChallengeLogEntry, entry.id).responded_by == "Dana Reyes"

    def test_status_required(self, client, workshop_with_use_cases, entry):
        res = client.put(_url(workshop_with_use_cases, f"/challenge/{entry.id}"), json={})
        assert res.status_code == 400

    def test_invalid_status(self, client, workshop_with_use_cases, entry):
        res = client.put(_url(workshop_with_use_cases, f"/challenge/{entry.id}"), json={"status": "maybe"})
        assert res.status_code == 400

    def test_unknown_entry_is_404(self, client, workshop_with_use_cases):
        res = client.put(_url(workshop_with_use_cases, "/challenge/9999"), json={"status": "accepted"})
        assert res.status_code == 404


class TestMatrix:
    @pytest.fixture()
    def matrix(self, workshop_with_use_cases):
        svc.replace_priorities(workshop_with_use_cases["id"], [
            {"useCaseId": "UC-001", "useCaseTitle": "Invoice Processing Automation",
             "impactScore": 7.5, "feasibilityScore": 6.5},
            {"useCaseId": "UC-002", "useCaseTitle": "Demand Forecasting Copilot",
             "impactScore": 6.8, "feasibilityScore": 4.2},
        ])
        db.session.commit()
        return workshop_with_use_cases

    def test_get_matrix(self, client, matrix):
        rows = client.get(_url(matrix, "/matrix")).get_json()
        assert [(r["useCaseId"], r["quadrant"]) for r in rows] == [
            ("UC-001", "quick_win"), ("UC-002", "strategic"),
        ]

    def test_override_recomputes_quadrant(self, client, matrix):
        res = client.put(_url(matrix, "/matrix/UC-002"), json={
            "impactScore": 6.8, "feasibilityScore": 6, "overrideReason": "Data lake ready in Q2",
        })
        assert res.status_code == 200
        body = res.get_json()
        assert body["quadrant"] == "quick_win"
        assert body["overrideReason"] == "Data lake ready in Q2"

    def test_override_rejects_out_of_range(self, client, matrix):
        res = client.put(_url(matrix, "/matrix/UC-002"), json={"impactScore": 11, "feasibilityScore": 5})
        assert res.status_code == 400

    def test_override_unknown_use_case_is_404(self, client, matrix):
        res = client.put(_url(matrix, "/matrix/UC-999"), json={"impactScore": 5, "feasibilityScore": 5})
        assert res.status_code == 404


# ═════════════════════════════════════════════════════════════════════════════
# Workflows & lineage
# ═════════════════════════════════════════════════════════════════════════════


def test_workflow_lookup_and_lineage(client, workshop_with_use_cases):
    ws = workshop_with_use_cases
    row = db.session.get(Workshop, ws["id"])
    row.workflow_maps = [{"useCaseId": "UC-001", "useCaseTitle": "Invoice Processing Automation"}]
    row.data_lineage = [{"useCaseId": "UC-001", "dataSources": ["ERP"]}]
    db.session.commit()

    assert client.get(_url(ws, "/workflows/UC-001")).get_json()["useCaseTitle"] == "Invoice Processing Automation"
    assert client.get(_url(ws, "/workflows/UC-002")).get_json() is None
    assert client.get(_url(ws, "/data-lineage")).get_json()[0]["dataSources"] == ["ERP"]
    assert client.post(_url(ws, "/data-lineage")).status_code == 200
