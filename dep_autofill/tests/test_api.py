"""
Tests: HTTP routes.

Run with:
    pytest dep_autofill/tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from dep_autofill.api import app
from dep_autofill.services.section_service import get_section_classifier


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def classifier():
    c = get_section_classifier()
    debug = c.debug
    threshold, window = c.eviction_threshold, c.window_size_ms
    c.set_debug_mode(True)
    c.clear()
    c.reset_metrics()
    yield c
    c.set_debug_mode(debug)
    c.eviction_threshold, c.window_size_ms = threshold, window
    c.clear()
    c.reset_metrics()


QUESTIONS = [
    {"id": "1.1 Project name", "question": "Project name", "answer": "Apollo"},
    {"id": "2.6 Is personal information in scope for this initiative? (Single selection allowed) *",
     "question": "Is personal information in scope for this initiative?"},
    {"id": "4.2 How will personal information be collected?", "question": "How will personal information be collected?"},
    {"id": "7.1 Is your initiative building or leveraging AI agents? (Single selection allowed) *",
     "question": "Is your initiative building or leveraging AI agents?"},
]


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestDep:
    def test_analyze(self, client):
        resp = client.post("/api/dep/analyze", json={"questions": QUESTIONS})
        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"]["total_questions"] == 4
        assert data["summary"]["pre_existing_answers"] == 1
        assert data["summary"]["section_counts"] == {"1": 1, "2": 1, "4": 1, "7": 1}
        assert [q["id"][:3] for q in data["anchor_questions"]] == ["2.6", "7.1"]
        assert "Why we're asking 2.6" in data["next_prompt"]

    def test_predict(self, client):
        resp = client.post(
            "/api/dep/predict",
            json={"questions": QUESTIONS, "anchor_answers": {"2.6": "Yes", "7.1": "No"}},
        )
        assert resp.status_code == 200
        data = resp.json()
        rows = {q["id"].split(" ")[0]: q for q in data["predicted_questions"]}
        assert rows["4.2"]["answer"] == "Directly from the individual"
        assert rows["4.2"]["metadata"]["source"] == "inference"
        assert rows["2.6"]["confidence"] == 1.0
        assert data["answers"]["7.3"] == "__SKIPPED__"
        assert data["metadata"]["7.3"]["skipped"] is True


class TestSections:
    def test_classify(self, client):
        data = client.get("/api/sections/classify", params={"question_id": "13.4 Vendor"}).json()
        assert data["section"] == "13"
        assert data["title"] == "Third-Party Risk"

    def test_classify_unknown(self, client):
        data = client.get("/api/sections/classify", params={"question_id": "Notes"}).json()
        assert data["section"] is None

    def test_related(self, client):
        data = client.get("/api/sections/7/related").json()
        assert data["related"] == ["6", "4"]
        assert data["transitive"] is False

    def test_related_transitive(self, client):
        data = client.get("/api/sections/8/related", params={"transitive": True}).json()
        assert "8" not in data["related"]
        assert len(data["related"]) == 12

    def test_unknown_section_404(self, client):
        assert client.get("/api/sections/42/related").status_code == 404

    def test_verify_relations(self, client):
        data = client.get("/api/sections/relations/verify").json()
        assert data == {"consistent": True, "all_sections_defined": True, "violations": []}


class TestCache:
    def test_metrics(self, client, classifier):
        client.get("/api/sections/classify", params={"question_id": "2.6"})
        client.get("/api/sections/classify", params={"question_id": "2.6"})
        data = client.get("/api/sections/cache/metrics").json()
        assert data["hits"] == 1
        assert data["misses"] == 1
        assert data["size"] == 1

    def test_health(self, client, classifier):
        data = client.get("/api/sections/cache/health").json()
        assert data["healthy"] is True

    def test_debug_toggle(self, client, classifier):
        resp = client.post("/api/sections/cache/debug", json={"enabled": False})
        assert resp.json() == {"debug": False}
        client.get("/api/sections/classify", params={"question_id": "3.1"})
        assert client.get("/api/sections/cache/metrics").json()["misses"] == 0

    def test_monitoring(self, client, classifier):
        resp = client.post("/api/sections/cache/monitoring", json={"eviction_threshold": 10, "window_size_ms": -1})
        data = resp.json()
        assert data["eviction_threshold"] == 10
        assert data["window_size_ms"] == classifier.window_size_ms
