"""API tests for the FastAPI web entrypoint."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any

import pytest
from fastapi.testclient import TestClient

import web.app as web_app
from voxhealth.extraction.normalizer import normalize
from voxhealth.workflow import SessionNotActiveError, SessionOrchestrator

AUDIO_B64 = base64.b64encode(b"RIFF....WAVEfmt ").decode("ascii")

QUESTION = {"id": "q1", "text": "Do you cough at night?", "options": ["Yes", "No"]}


class FakeStore:
    def __init__(self) -> None:
        self.scans: dict[str, list[dict]] = {}

    def save(self, owner_id: str, scan: dict) -> None:
        self.scans.setdefault(owner_id, []).insert(0, scan)

    def list(self, owner_id: str) -> list[dict]:
        return self.scans.get(owner_id, [])

    def delete(self, owner_id: str, scan_id: str) -> None:
        self.scans[owner_id] = [s for s in self.scans.get(owner_id, []) if s["id"] != scan_id]


@dataclass
class FakeOrchestrator:
    """Small orchestrator stub for API route tests."""

    fail_on_answer: bool = False
    inactive: bool = False
    store: FakeStore = field(default_factory=FakeStore)
    answers: list[Any] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    is_complete = staticmethod(SessionOrchestrator.is_complete)
    pending_question = staticmethod(SessionOrchestrator.pending_question)

    def start(self, owner_id, audio_b64, profile, session_id=None) -> dict[str, Any]:
        return {
            "session_id": "sess-1",
            "audio_b64": audio_b64,
            "question": QUESTION,
            "step": 1,
            "progress": 0.2,
        }

    def answer(self, session_id: str, choice: Any) -> dict[str, Any]:
        if self.inactive:
            raise SessionNotActiveError(session_id)
        if self.fail_on_answer:
            raise RuntimeError("resume failed")
        self.answers.append(choice)
        return self._finished(session_id)

    def skip_remaining(self, session_id: str) -> dict[str, Any]:
        if self.inactive:
            raise SessionNotActiveError(session_id)
        if self.fail_on_answer:
            raise RuntimeError("resume failed")
        self.skipped.append(session_id)
        return self._finished(session_id)

    def _finished(self, session_id: str) -> dict[str, Any]:
        report = normalize({"frontend_state": {"urgency": "High"}})
        return {
            "session_id": session_id,
            "question": None,
            "step": 1,
            "progress": 1.0,
            "report": report,
            "scan": {"id": "VX-2026-0001", "date": "2026-10-17T00:00:00+00:00", "data": report},
            "saved": True,
        }


@pytest.fixture
def fake():
    return FakeOrchestrator()


@pytest.fixture
def client(monkeypatch, fake):
    monkeypatch.setattr(web_app, "orchestrator", fake)
    return TestClient(web_app.app)


def _start_body(**overrides) -> dict:
    body = {"owner_id": "user-1", "audio_base64": AUDIO_B64, "profile": {"uid": "user-1", "age": 40}}
    body.update(overrides)
    return body


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
    assert res.headers["X-Request-ID"]


def test_start_session_returns_first_question(client):
    res = client.post("/api/sessions", json=_start_body())
    data = res.json()

    assert res.status_code == 200
    assert data["status"] == "in-progress"
    assert data["session_id"] == "sess-1"
    assert data["question"] == QUESTION
    assert data["report"] is None
    assert "audio_b64" not in data


def test_start_rejects_non_base64_audio(client):
    res = client.post("/api/sessions", json=_start_body(audio_base64="not base64!!"))
    assert res.status_code == 400
    assert "base64" in res.json()["detail"].lower()


def test_start_rejects_oversized_audio(client, monkeypatch):
    monkeypatch.setattr(web_app, "MAX_AUDIO_BYTES", 4)
    res = client.post("/api/sessions", json=_start_body())
    assert res.status_code == 400
    assert "too large" in res.json()["detail"].lower()


def test_start_rejects_invalid_owner_id(client):
    res = client.post("/api/sessions", json=_start_body(owner_id="bad owner id"))
    assert res.status_code == 422


def test_respond_returns_complete_report(client, fake):
    res = client.post("/api/respond", json={"session_id": "sess-1", "option_index": 1})
    data = res.json()

    assert res.status_code == 200
    assert data["status"] == "complete"
    assert data["scan_id"] == "VX-2026-0001"
    assert data["saved"] is True
    assert data["report"]["frontend_state"]["urgency"] == "High"
    assert data["question"] is None
    assert fake.answers == [1]


def test_respond_rejects_negative_index(client):
    res = client.post("/api/respond", json={"session_id": "sess-1", "option_index": -1})
    assert res.status_code == 422


def test_respond_rejects_invalid_session_id(client):
    res = client.post("/api/respond", json={"session_id": "bad session id", "option_index": 0})
    assert res.status_code == 422


def test_respond_unknown_session_is_404(monkeypatch):
    monkeypatch.setattr(web_app, "orchestrator", FakeOrchestrator(inactive=True))
    client = TestClient(web_app.app)

    res = client.post("/api/respond", json={"session_id": "sess-1", "option_index": 0})
    assert res.status_code == 404
    assert "start a new session" in res.json()["detail"].lower()


def test_respond_returns_safe_error_when_resume_fails(monkeypatch):
    monkeypatch.setattr(web_app, "orchestrator", FakeOrchestrator(fail_on_answer=True))
    client = TestClient(web_app.app)

    res = client.post("/api/respond", json={"session_id": "sess-1", "option_index": 0})
    assert res.status_code == 400
    assert "start a new session" in res.json()["detail"].lower()


def test_history_list_and_delete(client, fake):
    report = normalize({})
    fake.store.save("user-1", {"id": "a", "date": "2026-01-01", "data": report})
    fake.store.save("user-1", {"id": "b", "date": "2026-01-02", "data": report})

    res = client.get("/api/history/user-1")
    assert res.status_code == 200
    assert [s["id"] for s in res.json()] == ["b", "a"]

    res = client.delete("/api/history/user-1/a")
    assert res.status_code == 204
    assert [s["id"] for s in client.get("/api/history/user-1").json()] == ["b"]


def test_skip_returns_complete_report(client, fake):
    res = client.post("/api/skip", json={"session_id": "sess-1"})
    data = res.json()

    assert res.status_code == 200
    assert data["status"] == "complete"
    assert data["report"]["frontend_state"]["urgency"] == "High"
    assert fake.skipped == ["sess-1"]
    assert fake.answers == []


def test_skip_unknown_session_is_404(monkeypatch):
    monkeypatch.setattr(web_app, "orchestrator", FakeOrchestrator(inactive=True))
    client = TestClient(web_app.app)

    res = client.post("/api/skip", json={"session_id": "sess-1"})
    assert res.status_code == 404


def test_skip_rejects_invalid_session_id(client):
    res = client.post("/api/skip", json={"session_id": "../etc"})
    assert res.status_code == 422
