"""FastAPI backend for the voice screening web interface."""

from __future__ import annotations

import base64
import binascii
import logging
import os
import time
import uuid
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from voxhealth.logging_config import setup_logging
from voxhealth.models.profile import UserProfile
from voxhealth.workflow import SessionNotActiveError, SessionOrchestrator

load_dotenv()
setup_logging()

# Hosting dashboards sometimes store env values with trailing whitespace after copy/paste.
for key in ("OPENAI_API_KEY", "NEO4J_URI", "NEO4J_USERNAME", "NEO4J_PASSWORD"):
    value = os.environ.get(key)
    if value:
        os.environ[key] = value.strip()

logger = logging.getLogger(__name__)

app = FastAPI(title="VoxHealth", version="0.1.0")
orchestrator = SessionOrchestrator()
MAX_AUDIO_BYTES = 10 * 1024 * 1024

_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


# ── Request logging middleware ────────────────────────────────────────────

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with method, path, and response time."""
    request_id = uuid.uuid4().hex[:8]
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %s (%.0fms) [rid=%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ── Health check ──────────────────────────────────────────────────────────

@app.get("/health")
def health_check() -> JSONResponse:
    """Lightweight health probe for deployment platforms."""
    return JSONResponse({"status": "ok"})


class StartRequest(BaseModel):
    owner_id: str = Field(..., min_length=1, max_length=128, pattern=_ID_PATTERN)
    audio_base64: str = Field(..., min_length=1)
    profile: UserProfile


class RespondRequest(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=64, pattern=_ID_PATTERN)
    option_index: int = Field(..., ge=0)


class SkipRequest(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=64, pattern=_ID_PATTERN)


class SessionResponse(BaseModel):
    session_id: str
    status: str
    question: dict[str, Any] | None = None
    step: int = 0
    progress: float = 0.0
    report: dict[str, Any] | None = None
    scan_id: str | None = None
    saved: bool | None = None


def _session_view(state: dict[str, Any]) -> SessionResponse:
    """Build API response from graph state (never echoes the audio back)."""
    is_complete = orchestrator.is_complete(state)
    scan = state.get("scan") or {}
    return SessionResponse(
        session_id=state.get("session_id", ""),
        status="complete" if is_complete else "in-progress",
        question=None if is_complete else orchestrator.pending_question(state),
        step=state.get("step", 0),
        progress=1.0 if is_complete else state.get("progress", 0.0),
        report=state.get("report") if is_complete else None,
        scan_id=scan.get("id") if is_complete else None,
        saved=state.get("saved") if is_complete else None,
    )


def _validate_audio(audio_b64: str) -> str:
    try:
        decoded = base64.b64decode(audio_b64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Audio must be base64-encoded.") from None
    if not decoded:
        raise HTTPException(status_code=400, detail="Audio cannot be empty.")
    if len(decoded) > MAX_AUDIO_BYTES:
        raise HTTPException(status_code=400, detail="Audio recording is too large.")
    return audio_b64


@app.post("/api/sessions", response_model=SessionResponse)
def start_session(req: StartRequest) -> SessionResponse:
    """Start a screening session from a recording."""
    audio_b64 = _validate_audio(req.audio_base64)
    state = orchestrator.start(req.owner_id, audio_b64, req.profile)
    return _session_view(state)


@app.post("/api/respond", response_model=SessionResponse)
def respond(req: RespondRequest) -> SessionResponse:
    """Answer the pending question and return the next state."""
    try:
        state = orchestrator.answer(req.session_id, req.option_index)
    except SessionNotActiveError:
        raise HTTPException(
            status_code=404,
            detail="This session is not waiting for an answer. Start a new session.",
        ) from None
    except Exception:
        logger.exception("Failed to resume session %s", req.session_id)
        raise HTTPException(
            status_code=400,
            detail="Unable to continue this session. Start a new session and try again.",
        ) from None

    return _session_view(state)


@app.post("/api/skip", response_model=SessionResponse)
def skip(req: SkipRequest) -> SessionResponse:
    """Skip the remaining questions and analyze the answers given so far."""
    try:
        state = orchestrator.skip_remaining(req.session_id)
    except SessionNotActiveError:
        raise HTTPException(
            status_code=404,
            detail="This session is not waiting for an answer. Start a new session.",
        ) from None
    except Exception:
        logger.exception("Failed to finish session %s", req.session_id)
        raise HTTPException(
            status_code=400,
            detail="Unable to finish this session. Start a new session and try again.",
        ) from None

    return _session_view(state)


@app.get("/api/history/{owner_id}")
def list_history(owner_id: str) -> list[dict[str, Any]]:
    """Scan history for an owner, newest first."""
    return orchestrator.store.list(owner_id)


@app.delete("/api/history/{owner_id}/{scan_id}", status_code=204)
def delete_history_entry(owner_id: str, scan_id: str) -> None:
    """Remove one scan from an owner's history."""
    orchestrator.store.delete(owner_id, scan_id)


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    print(f"Starting web interface on http://localhost:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
