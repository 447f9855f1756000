"""Factory helpers for creating workflow state payloads."""

from __future__ import annotations

from typing import Any

from voxhealth.agents.analyst import new_report_id
from voxhealth.models.profile import UserProfile


def new_session_state(
    session_id: str,
    owner_id: str,
    audio_b64: str,
    profile: UserProfile,
) -> dict[str, Any]:
    """Return a fresh session state dict used by CLI and web entrypoints."""
    return {
        "session_id": session_id,
        "owner_id": owner_id,
        "audio_b64": audio_b64,
        "profile": profile.model_dump(),
        "report_id": new_report_id(),
        "interview": None,
        "current_question_id": None,
        "responses": [],
        "visited": [],
        "question": None,
        "step": 0,
        "progress": 0.0,
        "saved": False,
        "done": False,
    }
