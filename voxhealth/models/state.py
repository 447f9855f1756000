"""Shared state for the LangGraph screening-session workflow.

Everything in here is plain data (str / int / float / list / dict) so
the checkpointer can serialize it between the interrupt and the resume
of each interview question.  The question graph itself is rebuilt from
``interview`` on every step rather than stored as an object.
"""

from __future__ import annotations

from typing import Any, TypedDict

from voxhealth.models.schema import CanonicalRecord, QuestionResponse, ScanResult


class QuestionView(TypedDict):
    """What the caller needs to render the pending question."""

    id: str
    text: str
    options: list[str]


class SessionState(TypedDict, total=False):
    # --- Session identity & inputs ---
    session_id: str
    owner_id: str
    audio_b64: str
    profile: dict[str, Any]  # UserProfile.model_dump()
    report_id: str

    # --- Interview (raw payload; None when generation failed) ---
    interview: dict[str, Any] | None

    # --- Traversal snapshot (FlowNavigator.snapshot()) ---
    current_question_id: str | None
    responses: list[QuestionResponse]
    visited: list[str]
    question: QuestionView | None
    step: int
    progress: float

    # --- Human input (set by interrupt/resume) ---
    user_input: Any

    # --- Output ---
    report: CanonicalRecord
    scan: ScanResult
    saved: bool
    done: bool  # True once the interview is over
