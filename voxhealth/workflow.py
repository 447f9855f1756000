"""LangGraph workflow — sequences one screening session.

Flow:
    START → generate_interview → router → ask → record_answer → router → …
                                       ↘ analyze → save → END   (when done)

The two provider calls are strictly sequential: analysis is never issued
before interview generation has resolved, successfully or not.

Fallback policy:
  - interview generation fails / returns no usable questions
        → skip the interview, analyze with an empty response log
  - analysis output unparsable → normalize an empty payload (defaults)
  - analysis call fails outright → labelled "Analysis Error" report
  - store fails → report is still returned, ``saved`` is False

The ``ask`` node uses LangGraph's ``interrupt()`` to pause until the
caller resumes with ``Command(resume=<option index or label>)``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, StateGraph
from langgraph.types import Command, interrupt

from voxhealth.agents.analyst import analyze_audio
from voxhealth.agents.interviewer import generate_interview
from voxhealth.extraction.json_extractor import parse_partial
from voxhealth.extraction.normalizer import analysis_failure_record, normalize
from voxhealth.interview.navigator import FlowNavigator, InvalidChoiceError
from voxhealth.interview.question_graph import QuestionGraph
from voxhealth.models.initial_state import new_session_state
from voxhealth.models.profile import UserProfile
from voxhealth.models.state import QuestionView, SessionState
from voxhealth.scans.assembler import assemble_scan_result
from voxhealth.store.base import ScanStore
from voxhealth.store.store_client import get_scan_store

logger = logging.getLogger(__name__)

Interviewer = Callable[[str, str], dict[str, Any]]
Analyst = Callable[..., str]


class SessionNotActiveError(RuntimeError):
    """No session with this id is waiting for an answer."""


# ── Helpers ───────────────────────────────────────────────────────────────


def _navigator(state: SessionState) -> FlowNavigator:
    graph = QuestionGraph.from_payload(state.get("interview"))
    return FlowNavigator.restore(graph, dict(state))


def _traversal_updates(nav: FlowNavigator) -> dict[str, Any]:
    question = nav.current_question
    return {
        **nav.snapshot(),
        "question": question.to_dict() if question else None,
        "step": nav.step_count,
        "progress": nav.progress,
        "done": nav.is_finished,
    }


def _profile(state: SessionState) -> UserProfile:
    return UserProfile(**state["profile"])


# ── Build the graph ───────────────────────────────────────────────────────


def build_graph(
    *,
    interviewer: Interviewer = generate_interview,
    analyst: Analyst = analyze_audio,
    store_factory: Callable[[], ScanStore] = get_scan_store,
):
    """Construct and compile the session StateGraph with injected collaborators."""

    def generate_interview_node(state: SessionState) -> dict:
        try:
            payload = interviewer(state["audio_b64"], _profile(state).language)
        except Exception as e:  # noqa: BLE001  any failure skips the interview
            logger.warning("Interview generation failed (%s); skipping to analysis", e)
            return {"interview": None, "done": True}

        graph = QuestionGraph.from_payload(payload)
        if graph.is_empty():
            logger.warning("Interview had no usable questions; skipping to analysis")
            return {"interview": None, "done": True}
        return {"interview": payload, **_traversal_updates(FlowNavigator(graph))}

    def router(state: SessionState) -> Command:
        """Ask the next question, or move on to analysis."""
        if state.get("done", False):
            return Command(goto="analyze")
        return Command(goto="ask")

    def ask(state: SessionState) -> dict:
        """Pause execution and wait for the user's choice via interrupt()."""
        choice = interrupt(state.get("question"))
        return {"user_input": choice}

    def record_answer(state: SessionState) -> dict:
        nav = _navigator(state)
        try:
            nav.select(state.get("user_input"))
        except InvalidChoiceError as e:
            logger.warning("Ignoring answer for session %s: %s", state.get("session_id"), e)
            return {"user_input": None}
        return {**_traversal_updates(nav), "user_input": None}

    def analyze(state: SessionState) -> dict:
        responses = list(state.get("responses", []))
        try:
            raw = analyst(state["audio_b64"], _profile(state), responses, state["report_id"])
        except Exception as e:  # noqa: BLE001  surfaced as a labelled failure report
            logger.warning("Analysis failed for session %s: %s", state.get("session_id"), e)
            return {"report": analysis_failure_record(str(e) or type(e).__name__, responses)}

        report = normalize(parse_partial(raw))
        report["questionnaire_data"] = {"responses": responses}
        return {"report": report}

    def save(state: SessionState) -> dict:
        scan = assemble_scan_result(state["report"])
        try:
            store_factory().save(state["owner_id"], scan)
            saved = True
        except Exception as e:  # noqa: BLE001  report is still returned unsaved
            logger.error("Could not save scan %s: %s", scan["id"], e)
            saved = False
        return {"scan": scan, "saved": saved}

    graph = StateGraph(SessionState)

    graph.add_node("generate_interview", generate_interview_node)
    graph.add_node("router", router)
    graph.add_node("ask", ask)
    graph.add_node("record_answer", record_answer)
    graph.add_node("analyze", analyze)
    graph.add_node("save", save)

    graph.add_edge(START, "generate_interview")
    graph.add_edge("generate_interview", "router")
    # router uses Command to go to "ask" or "analyze"
    graph.add_edge("ask", "record_answer")
    graph.add_edge("record_answer", "router")
    graph.add_edge("analyze", "save")
    graph.add_edge("save", END)

    return graph.compile(checkpointer=MemorySaver())


# ── Orchestrator facade ───────────────────────────────────────────────────


class SessionOrchestrator:
    """Runs screening sessions on a compiled graph with injected collaborators.

    Usage:
        orchestrator = SessionOrchestrator()
        state = orchestrator.start("user-1", audio_b64, profile)
        while not orchestrator.is_complete(state):
            question = orchestrator.pending_question(state)
            state = orchestrator.answer(state["session_id"], 0)
        state["scan"]       # the persisted ScanResult
    """

    def __init__(
        self,
        *,
        interviewer: Interviewer = generate_interview,
        analyst: Analyst = analyze_audio,
        store: ScanStore | None = None,
    ) -> None:
        self._store = store
        self.graph = build_graph(
            interviewer=interviewer,
            analyst=analyst,
            store_factory=lambda: self.store,
        )

    @property
    def store(self) -> ScanStore:
        if self._store is None:
            self._store = get_scan_store()
        return self._store

    @staticmethod
    def _config(session_id: str) -> dict:
        return {"configurable": {"thread_id": session_id}}

    def start(
        self,
        owner_id: str,
        audio_b64: str,
        profile: UserProfile,
        session_id: str | None = None,
    ) -> dict[str, Any]:
        """Begin a session; returns state paused at the first question, or final."""
        session_id = session_id or uuid.uuid4().hex[:12]
        initial_state = new_session_state(session_id, owner_id, audio_b64, profile)
        return self.graph.invoke(initial_state, self._config(session_id))

    def answer(self, session_id: str, choice: int | str) -> dict[str, Any]:
        """Resume a paused session with the chosen option."""
        config = self._config(session_id)
        if not self.graph.get_state(config).next:
            raise SessionNotActiveError(f"Session {session_id!r} is not awaiting an answer")
        return self.graph.invoke(Command(resume=choice), config)

    def skip_remaining(self, session_id: str) -> dict[str, Any]:
        """End the interview early and run the analysis on the answers so far."""
        config = self._config(session_id)
        if not self.graph.get_state(config).next:
            raise SessionNotActiveError(f"Session {session_id!r} is not awaiting an answer")
        self.graph.update_state(
            config,
            {"done": True, "question": None, "current_question_id": None},
            as_node="record_answer",
        )
        return self.graph.invoke(None, config)

    @staticmethod
    def is_complete(state: dict[str, Any]) -> bool:
        return "scan" in state

    @staticmethod
    def pending_question(state: dict[str, Any]) -> QuestionView | None:
        if SessionOrchestrator.is_complete(state):
            return None
        return state.get("question")
