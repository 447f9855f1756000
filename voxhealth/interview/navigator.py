"""Flow navigator — traversal state machine over a ``QuestionGraph``.

States:
    AtQuestion(question_id)  — waiting for the user to pick an option
    Finished(responses)      — interview over; the ordered response log

Integrity is validated lazily, one edge at a time, as the user walks the
graph.  A graph that is broken only on branches nobody visits is still
perfectly usable.  Every fault found on the walked path ends the
interview instead of raising:

  - terminal edge (``next_question_id`` is null)  → Finished
  - dangling edge (id not in the graph)           → Finished
  - edge back to an already-visited question      → Finished
  - ``MAX_INTERVIEW_STEPS`` answers recorded      → Finished
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from voxhealth import settings
from voxhealth.interview.question_graph import QuestionGraph, QuestionNode, QuestionOption
from voxhealth.models.schema import QuestionResponse
from voxhealth.settings import EXPECTED_INTERVIEW_DEPTH

logger = logging.getLogger(__name__)


def _step_cap(max_steps: int | None) -> int:
    if max_steps is None:
        return settings.MAX_INTERVIEW_STEPS
    if max_steps < 1:
        raise ValueError(f"max_steps must be at least 1, got {max_steps}")
    return max_steps


class InvalidChoiceError(ValueError):
    """The selected option does not exist on the current question."""


class InterviewFinishedError(RuntimeError):
    """An option was selected after the interview had already finished."""


@dataclass(frozen=True)
class AtQuestion:
    question_id: str


@dataclass(frozen=True)
class Finished:
    responses: list[QuestionResponse] = field(default_factory=list)


NavigatorState = AtQuestion | Finished


class FlowNavigator:
    """Walks a question graph and records the path the user takes.

    Usage:
        nav = FlowNavigator(QuestionGraph.from_payload(payload))
        while not nav.is_finished:
            question = nav.current_question
            nav.select(0)          # option index, or the option label
        nav.responses              # [{"question": ..., "answer": ...}, ...]
    """

    def __init__(self, graph: QuestionGraph, *, max_steps: int | None = None) -> None:
        self._graph = graph
        self._max_steps = _step_cap(max_steps)
        self._responses: list[QuestionResponse] = []
        self._visited: list[str] = []
        self._state: NavigatorState = self._entry_state()

    # ── Construction helpers ──────────────────────────────────────────

    def _entry_state(self) -> NavigatorState:
        start = self._graph.initial_question_id
        if start not in self._graph:
            fallback = self._graph.first_node
            if fallback is None:
                logger.warning("Interview graph is empty; nothing to ask")
                return Finished([])
            logger.warning(
                "Initial question %r not found; starting at first question %r",
                start,
                fallback.id,
            )
            start = fallback.id
        self._visited.append(start)
        return AtQuestion(start)

    @classmethod
    def restore(
        cls,
        graph: QuestionGraph,
        snapshot: dict[str, Any],
        *,
        max_steps: int | None = None,
    ) -> "FlowNavigator":
        """Rebuild a navigator from ``snapshot()`` output over the same graph."""
        # Bypass __init__ so entry-point recovery does not run again.
        nav = cls.__new__(cls)
        nav._graph = graph
        nav._max_steps = _step_cap(max_steps)
        nav._responses = [
            {"question": r["question"], "answer": r["answer"]}
            for r in snapshot.get("responses", [])
        ]
        nav._visited = list(snapshot.get("visited", []))
        current = snapshot.get("current_question_id")
        if current is not None and current in graph:
            nav._state = AtQuestion(current)
        else:
            nav._state = Finished(list(nav._responses))
        return nav

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the traversal state (safe to checkpoint)."""
        current = self._state.question_id if isinstance(self._state, AtQuestion) else None
        return {
            "current_question_id": current,
            "responses": [dict(r) for r in self._responses],
            "visited": list(self._visited),
        }

    # ── Read-only view ────────────────────────────────────────────────

    @property
    def state(self) -> NavigatorState:
        return self._state

    @property
    def is_finished(self) -> bool:
        return isinstance(self._state, Finished)

    @property
    def current_question(self) -> QuestionNode | None:
        if isinstance(self._state, AtQuestion):
            return self._graph.get(self._state.question_id)
        return None

    @property
    def responses(self) -> list[QuestionResponse]:
        return list(self._responses)

    @property
    def step_count(self) -> int:
        """Number of questions shown so far (monotonically increasing)."""
        return len(self._visited)

    @property
    def progress(self) -> float:
        """Cosmetic completion estimate in [0, 1]; the true depth is unknown."""
        if self.is_finished:
            return 1.0
        return min(self.step_count / EXPECTED_INTERVIEW_DEPTH, 1.0)

    # ── Transitions ───────────────────────────────────────────────────

    def select(self, choice: int | str) -> NavigatorState:
        """Answer the current question by option index or label."""
        question = self.current_question
        if question is None:
            raise InterviewFinishedError("The interview has already finished.")

        option = self._resolve_option(question, choice)
        self._responses.append({"question": question.text, "answer": option.label})
        self._state = self._follow(question, option)
        return self._state

    def _resolve_option(self, question: QuestionNode, choice: int | str) -> QuestionOption:
        if isinstance(choice, int) and not isinstance(choice, bool):
            if 0 <= choice < len(question.options):
                return question.options[choice]
        elif isinstance(choice, str):
            for option in question.options:
                if option.label == choice:
                    return option
            wanted = choice.strip().casefold()
            for option in question.options:
                if option.label.strip().casefold() == wanted:
                    return option
        raise InvalidChoiceError(f"{choice!r} is not an option of question {question.id!r}")

    def _follow(self, question: QuestionNode, option: QuestionOption) -> NavigatorState:
        next_id = option.next_question_id
        if next_id is None:
            return self._finish()
        if next_id not in self._graph:
            logger.warning(
                "Question %r links to unknown question %r; ending interview",
                question.id,
                next_id,
            )
            return self._finish()
        if next_id in self._visited:
            logger.warning(
                "Question %r links back to visited question %r; ending interview",
                question.id,
                next_id,
            )
            return self._finish()
        if len(self._responses) >= self._max_steps:
            logger.warning("Interview reached %d answers; ending interview", self._max_steps)
            return self._finish()

        self._visited.append(next_id)
        return AtQuestion(next_id)

    def _finish(self) -> Finished:
        return Finished(list(self._responses))
