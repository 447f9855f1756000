"""In-memory interview graph built from the provider's branching payload.

Expected payload shape::

    {"initial_question_id": "q1",
     "questions": [{"id": "q1", "text": "...",
                    "options": [{"label": "Yes", "next_question_id": "q2"},
                                {"label": "No", "next_question_id": null}]}]}

Construction is tolerant of sloppy output but performs no integrity
checks on edges: a dangling ``next_question_id`` is only a problem if
the user actually walks that edge, and ``FlowNavigator`` deals with it
then.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionOption:
    label: str
    next_question_id: str | None  # None = terminal edge


@dataclass(frozen=True)
class QuestionNode:
    id: str
    text: str
    options: tuple[QuestionOption, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "options": [option.label for option in self.options],
        }


def _as_id(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_option(raw: Any) -> QuestionOption | None:
    if not isinstance(raw, Mapping):
        return None
    label = raw.get("label")
    if isinstance(label, (int, float)) and not isinstance(label, bool):
        label = str(label)
    if not isinstance(label, str) or not label.strip():
        return None
    return QuestionOption(label=label, next_question_id=_as_id(raw.get("next_question_id")))


def _parse_node(raw: Any) -> QuestionNode | None:
    if not isinstance(raw, Mapping):
        return None
    node_id = _as_id(raw.get("id"))
    if node_id is None:
        return None
    text = raw.get("text")
    raw_options = raw.get("options")
    options = tuple(
        option
        for option in map(_parse_option, raw_options if isinstance(raw_options, list) else [])
        if option is not None
    )
    if not options:
        # A question nobody can answer is a dead end; drop it so edges
        # pointing here are treated as dangling.
        logger.warning("Dropping question %r: no usable options", node_id)
        return None
    return QuestionNode(id=node_id, text=text if isinstance(text, str) else "", options=options)


class QuestionGraph:
    """Immutable id → node mapping plus the configured entry point."""

    def __init__(self, initial_question_id: str | None, nodes: list[QuestionNode]) -> None:
        by_id: dict[str, QuestionNode] = {}
        for node in nodes:
            # first occurrence wins on duplicate ids
            by_id.setdefault(node.id, node)
        self._initial_question_id = initial_question_id
        self._nodes = MappingProxyType(by_id)

    @classmethod
    def from_payload(cls, payload: Any) -> "QuestionGraph":
        """Build a graph from a decoded (but unvalidated) provider payload."""
        if not isinstance(payload, Mapping):
            return cls(None, [])
        raw_questions = payload.get("questions")
        if not isinstance(raw_questions, list):
            raw_questions = []
        nodes = [node for node in map(_parse_node, raw_questions) if node is not None]
        return cls(_as_id(payload.get("initial_question_id")), nodes)

    @property
    def initial_question_id(self) -> str | None:
        return self._initial_question_id

    @property
    def first_node(self) -> QuestionNode | None:
        return next(iter(self._nodes.values()), None)

    def get(self, question_id: str | None) -> QuestionNode | None:
        if question_id is None:
            return None
        return self._nodes.get(question_id)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[QuestionNode]:
        return iter(self._nodes.values())

    def is_empty(self) -> bool:
        return not self._nodes
