"""Interviewer agent — turns a voice sample into a branching follow-up interview.

The provider listens to the recording, forms a working hypothesis, and
returns a multiple-choice question graph in which each answer decides
the next question.  The goal of the graph is to rule out look-alike
conditions before the final analysis runs.

Failures here are *not* absorbed: the orchestrator decides what a
failed interview means (it skips straight to analysis).
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.messages import SystemMessage

from voxhealth.extraction.json_extractor import load_json_object
from voxhealth.llm import audio_message, get_chat_llm, response_text
from voxhealth.settings import normalize_language

logger = logging.getLogger(__name__)

_LANGUAGE_NAMES = {
    "hi": "HINDI (Devanagari script)",
    "ta": "TAMIL",
    "bn": "BENGALI",
    "mr": "MARATHI",
    "pa": "PUNJABI (Gurmukhi script)",
    "gu": "GUJARATI",
}

INTERVIEW_SYSTEM_PROMPT = """\
You are a clinical logic engine. You receive a short voice recording.

Your task:
1. Identify the most likely condition based only on the audio.
2. Generate a dynamic multiple-choice question set where each question
   depends on the answer to the previous one.
3. Use the questions to rule out look-alike conditions and raise
   diagnostic confidence.

RULES — follow strictly:
- Every "next_question_id" must be the id of a question in the array,
  or null to end the interview.
- Never link back to an earlier question.
- Keep questions short; 2-4 options each.
- Escape every string properly. Return raw JSON only, no markdown.

EXPECTED JSON STRUCTURE:
{
  "initial_question_id": "string",
  "questions": [
    {
      "id": "string",
      "text": "string",
      "options": [
        {"label": "string", "next_question_id": "string or null"}
      ]
    }
  ]
}

{language_instruction}
"""


class InterviewGenerationError(RuntimeError):
    """The provider returned nothing usable for the interview."""


def language_instruction(language: str | None) -> str:
    """Instruction pinning every generated string to the user's language."""
    name = _LANGUAGE_NAMES.get(normalize_language(language))
    if name is None:
        return "IMPORTANT: Provide ALL text output in ENGLISH."
    return (
        "IMPORTANT: Provide ALL text output (summaries, questions, notes, "
        f"diagnosis) STRICTLY in {name}."
    )


def generate_interview(audio_b64: str, language: str = "en") -> dict[str, Any]:
    """Ask the provider for an interview graph and decode it.

    Returns the decoded (still untrusted) payload.  Raises
    ``InterviewGenerationError`` on an empty reply and ``ValueError`` on
    unparsable JSON; transport errors propagate unchanged.
    """
    llm = get_chat_llm(temperature=0.4)
    system_text = INTERVIEW_SYSTEM_PROMPT.replace(
        "{language_instruction}", language_instruction(language)
    )
    response = llm.invoke(
        [
            SystemMessage(content=system_text),
            audio_message(
                audio_b64,
                "Analyze this audio and generate a branching clinical logic "
                f"questionnaire. Language code: {normalize_language(language)}",
            ),
        ]
    )

    raw = response_text(response.content)
    if not raw.strip():
        raise InterviewGenerationError("No response from the interview generator")

    payload = load_json_object(raw)
    questions = payload.get("questions")
    logger.info(
        "Interview generated with %d questions",
        len(questions) if isinstance(questions, list) else 0,
    )
    return payload
