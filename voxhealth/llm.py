"""Shared LLM client factory and message helpers.

Every collaborator that talks to the inference provider should import
from here instead of constructing its own client, ensuring consistent
model selection, temperature, and timeout configuration.
"""

from __future__ import annotations

import json
from typing import Any

from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from voxhealth import settings


def get_chat_llm(
    *,
    temperature: float = 0.2,
    request_timeout: float | None = None,
) -> ChatOpenAI:
    """Return a configured, audio-capable ChatOpenAI instance."""
    return ChatOpenAI(
        model=settings.LLM_MODEL_NAME,
        temperature=temperature,
        request_timeout=request_timeout or settings.REQUEST_TIMEOUT,
    )


def audio_message(audio_b64: str, text: str, *, audio_format: str = "wav") -> HumanMessage:
    """Build a user message carrying base64 audio plus an instruction."""
    return HumanMessage(
        content=[
            {"type": "text", "text": text},
            {
                "type": "input_audio",
                "input_audio": {"data": audio_b64, "format": audio_format},
            },
        ]
    )


def response_text(content: Any) -> str:
    """Normalize LangChain message content into a text string."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        ]
        return "".join(parts)
    return json.dumps(content)
