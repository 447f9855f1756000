"""Analyst agent — produces the final structured report from audio + answers."""

from __future__ import annotations

import json
import random
from datetime import datetime, timezone

from langchain_core.messages import SystemMessage

from voxhealth.agents.interviewer import language_instruction
from voxhealth.llm import audio_message, get_chat_llm, response_text
from voxhealth.models.profile import UserProfile
from voxhealth.models.schema import QuestionResponse

ANALYSIS_SYSTEM_PROMPT = """\
You are a high-precision medical data architect and vocal biomarker analyst.
Analyze the audio input and the patient's questionnaire answers and produce
a strictly structured JSON report.

Estimate acoustic features (jitter, shimmer, HNR) from the auditory
characteristics of the recording. Base the differential diagnosis on:
1. Signal quality assessment
2. Acoustic biomarker extraction
3. Neurological and respiratory markers
4. Patient-reported symptoms
5. The user metadata

RULES — follow strictly:
- Adhere to the JSON structure below.
- Every value in "biometric_payload" is a string that includes units.
- Confidence metrics are numbers between 0 and 1.
- Keep string fields concise (1-2 sentences).
- Return raw JSON only, no markdown.

EXPECTED JSON STRUCTURE:
{
  "header": {"report_id": "string", "timestamp": "ISO string", "version": "1.0"},
  "signal_integrity": {"is_valid": boolean, "snr_ratio": number, "clipping_detected": boolean,
                       "background_noise_type": "string", "validation_note": "string"},
  "biometric_payload": {
    "vocal_features": {"fundamental_frequency": "string", "jitter_local": "string",
                       "shimmer_local_db": "string", "harmonic_to_noise": "string"},
    "neurological_markers": {"micro_tremor_freq": "string", "amplitude_stability": "string",
                             "speech_rate": "string"},
    "respiratory_markers": {"cough_burst_intensity": "string", "sustained_vowel_duration": "string",
                            "breath_pause_frequency": "string"}
  },
  "clinical_inference": {
    "primary_suspect": "string",
    "confidence_metrics": {"audio_confidence": number, "symptom_alignment": number,
                           "aggregate_score": number},
    "differential_diagnosis": {"ruled_out": ["string"], "exclusion_logic": "string"}
  },
  "frontend_state": {"theme": "default", "urgency": "High" | "Medium" | "Low",
                     "ui_gauge_value": number, "history_card_summary": "string"}
}

{language_instruction}
"""

ANALYSIS_USER_PROMPT = """\
Analyze this audio.

User context:
{profile_context}

Patient interview responses (questionnaire):
{responses_json}

Generate a report with ID "{report_id}".
"""


def new_report_id(now: datetime | None = None) -> str:
    """Human-friendly report id, e.g. ``VX-2026-4821``."""
    year = (now or datetime.now(timezone.utc)).year
    return f"VX-{year}-{random.randint(1000, 9999)}"


def analyze_audio(
    audio_b64: str,
    profile: UserProfile,
    responses: list[QuestionResponse],
    report_id: str,
) -> str:
    """Request the final report; returns the raw (untrusted) model text.

    Parsing and schema enforcement are left to the caller.  Transport
    errors propagate unchanged.
    """
    llm = get_chat_llm(temperature=0.0)
    system_text = ANALYSIS_SYSTEM_PROMPT.replace(
        "{language_instruction}", language_instruction(profile.language)
    )
    prompt = ANALYSIS_USER_PROMPT.format(
        profile_context=profile.context_block(),
        responses_json=json.dumps(responses, indent=2, ensure_ascii=False),
        report_id=report_id,
    )
    response = llm.invoke([SystemMessage(content=system_text), audio_message(audio_b64, prompt)])
    return response_text(response.content)
