"""Canonical report shape and its fully-populated defaults.

Two kinds of payload flow through the system:

  - *partial* payloads — whatever the inference provider returned, typed
    as ``dict[str, Any]`` and never trusted;
  - *canonical* records — ``CanonicalRecord`` below, produced only by
    ``voxhealth.extraction.normalizer.normalize``.

Nothing downstream of the normalizer reads a partial payload directly.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Final, Literal, NotRequired, TypedDict

Urgency = Literal["High", "Medium", "Low"]
URGENCY_LEVELS: Final[tuple[str, ...]] = ("High", "Medium", "Low")

DEFAULT_REPORT_ID: Final[str] = "ERR-GEN"
DEFAULT_PRIMARY_SUSPECT: Final[str] = "Inconclusive Analysis"
DEFAULT_URGENCY: Final[str] = "Low"
ANALYSIS_ERROR_SUSPECT: Final[str] = "Analysis Error"


class Header(TypedDict):
    report_id: str
    timestamp: str  # ISO 8601
    version: str


class SignalIntegrity(TypedDict):
    is_valid: bool
    snr_ratio: float  # dB
    clipping_detected: bool
    background_noise_type: str
    validation_note: str


class VocalFeatures(TypedDict):
    fundamental_frequency: str
    jitter_local: str
    shimmer_local_db: str
    harmonic_to_noise: str


class NeurologicalMarkers(TypedDict):
    micro_tremor_freq: str
    amplitude_stability: str
    speech_rate: str


class RespiratoryMarkers(TypedDict):
    cough_burst_intensity: str
    sustained_vowel_duration: str
    breath_pause_frequency: str


class BiometricPayload(TypedDict):
    vocal_features: VocalFeatures
    neurological_markers: NeurologicalMarkers
    respiratory_markers: RespiratoryMarkers


class ConfidenceMetrics(TypedDict):
    audio_confidence: float  # 0.0 – 1.0
    symptom_alignment: float  # 0.0 – 1.0
    aggregate_score: float  # 0.0 – 1.0


class DifferentialDiagnosis(TypedDict):
    ruled_out: list[str]
    exclusion_logic: str


class ClinicalInference(TypedDict):
    primary_suspect: str
    confidence_metrics: ConfidenceMetrics
    differential_diagnosis: DifferentialDiagnosis


class FrontendState(TypedDict):
    theme: str
    urgency: Urgency
    ui_gauge_value: float
    history_card_summary: str


class QuestionResponse(TypedDict):
    """One answered interview question, in the order it was asked."""

    question: str
    answer: str


class QuestionnaireData(TypedDict):
    responses: list[QuestionResponse]


class CanonicalRecord(TypedDict):
    header: Header
    signal_integrity: SignalIntegrity
    biometric_payload: BiometricPayload
    clinical_inference: ClinicalInference
    frontend_state: FrontendState
    questionnaire_data: NotRequired[QuestionnaireData]


class ScanResult(TypedDict):
    """The persisted unit: one finished session."""

    id: str
    date: str  # ISO 8601, sort key for history
    data: CanonicalRecord


_NOT_AVAILABLE = "N/A"

_DEFAULTS: Final[dict] = {
    "header": {
        "report_id": DEFAULT_REPORT_ID,
        "timestamp": "",
        "version": "1.0",
    },
    "signal_integrity": {
        "is_valid": False,
        "snr_ratio": 0.0,
        "clipping_detected": False,
        "background_noise_type": "Unknown",
        "validation_note": "Data structure recovered from partial response.",
    },
    "biometric_payload": {
        "vocal_features": {
            "fundamental_frequency": _NOT_AVAILABLE,
            "jitter_local": _NOT_AVAILABLE,
            "shimmer_local_db": _NOT_AVAILABLE,
            "harmonic_to_noise": _NOT_AVAILABLE,
        },
        "neurological_markers": {
            "micro_tremor_freq": _NOT_AVAILABLE,
            "amplitude_stability": _NOT_AVAILABLE,
            "speech_rate": _NOT_AVAILABLE,
        },
        "respiratory_markers": {
            "cough_burst_intensity": _NOT_AVAILABLE,
            "sustained_vowel_duration": _NOT_AVAILABLE,
            "breath_pause_frequency": _NOT_AVAILABLE,
        },
    },
    "clinical_inference": {
        "primary_suspect": DEFAULT_PRIMARY_SUSPECT,
        "confidence_metrics": {
            "audio_confidence": 0.0,
            "symptom_alignment": 0.0,
            "aggregate_score": 0.0,
        },
        "differential_diagnosis": {
            "ruled_out": [],
            "exclusion_logic": "The AI analysis was incomplete. Please retry recording.",
        },
    },
    "frontend_state": {
        "theme": "default",
        "urgency": DEFAULT_URGENCY,
        "ui_gauge_value": 0.0,
        "history_card_summary": "Incomplete Analysis",
    },
}


def default_record() -> CanonicalRecord:
    """Return a fresh, fully-populated default record.

    The header timestamp is stamped at call time; everything else is a
    deep copy, so callers may mutate the result freely.
    """
    record = copy.deepcopy(_DEFAULTS)
    record["header"]["timestamp"] = datetime.now(timezone.utc).isoformat()
    return record  # type: ignore[return-value]
