"""Tests for shared settings and lazy env reads."""

from __future__ import annotations

import voxhealth.settings as settings


def test_defaults_without_env(monkeypatch):
    monkeypatch.delenv("VOX_HISTORY_LIMIT", raising=False)
    monkeypatch.delenv("VOX_MAX_INTERVIEW_STEPS", raising=False)
    settings.reset()

    assert settings.HISTORY_LIMIT == 20
    assert settings.MAX_INTERVIEW_STEPS == 25

    settings.reset()


def test_invalid_numeric_env_falls_back(monkeypatch):
    monkeypatch.setenv("VOX_HISTORY_LIMIT", "not-a-number")
    monkeypatch.setenv("VOX_MAX_INTERVIEW_STEPS", "-3")
    monkeypatch.setenv("VOX_REQUEST_TIMEOUT", "soon")
    settings.reset()

    assert settings.HISTORY_LIMIT == 20
    assert settings.MAX_INTERVIEW_STEPS == 25
    assert settings.REQUEST_TIMEOUT == 60.0

    monkeypatch.delenv("VOX_HISTORY_LIMIT")
    monkeypatch.delenv("VOX_MAX_INTERVIEW_STEPS")
    monkeypatch.delenv("VOX_REQUEST_TIMEOUT")
    settings.reset()


def test_lazy_model_name(monkeypatch):
    """Model names are read lazily — monkeypatch works without reload."""
    monkeypatch.setenv("OPENAI_AUDIO_MODEL", "gpt-test-audio")
    settings.reset()

    assert settings.LLM_MODEL_NAME == "gpt-test-audio"

    monkeypatch.delenv("OPENAI_AUDIO_MODEL", raising=False)
    settings.reset()


def test_unknown_attribute_raises():
    try:
        settings.NOT_A_SETTING
    except AttributeError as e:
        assert "NOT_A_SETTING" in str(e)
    else:
        raise AssertionError("expected AttributeError")


class TestNormalizeLanguage:
    def test_supported_code_kept(self):
        assert settings.normalize_language("hi") == "hi"

    def test_case_and_whitespace_ignored(self):
        assert settings.normalize_language(" TA ") == "ta"

    def test_unknown_code_falls_back_to_english(self):
        assert settings.normalize_language("fr") == "en"

    def test_missing_code_falls_back_to_english(self):
        assert settings.normalize_language(None) == "en"
        assert settings.normalize_language("") == "en"
