from __future__ import annotations

import pytest

from speakright.llm.base import ChatLLM, LLMAuthError, LLMError
from speakright.llm.prompts import SYSTEM_PROMPT, TARGET_SYSTEM_PROMPT
from speakright.services.analysis_service import (
    AnalysisFailedError,
    AnalysisService,
    TargetCompletionError,
)

GOOD_REPLY = '{"ipa": "ðə kwɪk", "goodPronunciation": [{"word": "the", "ipa": "ðə"}], "needsImprovement": [], "tips": ["Nice"]}'


class _ScriptedLLM(ChatLLM):
    def __init__(self, replies: list) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[str, str]] = []

    def chat(self, prompt: str, system: str) -> str:
        self.calls.append((prompt, system))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def test_analyze_with_target_makes_single_call(test_settings) -> None:
    llm = _ScriptedLLM([GOOD_REPLY])
    service = AnalysisService(llm=llm, config=test_settings)

    outcome = service.analyze(spoken_text="the quick", target_text="The quick")

    assert outcome.target_text == "The quick"
    assert outcome.content.ipa == "ðə kwɪk"
    assert outcome.attempts == 1
    assert len(llm.calls) == 1
    prompt, system = llm.calls[0]
    assert system == SYSTEM_PROMPT
    assert 'Target: "The quick"' in prompt
    assert 'Spoken: "the quick"' in prompt


def test_scenario_missing_target_is_generated(test_settings) -> None:
    reply = (
        'I think this is: {"ipa":"...", "goodPronunciation":[], '
        '"needsImprovement":[{"word":"quick","ipa":"kwɪk"}], "tips":"slow down"}'
    )
    llm = _ScriptedLLM(["The quick brown fox.", reply])
    service = AnalysisService(llm=llm, config=test_settings)

    outcome = service.analyze(spoken_text="the quick brown fox", target_text="")

    assert outcome.target_text == "The quick brown fox."
    assert outcome.content.tips == ["slow down"]
    assert outcome.content.good_pronunciation == []
    assert llm.calls[0][1] == TARGET_SYSTEM_PROMPT
    assert 'Target: "The quick brown fox."' in llm.calls[1][0]


def test_target_completion_failure_is_fatal(test_settings) -> None:
    llm = _ScriptedLLM([LLMError("boom")])
    service = AnalysisService(llm=llm, config=test_settings)

    with pytest.raises(TargetCompletionError, match="Failed to generate target text"):
        service.analyze(spoken_text="hello", target_text=None)
    assert len(llm.calls) == 1


def test_auth_failure_stops_after_one_attempt(test_settings) -> None:
    llm = _ScriptedLLM([LLMAuthError("API Authentication failed"), GOOD_REPLY, GOOD_REPLY])
    service = AnalysisService(llm=llm, config=test_settings)

    with pytest.raises(AnalysisFailedError, match="API Authentication failed"):
        service.analyze(spoken_text="hello", target_text="Hello")
    assert len(llm.calls) == 1


def test_transient_failures_are_retried(test_settings) -> None:
    llm = _ScriptedLLM([LLMError("timeout"), "no json at all", GOOD_REPLY])
    service = AnalysisService(llm=llm, config=test_settings)

    outcome = service.analyze(spoken_text="the quick", target_text="The quick")

    assert outcome.attempts == 3
    assert len(llm.calls) == 3


def test_retry_ceiling_reports_last_error(test_settings) -> None:
    llm = _ScriptedLLM([LLMError("first"), LLMError("second"), "{broken"])
    service = AnalysisService(llm=llm, config=test_settings)

    with pytest.raises(AnalysisFailedError, match="No JSON object found"):
        service.analyze(spoken_text="hello", target_text="Hello")
    assert len(llm.calls) == 3


def test_retry_delay_sleeps_between_attempts(test_settings, monkeypatch) -> None:
    from speakright.services import analysis_service

    sleeps: list[float] = []
    monkeypatch.setattr(analysis_service.time, "sleep", lambda s: sleeps.append(s))
    test_settings.llm_retry_delay = 0.5
    llm = _ScriptedLLM([LLMError("a"), LLMError("b"), LLMError("c")])
    service = AnalysisService(llm=llm, config=test_settings)

    with pytest.raises(AnalysisFailedError):
        service.analyze(spoken_text="hello", target_text="Hello")
    assert sleeps == [0.5, 0.5]
