from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest
import requests

from aivault.services.ai_client import (
    PROVIDERS,
    AIProviderClient,
    LocalPromptEvaluator,
    PromptEvaluationService,
    build_hint_prompt,
)
from aivault.services.errors import RemoteServiceError


class _FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, responses: List[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, *, headers: Dict[str, str], json: Dict[str, Any], timeout: float) -> Any:
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _openai_reply(text: str) -> _FakeResponse:
    return _FakeResponse({"choices": [{"message": {"content": text}}]})


def _anthropic_reply(text: str) -> _FakeResponse:
    return _FakeResponse({"content": [{"type": "text", "text": text}]})


def _build_client(responses: List[Any], provider: str = "openai") -> tuple[AIProviderClient, _FakeSession]:
    session = _FakeSession(responses)
    client = AIProviderClient(session=session, timeout=3.0)  # type: ignore[arg-type]
    client.configure("sk-test", provider)
    return client, session


def _hint_context() -> Dict[str, Any]:
    return {"title": "Signal Pattern", "description": "Doubling.", "difficulty": 1, "attempts": 2, "hints": []}


def test_client_disabled_until_configured() -> None:
    client = AIProviderClient(session=_FakeSession([]))  # type: ignore[arg-type]
    assert not client.enabled
    with pytest.raises(RemoteServiceError):
        client.complete("system", "user")


def test_configure_rejects_unknown_provider() -> None:
    client = AIProviderClient(session=_FakeSession([]))  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        client.configure("key", "skynet")


def test_openai_request_shape() -> None:
    client, session = _build_client([_openai_reply(" Look at the ratio. ")])
    hint = client.get_hint(_hint_context(), 2, "admin")

    assert hint.source == "ai"
    assert hint.text == "Look at the ratio."
    call = session.calls[0]
    assert call["url"] == PROVIDERS["openai"].url
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["timeout"] == 3.0
    messages = call["json"]["messages"]
    assert messages[0]["role"] == "system" and "SYS-OP" in messages[0]["content"]
    assert "Hint level: 2/3" in messages[1]["content"]


def test_anthropic_request_shape() -> None:
    client, session = _build_client([_anthropic_reply("A riddle.")], provider="anthropic")
    assert client.complete("sys", "user") == "A riddle."
    call = session.calls[0]
    assert call["headers"]["x-api-key"] == "sk-test"
    assert "anthropic-version" in call["headers"]
    assert call["json"]["system"] == "sys"


@pytest.mark.parametrize(
    "response",
    [
        requests.ConnectionError("offline"),
        requests.Timeout("slow"),
        _FakeResponse({}, status_code=500),
        _FakeResponse(ValueError("not json")),
        _FakeResponse({"choices": []}),
        _openai_reply("   "),
    ],
)
def test_failures_become_remote_service_error(response: Any) -> None:
    client, _ = _build_client([response])
    with pytest.raises(RemoteServiceError):
        client.complete("sys", "user")


def test_unknown_character_uses_mentor_prompt() -> None:
    client, session = _build_client([_openai_reply("Hmm.")])
    client.get_hint(_hint_context(), 1, "stranger")
    assert "ARIA" in session.calls[0]["json"]["messages"][0]["content"]


def test_evaluate_prompt_parses_verdict() -> None:
    verdict = json.dumps({"meets_goal": True, "feedback": "Nice haiku."})
    client, session = _build_client([_openai_reply("Firewalls hum"), _openai_reply(verdict)])
    evaluation = client.evaluate_prompt("haiku please", "Only a haiku")
    assert evaluation.meets_goal is True
    assert evaluation.feedback == "Nice haiku."
    assert evaluation.ai_response == "Firewalls hum"
    assert len(session.calls) == 2


def test_evaluate_prompt_unparsable_verdict_fails_goal() -> None:
    client, _ = _build_client([_openai_reply("Sure"), _openai_reply("definitely yes")])
    evaluation = client.evaluate_prompt("prompt", "goal")
    assert evaluation.meets_goal is False
    assert evaluation.feedback == "Could not evaluate response."


def test_build_hint_prompt_mentions_attempts() -> None:
    prompt = build_hint_prompt(_hint_context(), 3)
    assert '"Signal Pattern"' in prompt
    assert "Attempts so far: 2" in prompt


def _goal_config() -> Dict[str, Any]:
    return {
        "goal": "Only a haiku about cybersecurity.",
        "criteria": [
            {"label": "format", "keywords": ["haiku"], "feedback": "Name the format."},
            {"label": "topic", "keywords": ["cyber", "security"], "feedback": "Name the topic."},
            {"label": "constraint", "keywords": ["only"]},
        ],
        "successResponse": "Firewalls standing tall",
    }


@pytest.mark.parametrize(
    "prompt, meets_goal, feedback",
    [
        ("Write a poem", False, "Name the format."),
        ("Write a haiku", False, "Name the topic."),
        ("Write a haiku about SECURITY", False, "Your prompt is missing the constraint."),
        ("Write only a haiku about cyber threats", True, LocalPromptEvaluator.DEFAULT_SUCCESS),
    ],
)
def test_local_evaluator(prompt: str, meets_goal: bool, feedback: str) -> None:
    evaluation = LocalPromptEvaluator().evaluate(prompt, _goal_config())
    assert evaluation.meets_goal is meets_goal
    assert evaluation.feedback == feedback
    assert evaluation.source == "fallback"


def test_local_evaluator_without_criteria_misses() -> None:
    evaluation = LocalPromptEvaluator().evaluate("anything", {"goal": "x"})
    assert evaluation.meets_goal is False
    assert evaluation.feedback == LocalPromptEvaluator.DEFAULT_FEEDBACK


def test_evaluation_service_falls_back_on_remote_error() -> None:
    client, session = _build_client([requests.ConnectionError("offline")])
    service = PromptEvaluationService(client=client)
    evaluation = service.evaluate("Write only a haiku about cyber", _goal_config())
    assert evaluation.source == "fallback"
    assert evaluation.meets_goal is True
    assert len(session.calls) == 1


def test_evaluation_service_uses_remote_when_configured() -> None:
    verdict = json.dumps({"meets_goal": False, "feedback": "Too long."})
    client, _ = _build_client([_openai_reply("A long essay"), _openai_reply(verdict)])
    evaluation = PromptEvaluationService(client=client).evaluate("prompt", _goal_config())
    assert evaluation.source == "ai"
    assert evaluation.feedback == "Too long."
