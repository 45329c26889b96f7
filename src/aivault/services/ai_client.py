"""HTTP client for the optional AI provider plus the offline prompt evaluator."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence

import requests

from aivault.core.types import HintSource
from aivault.services.errors import RemoteServiceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
MAX_TOKENS = 150
ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True, slots=True)
class ProviderSpec:
    url: str
    model: str


PROVIDERS: Dict[str, ProviderSpec] = {
    "openai": ProviderSpec(url="https://api.openai.com/v1/chat/completions", model="gpt-4o-mini"),
    "anthropic": ProviderSpec(url="https://api.anthropic.com/v1/messages", model="claude-sonnet-4-20250514"),
}

CHARACTER_PROMPTS: Dict[str, str] = {
    "mentor": (
        "You are ARIA, a virtual mentor in an AI education escape room. You are encouraging and use "
        "the Socratic method. Never give direct answers; ask guiding questions instead. Keep responses "
        "under 2 sentences. Speak warmly but professionally."
    ),
    "admin": (
        "You are SYS-OP, a system administrator in an AI education escape room. You are terse, "
        "technical, and slightly impatient but ultimately helpful. Give hints using technical jargon "
        "but make them useful. Keep responses under 2 sentences."
    ),
    "rogue": (
        "You are ECHO, a rogue AI in an AI education escape room. You are cryptic and playful. Give "
        "hints as riddles or metaphors. Never be straightforward. Keep responses under 2 sentences."
    ),
}

_RESPONDER_PROMPT = "You are a helpful AI assistant. Respond naturally to the user prompt."
_JUDGE_PROMPT = "You evaluate AI responses. Reply only with valid JSON."


@dataclass(frozen=True, slots=True)
class Hint:
    source: HintSource
    text: str


@dataclass(frozen=True, slots=True)
class PromptEvaluation:
    ai_response: str
    meets_goal: bool
    feedback: str
    source: HintSource


def build_hint_prompt(context: Mapping[str, Any], level: int) -> str:
    return (
        f'The player is stuck on a puzzle called "{context.get("title", "")}".\n'
        f"Description: {context.get('description', '')}\n"
        f"Difficulty: {context.get('difficulty', 1)}/3\n"
        f"Hint level: {level}/3 (1=vague nudge, 2=moderate guidance, 3=strong hint but NOT the answer)\n"
        f"Attempts so far: {context.get('attempts', 0)}\n"
        "Provide a hint appropriate to the level. Do NOT reveal the answer. "
        "Encourage reflection and learning."
    )


class AIProviderClient:
    """
    Thin wrapper over the OpenAI and Anthropic HTTP APIs.

    The client stays disabled until :meth:`configure` receives a key. Every
    failure, whether transport, HTTP status or response shape, is raised as
    RemoteServiceError so callers can fall back with a single except clause.
    The API key lives only on this object and is never written to the state tree.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._api_key: str | None = None
        self._provider: str | None = None

    @property
    def provider(self) -> str | None:
        return self._provider

    @property
    def enabled(self) -> bool:
        return bool(self._api_key) and self._provider in PROVIDERS

    def configure(self, api_key: str | None, provider: str = "openai") -> None:
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown AI provider '{provider}'.")
        self._api_key = api_key.strip() if api_key else None
        self._provider = provider

    def disable(self) -> None:
        self._api_key = None

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat turn and return the provider's text reply."""
        if not self.enabled or self._provider is None:
            raise RemoteServiceError("AI provider is not configured.")
        spec = PROVIDERS[self._provider]
        headers = {"Content-Type": "application/json"}
        if self._provider == "openai":
            headers["Authorization"] = f"Bearer {self._api_key}"
            payload: Dict[str, Any] = {
                "model": spec.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "max_tokens": MAX_TOKENS,
                "temperature": 0.7,
            }
        else:
            headers["x-api-key"] = self._api_key
            headers["anthropic-version"] = ANTHROPIC_VERSION
            payload = {
                "model": spec.model,
                "system": system_prompt,
                "messages": [{"role": "user", "content": user_prompt}],
                "max_tokens": MAX_TOKENS,
            }
        try:
            response = self._session.post(spec.url, headers=headers, json=payload, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise RemoteServiceError(f"{self._provider} request failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteServiceError(f"{self._provider} returned invalid JSON") from exc
        try:
            if self._provider == "openai":
                text = data["choices"][0]["message"]["content"]
            else:
                text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise RemoteServiceError(f"Unexpected {self._provider} response shape") from exc
        if not isinstance(text, str) or not text.strip():
            raise RemoteServiceError(f"{self._provider} returned an empty reply")
        return text.strip()

    def get_hint(self, context: Mapping[str, Any], level: int, character: str) -> Hint:
        system_prompt = CHARACTER_PROMPTS.get(character, CHARACTER_PROMPTS["mentor"])
        return Hint(source="ai", text=self.complete(system_prompt, build_hint_prompt(context, level)))

    def evaluate_prompt(self, user_prompt: str, goal: str) -> PromptEvaluation:
        ai_response = self.complete(_RESPONDER_PROMPT, user_prompt)
        judge_prompt = (
            f'Goal: "{goal}"\n'
            f'AI Response: "{ai_response}"\n'
            'Does the response meet the goal? Reply with ONLY valid JSON: '
            '{"meets_goal": true/false, "feedback": "brief explanation"}'
        )
        verdict_text = self.complete(_JUDGE_PROMPT, judge_prompt)
        try:
            verdict = json.loads(verdict_text)
            meets_goal = verdict["meets_goal"] is True
            feedback = str(verdict.get("feedback", ""))
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Could not parse prompt evaluation verdict: %r", verdict_text)
            meets_goal, feedback = False, "Could not evaluate response."
        return PromptEvaluation(ai_response=ai_response, meets_goal=meets_goal, feedback=feedback, source="ai")


class LocalPromptEvaluator:
    """Deterministic keyword evaluator used for offline play."""

    DEFAULT_FEEDBACK = "Try to be more specific in your prompt."
    DEFAULT_SUCCESS = "Great prompt! You covered every requirement."
    DEFAULT_MISS_RESPONSE = "Here is some general information related to your request..."

    def evaluate(self, user_prompt: str, goal_config: Mapping[str, Any]) -> PromptEvaluation:
        prompt = user_prompt.lower()
        criteria: Sequence[Mapping[str, Any]] = goal_config.get("criteria") or []
        if not criteria:
            return self._miss(goal_config, self.DEFAULT_FEEDBACK)
        for criterion in criteria:
            keywords = [str(keyword).lower() for keyword in criterion.get("keywords", [])]
            if not any(keyword in prompt for keyword in keywords):
                label = criterion.get("label", "requirement")
                return self._miss(goal_config, str(criterion.get("feedback") or f"Your prompt is missing the {label}."))
        return PromptEvaluation(
            ai_response=str(goal_config.get("successResponse") or "Done."),
            meets_goal=True,
            feedback=str(goal_config.get("successFeedback") or self.DEFAULT_SUCCESS),
            source="fallback",
        )

    def _miss(self, goal_config: Mapping[str, Any], feedback: str) -> PromptEvaluation:
        return PromptEvaluation(
            ai_response=str(goal_config.get("missResponse") or self.DEFAULT_MISS_RESPONSE),
            meets_goal=False,
            feedback=feedback,
            source="fallback",
        )


class PromptEvaluationService:
    """Judges prompt-writing puzzles remotely when possible, locally otherwise."""

    def __init__(self, client: AIProviderClient | None = None, local: LocalPromptEvaluator | None = None) -> None:
        self._client = client
        self._local = local or LocalPromptEvaluator()

    def evaluate(self, user_prompt: str, goal_config: Mapping[str, Any]) -> PromptEvaluation:
        if self._client is not None and self._client.enabled:
            try:
                return self._client.evaluate_prompt(user_prompt, str(goal_config.get("goal", "")))
            except RemoteServiceError as exc:
                logger.warning("Prompt evaluation failed, using local evaluator: %s", exc)
        return self._local.evaluate(user_prompt, goal_config)
