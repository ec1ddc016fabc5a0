"""Judging of free-text word explanations."""
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from vocabsrs.config import JudgeSettings, settings
from vocabsrs.models.review_models import JudgeResult
from vocabsrs.monitoring import judge_errors

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)

SYSTEM_PROMPT = (
    "You evaluate whether a learner understands an English vocabulary word. "
    "The learner's input may be their own definition or their own example sentence. "
    "Focus on the core meaning and appropriate usage. Respond with a JSON object "
    'with keys "is_correct" (boolean, true if the input is substantially correct), '
    '"feedback" (string, brief constructive feedback; if incorrect, explain why) '
    'and "confidence" (number from 0.0 to 1.0).'
)


class JudgeUnavailableError(RuntimeError):
    """Raised when no verdict could be obtained; the review must not be recorded."""


class ExplanationJudge(ABC):
    """Decides whether a user's explanation shows they remember a word."""

    @abstractmethod
    def judge(self, word: str, definition: str, example: str, user_text: str) -> JudgeResult:
        """Judge ``user_text`` against the word's definition and example."""
        raise NotImplementedError("Subclasses must implement this method")


class StaticExplanationJudge(ExplanationJudge):
    """Judge that always returns the same verdict."""

    def __init__(self, is_correct: bool = True, feedback: str = ""):
        self.is_correct = is_correct
        self.feedback = feedback

    def judge(self, word: str, definition: str, example: str, user_text: str) -> JudgeResult:
        return JudgeResult(is_correct=self.is_correct, feedback=self.feedback, confidence=1.0)


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence around a model reply."""
    text = text.strip()
    match = FENCE_RE.match(text)
    if match and match.group(2):
        return match.group(2).strip()
    return text


def parse_verdict(content: str) -> JudgeResult:
    """Parse a model reply into a verdict.

    Raises JudgeUnavailableError when the reply is not a usable verdict.
    """
    try:
        data = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise JudgeUnavailableError(f"Judge reply is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise JudgeUnavailableError("Judge reply is not a JSON object")

    is_correct = data.get("is_correct")
    if not isinstance(is_correct, bool):
        raise JudgeUnavailableError(f"Judge reply has no boolean is_correct: {is_correct!r}")

    confidence = data.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        confidence = None

    return JudgeResult(
        is_correct=is_correct,
        feedback=str(data.get("feedback") or ""),
        confidence=float(confidence) if confidence is not None else None,
    )


def _extract_content(payload: Dict[str, Any]) -> str:
    choices = payload.get("choices") or []
    if not choices:
        return ""
    message = choices[0].get("message") or {}
    return str(message.get("content") or "").strip()


class LLMExplanationJudge(ExplanationJudge):
    """Judge backed by an OpenAI-compatible chat completions endpoint."""

    def __init__(self, judge_settings: Optional[JudgeSettings] = None, client: Optional[httpx.Client] = None):
        self.settings = judge_settings or settings.judge
        self.client = client

    def available(self) -> bool:
        return bool(self.settings.api_key)

    def _build_payload(self, word: str, definition: str, example: str, user_text: str) -> Dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": (
                        f'The target word is "{word}".\n'
                        f'Its definition is: "{definition}"\n'
                        f'An example sentence is: "{example}"\n'
                        f'The user provided the following explanation or example sentence: "{user_text}"'
                    ),
                },
            ],
            "response_format": {"type": "json_object"},
            "temperature": self.settings.temperature,
        }

    def _chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = self.settings.base_url.rstrip("/") + "/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }
        if self.client is not None:
            resp = self.client.post(url, headers=headers, json=payload, timeout=self.settings.timeout)
            resp.raise_for_status()
            return resp.json()
        with httpx.Client(timeout=self.settings.timeout) as client:
            resp = client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            return resp.json()

    def judge(self, word: str, definition: str, example: str, user_text: str) -> JudgeResult:
        if not self.available():
            judge_errors.labels(error_type="missing_api_key").inc()
            raise JudgeUnavailableError("LLM_API_KEY is not configured")

        try:
            data = self._chat_completion(self._build_payload(word, definition, example, user_text))
        except httpx.HTTPStatusError as e:
            judge_errors.labels(error_type=f"http_{e.response.status_code}").inc()
            logger.error(f"Judge request for {word!r} failed with status {e.response.status_code}")
            raise JudgeUnavailableError(f"Judge request failed: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            judge_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Judge request for {word!r} failed: {e}")
            raise JudgeUnavailableError(f"Judge request failed: {e}") from e

        try:
            verdict = parse_verdict(_extract_content(data))
        except JudgeUnavailableError as e:
            judge_errors.labels(error_type="malformed_reply").inc()
            logger.error(f"Unusable judge reply for {word!r}: {e}")
            raise
        logger.info(f"Explanation of {word!r} judged correct={verdict.is_correct}")
        return verdict
