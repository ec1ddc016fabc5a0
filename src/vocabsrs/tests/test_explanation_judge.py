"""Tests for explanation judges."""
import json

import httpx
import pytest

from vocabsrs.config import JudgeSettings
from vocabsrs.services.explanation_judge import (
    JudgeUnavailableError,
    LLMExplanationJudge,
    StaticExplanationJudge,
    parse_verdict,
    strip_code_fence,
)


def _settings(api_key: str = "test-key") -> JudgeSettings:
    return JudgeSettings(
        api_key=api_key,
        base_url="https://llm.test/v1/",
        model="test-model",
        timeout=5,
        temperature=0.6,
    )


def _judge_with_reply(handler) -> LLMExplanationJudge:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return LLMExplanationJudge(_settings(), client=client)


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_static_judge() -> None:
    """Test the fixed-verdict judge."""
    verdict = StaticExplanationJudge(False, "nope").judge("abate", "to lessen", "", "a type of ghost")
    assert verdict.is_correct is False
    assert verdict.feedback == "nope"


def test_strip_code_fence() -> None:
    """Test removing Markdown fences from replies."""
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('  {"a": 1} ') == '{"a": 1}'


def test_parse_verdict() -> None:
    """Test parsing a complete verdict."""
    verdict = parse_verdict('{"is_correct": true, "feedback": "Correct!", "confidence": 0.9}')

    assert verdict.is_correct is True
    assert verdict.feedback == "Correct!"
    assert verdict.confidence == 0.9


def test_parse_verdict_without_confidence() -> None:
    """Test that confidence is optional."""
    verdict = parse_verdict('{"is_correct": false, "feedback": "Not quite.", "confidence": "high"}')

    assert verdict.is_correct is False
    assert verdict.confidence is None


@pytest.mark.parametrize(
    "content",
    ["not json", "[true]", '{"feedback": "ok"}', '{"is_correct": "yes"}', ""],
)
def test_parse_verdict_rejects_malformed(content: str) -> None:
    """Test that unusable replies never turn into a verdict."""
    with pytest.raises(JudgeUnavailableError):
        parse_verdict(content)


def test_llm_judge_request_and_verdict() -> None:
    """Test the chat completion request and the parsed verdict."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion(
            '```json\n{"is_correct": true, "feedback": "Good.", "confidence": 0.8}\n```'
        ))

    verdict = _judge_with_reply(handler).judge(
        "ephemeral", "lasting a very short time", "an ephemeral bloom", "doesn't last long"
    )

    assert verdict.is_correct is True
    assert verdict.feedback == "Good."
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert "doesn't last long" in seen["body"]["messages"][1]["content"]


def test_llm_judge_without_api_key() -> None:
    """Test that a missing key is reported instead of judged false."""
    judge = LLMExplanationJudge(_settings(api_key=""))

    assert judge.available() is False
    with pytest.raises(JudgeUnavailableError):
        judge.judge("abate", "to lessen", "", "to reduce")


@pytest.mark.parametrize("status", [401, 429, 500])
def test_llm_judge_http_error(status: int) -> None:
    """Test that HTTP failures raise JudgeUnavailableError."""
    judge = _judge_with_reply(lambda request: httpx.Response(status, json={"error": "boom"}))

    with pytest.raises(JudgeUnavailableError):
        judge.judge("abate", "to lessen", "", "to reduce")


def test_llm_judge_transport_error() -> None:
    """Test that connection failures raise JudgeUnavailableError."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(JudgeUnavailableError):
        _judge_with_reply(handler).judge("abate", "to lessen", "", "to reduce")


def test_llm_judge_malformed_reply() -> None:
    """Test that a reply without a verdict raises JudgeUnavailableError."""
    judge = _judge_with_reply(lambda request: httpx.Response(200, json=_completion("I think so")))

    with pytest.raises(JudgeUnavailableError):
        judge.judge("abate", "to lessen", "", "to reduce")


def test_llm_judge_without_client_uses_httpx(mocker) -> None:
    """Test the default client path."""
    judge = LLMExplanationJudge(_settings())
    completion = mocker.patch.object(
        judge, "_chat_completion", return_value=_completion('{"is_correct": false, "feedback": "No."}')
    )

    verdict = judge.judge("abate", "to lessen", "", "a ghost")

    completion.assert_called_once()
    assert verdict.is_correct is False


if __name__ == "__main__":
    pytest.main([__file__])
