"""Tests for the LLM client: JSON extraction, retries and provider selection."""

import os
from unittest.mock import MagicMock, patch

import pytest
from google.genai import errors as genai_errors
from pydantic import BaseModel

from conftest import ScriptedProvider
from utils.llm import (
    APIError,
    ClaudeLLMProvider,
    GeminiLLMProvider,
    LLMClient,
    LLMError,
    LLMRequest,
    LLMProvider,
    LLMResponse,
    RateLimitError,
    RetryableError,
    ValidationError,
    create_llm_client,
    extract_json,
    parse_structured,
)


class Verdict(BaseModel):
    score: float
    label: str


class TestExtractJson:

    def test_plain_object(self):
        assert extract_json('  {"a": 1}  ') == '{"a": 1}'

    def test_fenced_block(self):
        content = 'Here you go:\n```json\n{"a": 1}\n```\nThanks'
        assert extract_json(content) == '{"a": 1}'

    def test_embedded_object(self):
        assert extract_json('Result: {"a": {"b": 2}} done') == '{"a": {"b": 2}}'

    def test_no_object(self):
        assert extract_json("no json here") is None


class TestParseStructured:

    def test_valid(self):
        verdict = parse_structured('{"score": 0.5, "label": "ok"}', Verdict)
        assert verdict == Verdict(score=0.5, label="ok")

    def test_schema_mismatch(self):
        with pytest.raises(ValidationError):
            parse_structured('{"score": "high"}', Verdict)

    def test_malformed_json(self):
        with pytest.raises(ValidationError):
            parse_structured('{"score": 0.5,', Verdict)

    def test_missing_json(self):
        with pytest.raises(ValidationError):
            parse_structured("nothing", Verdict)


def _client(provider: ScriptedProvider, retries: int = 2) -> LLMClient:
    return LLMClient(provider=provider, default_retry_count=retries, default_retry_delay=0, rate_limit_delay=0)


class TestLLMClient:

    @pytest.mark.asyncio
    async def test_unstructured_returns_response(self):
        client = _client(ScriptedProvider(["hello"]))
        response = await client.call("prompt")
        assert isinstance(response, LLMResponse)
        assert response.content == "hello"

    @pytest.mark.asyncio
    async def test_structured_returns_parsed_model(self):
        client = _client(ScriptedProvider(['{"score": 1, "label": "x"}']))
        verdict = await client.call("prompt", response_format=Verdict)
        assert verdict == Verdict(score=1, label="x")

    @pytest.mark.asyncio
    async def test_request_carries_settings(self):
        provider = ScriptedProvider(["ok"])
        await _client(provider).call("prompt", temperature=0.1, max_tokens=50, metadata={"k": "v"})

        request = provider.requests[0]
        assert request.prompt == "prompt"
        assert request.temperature == 0.1
        assert request.max_tokens == 50
        assert request.metadata == {"k": "v"}

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        provider = ScriptedProvider([RuntimeError("boom"), APIError("503"), "recovered"])
        response = await _client(provider).call("prompt")
        assert response.content == "recovered"
        assert len(provider.requests) == 3

    @pytest.mark.asyncio
    async def test_retries_invalid_output(self):
        provider = ScriptedProvider(["not json", '{"score": 2, "label": "y"}'])
        verdict = await _client(provider).call("prompt", response_format=Verdict)
        assert verdict.score == 2

    @pytest.mark.asyncio
    async def test_validation_error_after_retries(self):
        provider = ScriptedProvider(default="still not json")
        with pytest.raises(ValidationError):
            await _client(provider, retries=1).call("prompt", response_format=Verdict)
        assert len(provider.requests) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_exhaustion(self):
        provider = ScriptedProvider([RateLimitError("slow down")] * 3)
        with pytest.raises(RateLimitError):
            await _client(provider).call("prompt")
        assert len(provider.requests) == 3

    @pytest.mark.asyncio
    async def test_generic_failure_wrapped(self):
        provider = ScriptedProvider([RuntimeError("boom")] * 2)
        with pytest.raises(LLMError, match="Failed after 1 retries"):
            await _client(provider, retries=1).call("prompt")

    @pytest.mark.asyncio
    async def test_empty_structured_response(self):
        client = _client(ScriptedProvider([""]))
        with pytest.raises(ValidationError):
            await client.call("prompt", response_format=Verdict)


class FlakyProvider(LLMProvider):
    """Fails with a retryable rate limit ``failures`` times, then answers."""

    max_retries = 2

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    async def send(self, request):
        self.calls += 1
        if self.calls <= self.failures:
            raise RetryableError(RateLimitError("busy"))
        return '{"score": 3, "label": "z"}', {"input_tokens": 4, "output_tokens": 2}


class TestProviderRetries:

    @pytest.mark.asyncio
    async def test_recovers_within_budget(self):
        provider = FlakyProvider(failures=2)
        response = await provider.call_single(LLMRequest(prompt="p", response_format=Verdict))

        assert provider.calls == 3
        assert response.parsed_data == Verdict(score=3, label="z")
        assert response.token_usage == {"input_tokens": 4, "output_tokens": 2}

    @pytest.mark.asyncio
    async def test_raises_underlying_error_when_exhausted(self):
        provider = FlakyProvider(failures=3)
        with pytest.raises(RateLimitError):
            await provider.call_single(LLMRequest(prompt="p"))
        assert provider.calls == 3


class TestGeminiProvider:

    @pytest.fixture
    def provider(self):
        with patch("utils.llm.genai.Client") as client_cls:
            provider = GeminiLLMProvider(api_key="test-key", max_retries=0, retry_delay=0)
            provider.generate = client_cls.return_value.models.generate_content
            yield provider

    @pytest.mark.asyncio
    async def test_structured_call(self, provider):
        usage = MagicMock(prompt_token_count=10, candidates_token_count=5, total_token_count=15)
        provider.generate.return_value = MagicMock(text='{"score": 0.4, "label": "fine"}', usage_metadata=usage)

        response = await provider.call_single(LLMRequest(prompt="p", response_format=Verdict, temperature=0.2))

        assert response.parsed_data == Verdict(score=0.4, label="fine")
        assert response.token_usage == {"input_tokens": 10, "output_tokens": 5, "total_tokens": 15}
        config = provider.generate.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert config.temperature == 0.2

    @pytest.mark.asyncio
    async def test_rate_limit(self, provider):
        provider.generate.side_effect = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )
        with pytest.raises(RateLimitError):
            await provider.call_single(LLMRequest(prompt="p"))

    @pytest.mark.asyncio
    async def test_server_error_retried(self, provider):
        provider.max_retries = 1
        provider.generate.side_effect = [
            genai_errors.ServerError(503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}}),
            MagicMock(text="recovered", usage_metadata=None),
        ]

        response = await provider.call_single(LLMRequest(prompt="p"))

        assert response.content == "recovered"
        assert provider.generate.call_count == 2

    @pytest.mark.asyncio
    async def test_client_error(self, provider):
        provider.generate.side_effect = genai_errors.ClientError(
            400, {"error": {"code": 400, "message": "bad request", "status": "INVALID_ARGUMENT"}}
        )
        with pytest.raises(APIError):
            await provider.call_single(LLMRequest(prompt="p"))


class TestCreateLLMClient:

    def test_no_key_in_environment(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="No LLM API key"):
                create_llm_client()

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider type"):
            create_llm_client("mystery", api_key="k")

    def test_gemini_requires_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError):
                create_llm_client("gemini")

    def test_gemini_from_environment(self):
        with patch.dict(os.environ, {"API_KEY": "from-env"}, clear=True), patch("utils.llm.genai.Client"):
            client = create_llm_client()
        assert isinstance(client.provider, GeminiLLMProvider)
        assert client.provider.api_key == "from-env"

    def test_claude_from_environment(self):
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "anthropic"}, clear=True):
            client = create_llm_client(model="claude-test")
        assert isinstance(client.provider, ClaudeLLMProvider)
        assert client.provider.model == "claude-test"
