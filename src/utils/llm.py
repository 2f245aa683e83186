"""
LLM transport for the collaborators.

Two retry layers:
- providers back off on transient transport failures (``RetryableError``)
- ``LLMClient`` retries whole calls, including responses that fail schema
  validation, and normalises what finally escapes into ``LLMError``
"""

import asyncio
import json
import logging
import os
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple, Type, TypeVar, Union

import aiohttp
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pydantic import BaseModel, ValidationError as PydanticValidationError


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

TokenUsage = Dict[str, int]


class LLMError(Exception):
    """Any failure talking to a model."""


class RateLimitError(LLMError):
    """The provider refused the call for quota reasons."""


class ValidationError(LLMError):
    """The model answered, but not with the requested structure."""


class APIError(LLMError):
    """The provider returned an error or could not be reached."""


class RetryableError(LLMError):
    """Transient provider failure; ``error`` is raised once retries run out."""

    def __init__(self, error: LLMError):
        super().__init__(str(error))
        self.error = error


@dataclass
class LLMRequest:
    prompt: str
    response_format: Optional[Type[BaseModel]] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResponse:
    content: str
    parsed_data: Optional[BaseModel] = None
    latency_ms: float = 0.0
    token_usage: TokenUsage = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)


_FENCED_JSON = re.compile(r'```(?:json)?\s*(\{.*?\})\s*```', re.DOTALL)
_OUTER_BRACES = re.compile(r'\{.*\}', re.DOTALL)


def extract_json(content: str) -> Optional[str]:
    """Pull a JSON object out of model output, fenced or not."""
    stripped = content.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped
    for pattern in (_FENCED_JSON, _OUTER_BRACES):
        match = pattern.search(content)
        if match:
            return match.group(match.lastindex or 0)
    return None


def parse_structured(content: str, response_format: Type[T]) -> T:
    """Validate model output against ``response_format``."""
    json_str = extract_json(content)
    if json_str is None:
        raise ValidationError("No JSON object found in LLM response")
    try:
        return response_format.model_validate(json.loads(json_str))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError(f"Failed to parse LLM response: {e}")


class LLMProvider(ABC):
    """
    One model backend.

    Subclasses implement ``send``; ``call_single`` adds exponential backoff
    on ``RetryableError`` and structured parsing.
    """

    max_retries: int = 0
    retry_delay: float = 0.0

    @abstractmethod
    async def send(self, request: LLMRequest) -> Tuple[str, TokenUsage]:
        """Return the raw text and token usage for one attempt."""

    async def call_single(self, request: LLMRequest) -> LLMResponse:
        start_time = time.perf_counter()
        for attempt in range(self.max_retries + 1):
            try:
                content, usage = await self.send(request)
                break
            except RetryableError as e:
                if attempt == self.max_retries:
                    raise e.error
                delay = self.retry_delay * (2 ** attempt)
                logger.warning(f"{type(self).__name__}: {e.error}; retrying in {delay}s")
                await asyncio.sleep(delay)

        parsed = None
        if request.response_format and content:
            parsed = parse_structured(content, request.response_format)

        return LLMResponse(
            content=content,
            parsed_data=parsed,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            token_usage=usage,
            metadata=request.metadata,
        )


class GeminiLLMProvider(LLMProvider):
    """Google Gemini through the google-genai SDK, with native JSON mode."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        self.api_key = api_key
        self.model = model
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.client = genai.Client(api_key=api_key)

    def _config_for(self, request: LLMRequest) -> genai_types.GenerateContentConfig:
        options: Dict[str, Any] = {"temperature": request.temperature}
        if request.max_tokens:
            options["max_output_tokens"] = request.max_tokens
        if request.response_format:
            options["response_mime_type"] = "application/json"
            options["response_schema"] = request.response_format
        return genai_types.GenerateContentConfig(**options)

    async def send(self, request: LLMRequest) -> Tuple[str, TokenUsage]:
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=request.prompt,
                config=self._config_for(request),
            )
        except genai_errors.ClientError as e:
            if e.code == 429:
                raise RetryableError(RateLimitError("Gemini rate limit exceeded"))
            raise APIError(f"Gemini API error {e.code}: {e.message}")
        except genai_errors.APIError as e:
            raise RetryableError(APIError(f"Gemini API error {e.code}: {e.message}"))

        usage: TokenUsage = {}
        meta = getattr(response, "usage_metadata", None)
        if meta is not None:
            usage = {
                "input_tokens": meta.prompt_token_count or 0,
                "output_tokens": meta.candidates_token_count or 0,
                "total_tokens": meta.total_token_count or 0,
            }
        return response.text or "", usage


class ClaudeLLMProvider(LLMProvider):
    """Anthropic Messages API over plain HTTP; the schema goes in the prompt."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        base_url: str = "https://api.anthropic.com/v1/messages",
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

    def _payload_for(self, request: LLMRequest) -> Dict[str, Any]:
        prompt = request.prompt
        if request.response_format:
            schema = json.dumps(request.response_format.model_json_schema(), indent=2)
            prompt += f"\n\nRespond with valid JSON that matches this schema:\n```json\n{schema}\n```"
        return {
            "model": self.model,
            "max_tokens": request.max_tokens or 4096,
            "temperature": request.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def send(self, request: LLMRequest) -> Tuple[str, TokenUsage]:
        headers = {
            "content-type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
        }
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.base_url, headers=headers, json=self._payload_for(request)) as response:
                    if response.status == 429:
                        raise RateLimitError("Claude rate limit exceeded")
                    if response.status >= 400:
                        raise APIError(f"Claude API error {response.status}: {await response.text()}")
                    data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RetryableError(APIError(f"Claude request failed: {e}"))

        text = "".join(
            block.get("text", "") for block in data.get("content", []) if block.get("type") == "text"
        )
        usage = data.get("usage", {})
        return text, {
            "input_tokens": usage.get("input_tokens", 0),
            "output_tokens": usage.get("output_tokens", 0),
        }


class LLMClient:
    """Provider wrapper that retries whole calls and returns parsed models."""

    def __init__(
        self,
        provider: LLMProvider,
        default_retry_count: int = 3,
        default_retry_delay: float = 1.0,
        rate_limit_delay: float = 2.0,
    ):
        self.provider = provider
        self.default_retry_count = default_retry_count
        self.default_retry_delay = default_retry_delay
        self.rate_limit_delay = rate_limit_delay

    def _delay_after(self, error: Exception, attempt: int) -> float:
        if isinstance(error, RateLimitError):
            return self.rate_limit_delay
        return self.default_retry_delay * attempt

    @staticmethod
    def _final_error(error: Exception, retries: int) -> LLMError:
        if isinstance(error, (RateLimitError, ValidationError)):
            return error
        return LLMError(f"Failed after {retries} retries: {error}")

    async def call(
        self,
        prompt: str,
        response_format: Optional[Type[T]] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        retry_count: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Union[LLMResponse, T]:
        """
        Send ``prompt`` and return the parsed model, or the raw response when
        no ``response_format`` is given.

        Raises:
            RateLimitError: Still rate limited after every retry.
            ValidationError: Output never matched ``response_format``.
            LLMError: Any other failure after every retry.
        """
        request = LLMRequest(
            prompt=prompt,
            response_format=response_format,
            temperature=temperature,
            max_tokens=max_tokens,
            metadata=metadata or {},
        )
        retries = self.default_retry_count if retry_count is None else retry_count

        for attempt in range(1, retries + 2):
            try:
                response = await self.provider.call_single(request)
            except Exception as e:
                if attempt > retries:
                    logger.error(f"LLM call failed after {retries} retries: {e}")
                    raise self._final_error(e, retries)
                delay = self._delay_after(e, attempt)
                logger.warning(f"LLM attempt {attempt} failed ({type(e).__name__}), retrying in {delay}s: {e}")
                await asyncio.sleep(delay)
                continue

            logger.info(
                "LLM call completed",
                extra={
                    "prompt_length": len(prompt),
                    "response_length": len(response.content),
                    "latency_ms": response.latency_ms,
                    "attempt": attempt,
                    "tokens": response.token_usage,
                },
            )
            if response_format is None:
                return response
            if response.parsed_data is None:
                raise ValidationError("LLM returned an empty response for a structured request")
            return response.parsed_data


def _key_from_env(names: Sequence[str]) -> Optional[str]:
    return next((os.environ[name] for name in names if os.environ.get(name)), None)


# Provider name -> (class, API key variables in lookup order)
_PROVIDERS = {
    "gemini": (GeminiLLMProvider, ("GEMINI_API_KEY", "API_KEY")),
    "claude": (ClaudeLLMProvider, ("ANTHROPIC_API_KEY",)),
}


def create_llm_client(
    provider_type: Optional[str] = None,
    api_key: Optional[str] = None,
    **kwargs,
) -> LLMClient:
    """
    Build a client for ``provider_type``.

    Without a provider type the first one with a key in the environment is
    used, Gemini first. Extra keyword arguments go to the provider.
    """
    if provider_type is None:
        provider_type = next(
            (name for name, (_, env_names) in _PROVIDERS.items() if _key_from_env(env_names)),
            None,
        )
        if provider_type is None:
            raise ValueError(
                "No LLM API key found in environment. "
                "Set GEMINI_API_KEY (or API_KEY) or ANTHROPIC_API_KEY."
            )

    if provider_type not in _PROVIDERS:
        raise ValueError(f"Unknown provider type: {provider_type}. Supported: {', '.join(_PROVIDERS)}")

    provider_cls, env_names = _PROVIDERS[provider_type]
    api_key = api_key or _key_from_env(env_names)
    if not api_key:
        raise ValueError(f"API key required for {provider_type} provider")
    return LLMClient(provider=provider_cls(api_key=api_key, **kwargs))
