"""
Base class for the LLM collaborators.

Each collaborator pairs an LLM path (``execute``) with a deterministic
``fallback``. ``execute_with_tracking`` runs the former and substitutes the
latter on any failure, so callers never see LLM errors.
"""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from utils.llm import LLMClient, LLMError, LLMResponse
from agents.templates import TemplateManager, get_template_manager


T = TypeVar("T", bound=BaseModel)


@dataclass
class AgentMetrics:
    """Running counters for one collaborator instance."""
    llm_calls: int = 0
    llm_tokens: int = 0
    llm_latency_ms: float = 0.0
    errors: int = 0
    fallbacks: int = 0

    @property
    def avg_latency_ms(self) -> float:
        return self.llm_latency_ms / self.llm_calls if self.llm_calls else 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "llm_calls": self.llm_calls,
            "llm_tokens": self.llm_tokens,
            "avg_latency_ms": self.avg_latency_ms,
            "errors": self.errors,
            "fallbacks": self.fallbacks,
        }


@dataclass
class AgentConfig:
    """LLM call settings shared by the collaborators."""
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4096
    llm_retry_count: int = 2
    enable_metrics: bool = True


class AgentResult(BaseModel):
    """Outcome of one collaborator run; ``data`` is always populated."""
    success: bool
    data: Dict[str, Any]
    error: Optional[str] = None
    used_fallback: bool = False
    agent_id: str
    execution_time_ms: float = 0.0
    metrics: Optional[Dict[str, Any]] = None


class BaseAgent(ABC):
    """
    Abstract LLM collaborator.

    Subclasses implement:
    - ``execute``: the LLM path, returning the result payload
    - ``fallback``: the payload to use when the LLM path fails
    """

    def __init__(
        self,
        agent_id: Optional[str] = None,
        llm_client: Optional[LLMClient] = None,
        config: Optional[AgentConfig] = None,
        template_manager: Optional[TemplateManager] = None
    ):
        self.agent_id = agent_id or f"{self.__class__.__name__}_{uuid.uuid4().hex[:8]}"
        self.llm_client = llm_client
        self.config = config or AgentConfig()
        self.template_manager = template_manager or get_template_manager()
        self.metrics = AgentMetrics() if self.config.enable_metrics else None

        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def agent_type(self) -> str:
        pass

    @abstractmethod
    async def execute(self, **kwargs) -> Dict[str, Any]:
        """LLM path. May raise; failures are handled by the caller."""
        pass

    @abstractmethod
    def fallback(self, **kwargs) -> Dict[str, Any]:
        """Deterministic payload used when ``execute`` fails. Must not raise."""
        pass

    async def llm_call(
        self,
        prompt: str,
        response_format: Optional[Type[T]] = None,
        temperature: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Union[LLMResponse, T]:
        """
        Send ``prompt`` through the configured client.

        Returns the parsed model when ``response_format`` is given, the raw
        response otherwise. Raises ``LLMError`` when there is no client.
        """
        if not self.llm_client:
            raise LLMError("No LLM client configured")

        start_time = time.perf_counter()
        try:
            result = await self.llm_client.call(
                prompt=prompt,
                response_format=response_format,
                temperature=self.config.llm_temperature if temperature is None else temperature,
                max_tokens=self.config.llm_max_tokens,
                retry_count=self.config.llm_retry_count,
                metadata={"agent_id": self.agent_id, "agent_type": self.agent_type, **(metadata or {})},
            )
        except Exception:
            if self.metrics:
                self.metrics.errors += 1
            raise

        if self.metrics:
            self.metrics.llm_calls += 1
            self.metrics.llm_latency_ms += (time.perf_counter() - start_time) * 1000
            usage = getattr(result, "token_usage", None) or {}
            self.metrics.llm_tokens += usage.get("input_tokens", 0) + usage.get("output_tokens", 0)
        return result

    async def llm_call_with_template(
        self,
        template_name: str,
        template_variables: Optional[Dict[str, Any]] = None,
        response_format: Optional[Type[T]] = None,
        temperature: Optional[float] = None,
    ) -> Union[LLMResponse, T]:
        """Render a named prompt template and send it."""
        prompt = await self.template_manager.render_template(template_name, template_variables or {})
        return await self.llm_call(
            prompt=prompt,
            response_format=response_format,
            temperature=temperature,
            metadata={"template_name": template_name},
        )

    async def execute_with_tracking(self, **kwargs) -> AgentResult:
        """Run ``execute``, substituting ``fallback`` on any error. Never raises."""
        start_time = time.perf_counter()
        error = None
        try:
            data = await self.execute(**kwargs)
        except Exception as e:
            error = e
            data = self.fallback(**kwargs)
            if self.metrics:
                self.metrics.fallbacks += 1

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        extra = {"agent_id": self.agent_id, "execution_time_ms": elapsed_ms}
        if error is None:
            self.logger.debug(f"{self.agent_type} completed", extra=extra)
        else:
            extra["error_type"] = type(error).__name__
            self.logger.warning(f"{self.agent_type} fell back: {error}", extra=extra)

        return AgentResult(
            success=error is None,
            data=data,
            error=str(error) if error else None,
            used_fallback=error is not None,
            agent_id=self.agent_id,
            execution_time_ms=elapsed_ms,
            metrics=self.metrics.as_dict() if self.metrics else None,
        )
