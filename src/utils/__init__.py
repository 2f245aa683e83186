"""
Utility modules for the EduInsight backend.
"""

from .llm import (
    APIError,
    LLMClient,
    LLMError,
    LLMProvider,
    LLMRequest,
    LLMResponse,
    RateLimitError,
    RetryableError,
    ValidationError,
    create_llm_client,
)

__all__ = [
    'LLMClient',
    'LLMProvider',
    'LLMRequest',
    'LLMResponse',
    'LLMError',
    'RateLimitError',
    'RetryableError',
    'ValidationError',
    'APIError',
    'create_llm_client',
]
