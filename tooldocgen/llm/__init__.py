"""Text-generation backend adapters."""

from .client import RetryingContentClient, is_rate_limited
from .runner import Completion, LLMRequest, LLMRunner

__all__ = [
    "Completion",
    "LLMRequest",
    "LLMRunner",
    "RetryingContentClient",
    "is_rate_limited",
]
