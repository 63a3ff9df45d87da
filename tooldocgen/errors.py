"""Exception hierarchy shared across tooldocgen components."""

from __future__ import annotations


class ToolDocGenError(RuntimeError):
    """Base class for failures raised by tooldocgen."""


class ToolListError(ToolDocGenError):
    """Raised when the tool list JSON cannot be read or has an unexpected shape."""


class NameContextError(ToolDocGenError):
    """Raised when the naming lookup tables cannot be loaded."""


class GenerationError(ToolDocGenError):
    """Raised when a text-generation call fails for good."""


class TruncationError(GenerationError):
    """Raised when the backend stops because the output token limit was reached."""

    def __init__(self, message: str, *, max_output_tokens: int | None = None, partial: str = "") -> None:
        super().__init__(message)
        self.max_output_tokens = max_output_tokens
        self.partial = partial


class GenerationCancelled(GenerationError):
    """Raised when a run is cancelled while a generation call is pending."""


__all__ = [
    "GenerationCancelled",
    "GenerationError",
    "NameContextError",
    "ToolDocGenError",
    "ToolListError",
    "TruncationError",
]
