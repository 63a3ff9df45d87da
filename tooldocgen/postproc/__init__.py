"""Markdown post-processing."""

from .lint import MarkdownLinter
from .text import looks_like_markdown, strip_code_fences, strip_front_matter

__all__ = [
    "MarkdownLinter",
    "looks_like_markdown",
    "strip_code_fences",
    "strip_front_matter",
]
