"""Prompt and fragment templates."""

from .library import PromptLibrary

__all__ = ["PromptLibrary"]
