"""Helpers for cleaning markdown fragments and model output."""

from __future__ import annotations

import re

_CODE_FENCE = re.compile(r"```(?:markdown|md)?\s*(.*?)\s*```", re.DOTALL)


def strip_front_matter(content: str) -> str:
    """Drop a leading ``---`` delimited block and any whitespace after it."""
    normalized = content.replace("\r\n", "\n")
    trimmed = normalized.lstrip("\ufeff \t\n")
    if not trimmed.startswith("---"):
        return normalized
    lines = trimmed.split("\n")
    for index in range(1, len(lines)):
        if lines[index].strip() == "---":
            return "\n".join(lines[index + 1 :]).lstrip()
    # Unterminated block: leave the content as-is.
    return normalized


def strip_code_fences(content: str) -> str:
    """Return the body of a fenced block when the model wrapped its answer in one."""
    text = content.strip()
    if text.startswith("```"):
        match = _CODE_FENCE.search(text)
        if match:
            return match.group(1).strip()
    return text


def looks_like_markdown(content: str) -> bool:
    """Cheap check that model output is a markdown page rather than an apology."""
    text = content.strip()
    return text.startswith("---") or text.startswith("#")


__all__ = ["looks_like_markdown", "strip_code_fences", "strip_front_matter"]
