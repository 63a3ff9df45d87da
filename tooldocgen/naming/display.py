"""Human-readable names derived from CLI commands."""

from __future__ import annotations

import re
from typing import List

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def title_words(token: str) -> str:
    words = [word for word in re.split(r"[-_\s]+", token) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def camel_to_title(name: str) -> str:
    """``openWorld`` -> ``Open World``."""
    return title_words(_CAMEL_BOUNDARY.sub(" ", name))


def tool_display_name(command: str) -> str:
    """Build the H1 display name for a tool.

    The area token is dropped. Two-token commands render the action alone,
    three-token commands render ``Group: Action`` and longer commands render
    the group followed by the remaining tokens.
    """
    parts: List[str] = command.split()
    if not parts:
        return "Unknown"
    if len(parts) == 1:
        return title_words(parts[0])
    if len(parts) == 2:
        return title_words(parts[1])
    group = title_words(parts[1])
    rest = " ".join(title_words(part) for part in parts[2:])
    return f"{group}: {rest}"


__all__ = ["camel_to_title", "title_words", "tool_display_name"]
