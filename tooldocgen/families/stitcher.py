"""Pure string assembly of family documents."""

from __future__ import annotations

import re
from typing import Iterable, Optional

_H1 = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_FIRST_HEADING = re.compile(r"^#{1,2}\s+.+$", re.MULTILINE)


def demote_h1(content: str) -> str:
    """Turn the first H1 heading into an H2 so tools nest under the family title."""
    return _H1.sub(lambda match: f"## {match.group(1).strip()}", content, count=1)


def clean_heading(text: str) -> Optional[str]:
    """Normalise a generated heading to ``## Title``; None when nothing usable remains."""
    for line in text.strip().splitlines():
        candidate = line.strip().lstrip("#").strip().replace("`", "").strip().strip('"')
        if candidate:
            return f"## {candidate}"
    return None


def replace_heading(content: str, heading: str) -> str:
    """Replace the first H1/H2 of a tool section, or prepend ``heading`` if there is none."""
    if _FIRST_HEADING.search(content):
        return _FIRST_HEADING.sub(lambda _: heading, content, count=1)
    return f"{heading}\n\n{content}"


def stitch(metadata: str, tool_sections: Iterable[str], related: str) -> str:
    """Metadata, then each tool section, then related content, separated by blank lines."""
    parts = [metadata.strip()]
    parts.extend(section.strip() for section in tool_sections)
    parts.append(related.strip())
    return "\n\n".join(part for part in parts if part).rstrip() + "\n"


__all__ = ["clean_heading", "demote_h1", "replace_heading", "stitch"]
