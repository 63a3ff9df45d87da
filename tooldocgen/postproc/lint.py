"""Linting utilities for generated markdown."""

from __future__ import annotations

from typing import List


class MarkdownLinter:
    """Normalizes line endings, blank lines around headings and trailing whitespace."""

    def lint(self, markdown: str) -> str:
        normalized = markdown.replace("\r\n", "\n").replace("\r", "\n")
        lines = normalized.split("\n")
        cleaned: List[str] = []
        in_code = False
        in_front_matter = bool(lines) and lines[0].strip() == "---"
        previous_blank = False

        for index, line in enumerate(lines):
            stripped = line.rstrip()
            if in_front_matter:
                cleaned.append(stripped)
                if index > 0 and stripped == "---":
                    in_front_matter = False
                continue

            if stripped.startswith("```"):
                in_code = not in_code
                cleaned.append(stripped)
                previous_blank = False
                continue

            if not in_code:
                if stripped.startswith("#") and cleaned and cleaned[-1] != "":
                    cleaned.append("")
                if not stripped:
                    if previous_blank:
                        continue
                    previous_blank = True
                    cleaned.append("")
                    continue

            cleaned.append(stripped)
            previous_blank = False

        while cleaned and cleaned[-1] == "":
            cleaned.pop()

        return "\n".join(cleaned) + "\n"
