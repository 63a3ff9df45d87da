"""Reads composed tool files and groups them into families."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Generic, List, Optional, TypeVar, Union

from ..composer import extract_command
from ..logging import get_logger
from ..naming import NameContext
from ..naming.display import title_words
from ..postproc.text import strip_front_matter

T = TypeVar("T")

_TOOL_NAME = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_NAMESPACE = re.compile(r"@mcpcli\s+([^\r\n]+)")
_TOOL_COUNT = re.compile(r"\*\*Tool Count:\*\*\s*(\d+)")


@dataclass(frozen=True)
class Found(Generic[T]):
    """A successfully extracted value."""

    value: T


@dataclass(frozen=True)
class NotFound:
    """Extraction did not match; ``what`` names the missing structure."""

    what: str


Extraction = Union[Found[T], NotFound]


def extract_tool_name(content: str) -> Extraction[str]:
    match = _TOOL_NAME.search(content)
    return Found(match.group(1).strip()) if match else NotFound("H1 heading")


def extract_namespace(content: str) -> Extraction[str]:
    match = _NAMESPACE.search(content)
    if match:
        token = match.group(1).replace("-->", " ").split()
        if token:
            return Found(token[0].lower())
    return NotFound("@mcpcli marker")


def extract_description(content: str) -> Extraction[str]:
    for line in content.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("<!--") or trimmed.startswith("#"):
            continue
        return Found(trimmed)
    return NotFound("description line")


def extract_tool_count(content: str) -> Extraction[int]:
    match = _TOOL_COUNT.search(content)
    return Found(int(match.group(1))) if match else NotFound("Tool Count line")


def family_key_from_file_name(file_name: str) -> str:
    """``azure-storage-blob-get.md`` -> ``storage``; ``ai-foundry-*`` keeps both words."""
    parts = [part for part in Path(file_name).stem.split("-") if part]
    if parts and parts[0] == "azure" and len(parts) > 1:
        parts = parts[1:]
    if not parts:
        return "unknown"
    if parts[0] == "ai" and len(parts) > 1:
        return f"{parts[0]}-{parts[1]}"
    return parts[0]


@dataclass(frozen=True)
class ToolContent:
    """One composed tool document, ready to be placed in a family page."""

    tool_name: str
    file_name: str
    family_key: str
    content: str
    command: Optional[str] = None
    description: str = ""


@dataclass
class FamilyGroup:
    """Tools sharing a command namespace, ordered by display name."""

    family_key: str
    display_name: str
    tools: List[ToolContent] = field(default_factory=list)

    @property
    def tool_count(self) -> int:
        return len(self.tools)


def tool_sort_key(tool: ToolContent) -> tuple[str, str, str]:
    """Alphabetical by display name; name and file name break ties deterministically."""
    return (tool.tool_name.casefold(), tool.tool_name, tool.file_name)


class FamilyReader:
    """Parses composed tool files and groups them by family key."""

    def __init__(self, name_context: NameContext | None = None) -> None:
        self.name_context = name_context
        self.logger = get_logger("families.reader")

    def parse(self, content: str, file_name: str) -> ToolContent:
        namespace = extract_namespace(content)
        family_key = (
            namespace.value if isinstance(namespace, Found) else family_key_from_file_name(file_name)
        )
        command = extract_command(content)
        body = strip_front_matter(content).strip()

        name = extract_tool_name(body)
        if isinstance(name, NotFound):
            self.logger.debug("%s has no H1 heading; using file name", file_name)
        description = extract_description(body)
        return ToolContent(
            tool_name=name.value if isinstance(name, Found) else Path(file_name).stem,
            file_name=file_name,
            family_key=family_key,
            content=body,
            command=command,
            description=description.value if isinstance(description, Found) else "",
        )

    def display_name_for(self, family_key: str) -> str:
        if self.name_context is not None:
            brand = self.name_context.brand_for(family_key)
            if brand is not None and (brand.brand_name or brand.short_name):
                return brand.brand_name or brand.short_name
        return title_words(family_key)

    def group(self, tools: List[ToolContent]) -> Dict[str, FamilyGroup]:
        """Group tools by family; the result is independent of input order."""
        families: Dict[str, FamilyGroup] = {}
        for tool in tools:
            family = families.get(tool.family_key)
            if family is None:
                family = FamilyGroup(
                    family_key=tool.family_key,
                    display_name=self.display_name_for(tool.family_key),
                )
                families[tool.family_key] = family
            family.tools.append(tool)
        for family in families.values():
            family.tools.sort(key=tool_sort_key)
        return {key: families[key] for key in sorted(families)}

    def read_directory(self, tools_dir: Path) -> Dict[str, FamilyGroup]:
        if not tools_dir.is_dir():
            raise FileNotFoundError(f"Tools directory not found: {tools_dir}")
        parsed: List[ToolContent] = []
        for path in sorted(tools_dir.glob("*.md")):
            try:
                parsed.append(self.parse(path.read_text(encoding="utf-8"), path.name))
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Failed to parse %s: %s", path.name, exc)
        families = self.group(parsed)
        self.logger.info("Parsed %d tools into %d families", len(parsed), len(families))
        for key, family in families.items():
            self.logger.debug("  %s: %d tools", key, family.tool_count)
        return families


__all__ = [
    "Extraction",
    "FamilyGroup",
    "FamilyReader",
    "Found",
    "NotFound",
    "ToolContent",
    "extract_description",
    "extract_namespace",
    "extract_tool_count",
    "extract_tool_name",
    "family_key_from_file_name",
    "tool_sort_key",
]
