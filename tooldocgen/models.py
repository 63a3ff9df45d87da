"""Core data models shared across tooldocgen components."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ToolListError

# Metadata flags the annotation fragment renders, in display order.
METADATA_FLAGS: Tuple[str, ...] = (
    "destructive",
    "idempotent",
    "openWorld",
    "readOnly",
    "secret",
    "localRequired",
)


@dataclass(frozen=True)
class MetadataFlag:
    """A boolean tool annotation with an optional explanation."""

    value: bool
    description: Optional[str] = None


@dataclass(frozen=True)
class ToolParameter:
    """A single command-line option accepted by a tool."""

    name: str
    type: str = "string"
    required: bool = False
    description: str = ""


@dataclass(frozen=True)
class ToolDescriptor:
    """Normalized view of one CLI tool from the source tool list."""

    command: str
    name: str = ""
    description: str = ""
    parameters: Tuple[ToolParameter, ...] = ()
    metadata: Mapping[str, MetadataFlag] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def area(self) -> str:
        parts = self.command.split()
        return parts[0] if parts else ""


def load_tool_list(path: Path) -> List[ToolDescriptor]:
    """Read the tool list JSON produced by the CLI and return typed descriptors."""
    if not path.is_file():
        raise FileNotFoundError(f"Tool list not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ToolListError(f"Unable to read tool list {path}: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("results", payload.get("tools"))
    if not isinstance(payload, list):
        raise ToolListError(f"Tool list {path} must contain an array of tools")

    tools: List[ToolDescriptor] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise ToolListError(f"Tool entry #{index} in {path} is not an object")
        tools.append(parse_tool(entry))
    return tools


def parse_tool(entry: Mapping[str, Any]) -> ToolDescriptor:
    """Convert a raw JSON object into a ToolDescriptor."""
    raw_params = entry.get("parameters")
    if raw_params is None:
        raw_params = entry.get("option")
    parameters: List[ToolParameter] = []
    for raw in raw_params or []:
        if not isinstance(raw, dict) or not raw.get("name"):
            continue
        parameters.append(
            ToolParameter(
                name=str(raw["name"]),
                type=str(raw.get("type") or "string"),
                required=bool(raw.get("required", False)),
                description=str(raw.get("description") or ""),
            )
        )

    metadata: Dict[str, MetadataFlag] = {}
    raw_metadata = entry.get("metadata")
    if isinstance(raw_metadata, dict):
        for key, value in raw_metadata.items():
            if isinstance(value, dict):
                metadata[key] = MetadataFlag(
                    value=bool(value.get("value", False)),
                    description=value.get("description"),
                )
            elif isinstance(value, bool):
                metadata[key] = MetadataFlag(value=value)

    return ToolDescriptor(
        command=str(entry.get("command") or "").strip(),
        name=str(entry.get("name") or ""),
        description=str(entry.get("description") or ""),
        parameters=tuple(parameters),
        metadata=MappingProxyType(metadata),
    )


__all__ = [
    "METADATA_FLAGS",
    "MetadataFlag",
    "ToolDescriptor",
    "ToolParameter",
    "load_tool_list",
    "parse_tool",
]
