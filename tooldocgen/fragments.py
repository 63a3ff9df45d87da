"""Deterministic annotation and parameter fragments."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .logging import get_logger
from .models import METADATA_FLAGS, ToolDescriptor, ToolParameter
from .naming import FragmentKind, NameContext, resolve_file_name
from .naming.display import camel_to_title
from .prompting import PromptLibrary
from .report import BatchSummary


@dataclass(frozen=True)
class ParameterRow:
    """A parameter prepared for the parameter table."""

    name: str
    display_name: str
    required: bool
    description: str


def parameter_display_name(name: str) -> str:
    """``--resource-group`` -> ``Resource group``."""
    words = name.lstrip("-").replace("_", "-").split("-")
    text = " ".join(word for word in words if word)
    return text[:1].upper() + text[1:]


def sort_parameters(parameters: Iterable[ToolParameter]) -> List[ParameterRow]:
    """Required parameters first, then alphabetical by display name, ignoring case."""
    rows = [
        ParameterRow(
            name=param.name,
            display_name=parameter_display_name(param.name),
            required=param.required,
            description=" ".join(param.description.split()).replace("|", "\\|"),
        )
        for param in parameters
    ]
    return sorted(rows, key=lambda row: (not row.required, row.display_name.casefold()))


class FragmentGenerator:
    """Writes annotation and parameter fragments named by the resolver."""

    def __init__(
        self,
        name_context: NameContext,
        library: PromptLibrary | None = None,
        *,
        version: str = "unknown",
    ) -> None:
        self.name_context = name_context
        self.library = library or PromptLibrary()
        self.version = version
        self.logger = get_logger("fragments")

    def render_annotations(self, tool: ToolDescriptor) -> str:
        flags: List[Dict[str, object]] = []
        for key in METADATA_FLAGS:
            flag = tool.metadata.get(key)
            flags.append(
                {
                    "label": camel_to_title(key),
                    "value": bool(flag and flag.value),
                    "description": flag.description if flag else None,
                }
            )
        return self.library.render(
            "annotations.md.j2",
            {
                "version": self.version,
                "command": tool.command,
                "file_name": resolve_file_name(tool.command, self.name_context, FragmentKind.ANNOTATION),
                "flags": flags,
            },
        )

    def render_parameters(self, tool: ToolDescriptor) -> str:
        return self.library.render(
            "parameters.md.j2",
            {
                "version": self.version,
                "command": tool.command,
                "file_name": resolve_file_name(tool.command, self.name_context, FragmentKind.PARAMETER),
                "parameters": sort_parameters(tool.parameters),
            },
        )

    def write_all(
        self,
        tools: Sequence[ToolDescriptor],
        annotations_dir: Path,
        parameters_dir: Path,
        *,
        cancel_event: threading.Event | None = None,
    ) -> BatchSummary:
        """Write both fragment kinds for every tool; one tool failing never stops the batch."""
        summary = BatchSummary(stage="fragments")
        annotations_dir.mkdir(parents=True, exist_ok=True)
        parameters_dir.mkdir(parents=True, exist_ok=True)
        for tool in tools:
            label = tool.command or "<missing command>"
            if cancel_event is not None and cancel_event.is_set():
                summary.record_skip(label)
                continue
            if not tool.command:
                summary.record_failure(label, "tool has no command")
                continue
            try:
                annotations = self.render_annotations(tool)
                parameters = self.render_parameters(tool)
                (annotations_dir / resolve_file_name(tool.command, self.name_context, FragmentKind.ANNOTATION)).write_text(
                    annotations, encoding="utf-8"
                )
                (parameters_dir / resolve_file_name(tool.command, self.name_context, FragmentKind.PARAMETER)).write_text(
                    parameters, encoding="utf-8"
                )
            except OSError as exc:
                self.logger.error("Failed to write fragments for %s: %s", label, exc)
                summary.record_failure(label, str(exc))
                continue
            summary.record_success(label)
        self.logger.info("Wrote fragments for %d of %d tools", len(summary.succeeded), len(tools))
        return summary


__all__ = ["FragmentGenerator", "ParameterRow", "parameter_display_name", "sort_parameters"]
