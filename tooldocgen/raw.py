"""Raw tool skeletons carrying placeholders for fragment composition."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Sequence

from .logging import get_logger
from .models import ToolDescriptor
from .naming import FragmentKind, NameContext, resolve_file_name, tool_display_name
from .prompting import PromptLibrary
from .report import BatchSummary


class RawToolGenerator:
    """Writes one skeleton per tool under its resolved tool file name."""

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
        self.logger = get_logger("raw")

    def render(self, tool: ToolDescriptor) -> str:
        return self.library.render(
            "raw-tool.md.j2",
            {
                "version": self.version,
                "command": tool.command,
                "display_name": tool_display_name(tool.command),
                "description": " ".join(tool.description.split()),
            },
        )

    def write_all(
        self,
        tools: Sequence[ToolDescriptor],
        raw_dir: Path,
        *,
        cancel_event: threading.Event | None = None,
    ) -> BatchSummary:
        summary = BatchSummary(stage="raw")
        raw_dir.mkdir(parents=True, exist_ok=True)
        for tool in tools:
            label = tool.command or "<missing command>"
            if cancel_event is not None and cancel_event.is_set():
                summary.record_skip(label)
                continue
            if not tool.command:
                summary.record_failure(label, "tool has no command")
                continue
            target = raw_dir / resolve_file_name(tool.command, self.name_context, FragmentKind.RAW)
            try:
                target.write_text(self.render(tool), encoding="utf-8")
            except OSError as exc:
                self.logger.error("Failed to write raw skeleton for %s: %s", label, exc)
                summary.record_failure(label, str(exc))
                continue
            summary.record_success(label)
        self.logger.info("Wrote %d raw tool files to %s", len(summary.succeeded), raw_dir)
        return summary


__all__ = ["RawToolGenerator"]
