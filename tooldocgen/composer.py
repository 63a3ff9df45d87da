"""Placeholder composition of raw tool skeletons with their fragments."""

from __future__ import annotations

import json
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .logging import get_logger
from .naming import FragmentKind, NameContext, resolve_file_name
from .postproc.text import strip_front_matter
from .report import BatchSummary

COMMAND_MARKER = re.compile(r"<!--\s*@mcpcli\s+(.+?)\s*-->")

PLACEHOLDERS: Mapping[FragmentKind, str] = {
    FragmentKind.EXAMPLE_PROMPT: "{{EXAMPLE_PROMPTS_CONTENT}}",
    FragmentKind.PARAMETER: "{{PARAMETERS_CONTENT}}",
    FragmentKind.ANNOTATION: "{{ANNOTATIONS_CONTENT}}",
}

MISSING_REPORT_NAME = "missing-fragments.json"


def missing_marker(kind: FragmentKind) -> str:
    return f"<!-- Content not found: {kind.value} -->"


def extract_command(content: str) -> Optional[str]:
    """Return the command named by the ``@mcpcli`` marker, if any."""
    match = COMMAND_MARKER.search(content)
    return match.group(1).strip() if match else None


@dataclass
class CompositionResult:
    """A composed tool document and the fragments that could not be found."""

    file_name: str
    content: str
    command: Optional[str]
    fragments: Dict[FragmentKind, str] = field(default_factory=dict)
    missing: List[FragmentKind] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing


class FragmentComposer:
    """Fills raw skeleton placeholders with fragment files located by exact name."""

    def __init__(
        self,
        name_context: NameContext,
        fragment_dirs: Mapping[FragmentKind, Path],
    ) -> None:
        unknown = set(fragment_dirs) - set(PLACEHOLDERS)
        if unknown:
            raise ValueError(f"No placeholder for fragment kinds: {sorted(k.value for k in unknown)}")
        self.name_context = name_context
        self.fragment_dirs = dict(fragment_dirs)
        self.logger = get_logger("composer")

    def compose(self, raw_path: Path) -> CompositionResult:
        """Compose a single raw file; missing fragments become visible markers."""
        content = raw_path.read_text(encoding="utf-8")
        return self.compose_text(content, file_name=raw_path.name)

    def compose_text(self, content: str, *, file_name: str) -> CompositionResult:
        command = extract_command(content)
        result = CompositionResult(file_name=file_name, content=content, command=command)
        if command is None:
            self.logger.warning("%s has no @mcpcli command marker; all fragments marked missing", file_name)

        composed = content
        for kind, placeholder in PLACEHOLDERS.items():
            fragment = self._read_fragment(kind, command) if command else None
            if fragment is None:
                result.missing.append(kind)
                body = missing_marker(kind)
            else:
                body = strip_front_matter(fragment).strip()
            result.fragments[kind] = body
            composed = composed.replace(placeholder, body)

        result.content = composed
        return result

    def _read_fragment(self, kind: FragmentKind, command: str) -> Optional[str]:
        directory = self.fragment_dirs.get(kind)
        if directory is None:
            return None
        path = directory / resolve_file_name(command, self.name_context, kind)
        # Exact-name lookup only; fragments are never discovered by scanning.
        if not path.is_file():
            self.logger.debug("Missing %s fragment %s", kind.value, path.name)
            return None
        return path.read_text(encoding="utf-8")

    def compose_directory(
        self,
        raw_dir: Path,
        output_dir: Path,
        *,
        report_dir: Path | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchSummary:
        """Compose every ``*.md`` file in ``raw_dir`` into ``output_dir``.

        A per-kind report of missing fragments is written next to the outputs
        (or under ``report_dir``) so gaps are visible after the run.
        """
        summary = BatchSummary(stage="compose")
        output_dir.mkdir(parents=True, exist_ok=True)
        missing_by_kind: Dict[str, List[str]] = {kind.value: [] for kind in PLACEHOLDERS}

        raw_files = sorted(raw_dir.glob("*.md"))
        for raw_path in raw_files:
            if cancel_event is not None and cancel_event.is_set():
                summary.record_skip(raw_path.name)
                continue
            try:
                result = self.compose(raw_path)
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.error("Unable to read raw file %s: %s", raw_path.name, exc)
                summary.record_failure(raw_path.name, f"unreadable raw file: {exc}")
                continue

            for kind in result.missing:
                missing_by_kind[kind.value].append(result.command or raw_path.name)
            if result.missing:
                summary.warnings.append(
                    f"{raw_path.name}: missing {', '.join(kind.value for kind in result.missing)}"
                )

            try:
                (output_dir / result.file_name).write_text(result.content, encoding="utf-8")
            except OSError as exc:
                self.logger.error("Unable to write composed file %s: %s", result.file_name, exc)
                summary.record_failure(raw_path.name, f"write failed: {exc}")
                continue
            summary.record_success(raw_path.name)

        report_path = (report_dir or output_dir) / MISSING_REPORT_NAME
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(
            json.dumps(missing_by_kind, indent=2, sort_keys=True), encoding="utf-8"
        )
        missing_total = sum(len(items) for items in missing_by_kind.values())
        self.logger.info(
            "Composed %d of %d raw files (%d missing fragments)",
            len(summary.succeeded),
            len(raw_files),
            missing_total,
        )
        return summary


__all__ = [
    "COMMAND_MARKER",
    "CompositionResult",
    "FragmentComposer",
    "MISSING_REPORT_NAME",
    "PLACEHOLDERS",
    "extract_command",
    "missing_marker",
]
