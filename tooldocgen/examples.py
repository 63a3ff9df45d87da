"""AI-generated example prompt fragments."""

from __future__ import annotations

import json
import re
import threading
from pathlib import Path
from typing import List, Sequence

from .errors import GenerationCancelled, GenerationError
from .llm.client import RetryingContentClient
from .logging import get_logger
from .models import ToolDescriptor
from .naming import FragmentKind, NameContext, resolve_file_name, tool_display_name
from .postproc.text import strip_code_fences
from .prompting import PromptLibrary
from .report import BatchSummary

_LIST_ITEM = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.*\S)\s*$")


def parse_example_prompts(raw_output: str, tool_name: str | None = None) -> List[str]:
    """Extract prompts from the model response.

    JSON shaped as ``{"<tool>": ["..."]}`` is preferred; a markdown list is
    accepted when the model ignores the format instructions.
    """
    body = strip_code_fences(raw_output)
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        payload = None

    candidates: object = None
    if isinstance(payload, dict):
        candidates = payload.get(tool_name) if tool_name in payload else next(
            (value for value in payload.values() if isinstance(value, list)), None
        )
    elif isinstance(payload, list):
        candidates = payload

    if isinstance(candidates, list):
        prompts = [str(item).strip() for item in candidates if str(item).strip()]
    else:
        prompts = []
        for line in body.splitlines():
            match = _LIST_ITEM.match(line)
            if match:
                prompts.append(match.group(1))
    return [prompt.strip().strip('"').strip() for prompt in prompts if prompt.strip('" ')]


class ExamplePromptGenerator:
    """Asks the model for example prompts and saves the prompt, raw reply and fragment."""

    SYSTEM_PROMPT = (
        "You write realistic example prompts that users type into an AI assistant. "
        "Each prompt is a single natural sentence that names concrete resource values. "
        "Follow the requested output format exactly."
    )
    PROMPT_COUNT = 5

    def __init__(
        self,
        client: RetryingContentClient,
        name_context: NameContext,
        library: PromptLibrary | None = None,
        *,
        max_output_tokens: int = 1500,
        version: str = "unknown",
    ) -> None:
        self.client = client
        self.name_context = name_context
        self.library = library or PromptLibrary()
        self.max_output_tokens = max_output_tokens
        self.version = version
        self.logger = get_logger("examples")

    def build_user_prompt(self, tool: ToolDescriptor) -> str:
        parts = tool.command.split()
        action_verb = parts[-1] if parts else ""
        resource_type = parts[-2] if len(parts) >= 2 else action_verb
        return self.library.render(
            "example-prompts-user.j2",
            {
                "prompt_count": self.PROMPT_COUNT,
                "tool_name": tool.name or tool_display_name(tool.command),
                "command": tool.command,
                "action_verb": action_verb,
                "resource_type": resource_type,
                "description": " ".join(tool.description.split()),
                "parameters": list(tool.parameters),
            },
        )

    def generate(
        self, tool: ToolDescriptor, output_dir: Path, prompts_dir: Path
    ) -> Path:
        """Generate the fragment for one tool and return its path."""
        user_prompt = self.build_user_prompt(tool)
        prompts_dir.mkdir(parents=True, exist_ok=True)
        (prompts_dir / resolve_file_name(tool.command, self.name_context, FragmentKind.INPUT_PROMPT)).write_text(
            user_prompt, encoding="utf-8"
        )

        raw_output = self.client.complete(self.SYSTEM_PROMPT, user_prompt, self.max_output_tokens)
        (prompts_dir / resolve_file_name(tool.command, self.name_context, FragmentKind.RAW_OUTPUT)).write_text(
            raw_output, encoding="utf-8"
        )

        prompts = parse_example_prompts(raw_output, tool.name or None)
        if not prompts:
            raise GenerationError("model response contained no example prompts")

        file_name = resolve_file_name(tool.command, self.name_context, FragmentKind.EXAMPLE_PROMPT)
        content = self.library.render(
            "example-prompts.md.j2",
            {
                "version": self.version,
                "command": tool.command,
                "file_name": file_name,
                "prompts": prompts,
            },
        )
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / file_name
        target.write_text(content, encoding="utf-8")
        return target

    def write_all(
        self,
        tools: Sequence[ToolDescriptor],
        output_dir: Path,
        prompts_dir: Path,
        *,
        cancel_event: threading.Event | None = None,
    ) -> BatchSummary:
        summary = BatchSummary(stage="example-prompts")
        for index, tool in enumerate(tools, start=1):
            label = tool.command or "<missing command>"
            if cancel_event is not None and cancel_event.is_set():
                summary.record_skip(label)
                continue
            if not tool.command:
                summary.record_failure(label, "tool has no command")
                continue
            self.logger.info("[%d/%d] Generating example prompts for %s", index, len(tools), label)
            try:
                self.generate(tool, output_dir, prompts_dir)
            except GenerationCancelled:
                summary.record_skip(label)
                continue
            except (GenerationError, OSError) as exc:
                self.logger.error("Example prompts failed for %s: %s", label, exc)
                summary.record_failure(label, str(exc))
                continue
            summary.record_success(label)
        return summary


__all__ = ["ExamplePromptGenerator", "parse_example_prompts"]
