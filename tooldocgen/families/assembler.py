"""Token-budgeted, multi-phase assembly of family documents."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from ..config import BudgetConfig
from ..errors import GenerationCancelled, GenerationError
from ..llm.client import RetryingContentClient
from ..logging import get_logger
from ..postproc.lint import MarkdownLinter
from ..postproc.text import strip_code_fences
from ..prompting import PromptLibrary
from ..report import BatchSummary
from .budget import BudgetEstimate, TokenBudgetEstimator
from .reader import FamilyGroup, ToolContent, tool_sort_key
from .stitcher import clean_heading, demote_h1, replace_heading, stitch


@dataclass
class FamilyDocument:
    """A stitched family page plus the generated pieces it was built from."""

    family_key: str
    display_name: str
    content: str
    metadata: str
    related: str
    budget: BudgetEstimate
    heading_fallbacks: List[str] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        return f"{self.family_key}.md"


class FamilyAssembler:
    """Builds one family document from its tools in small, separately budgeted calls.

    The family budget is computed first. Metadata and related content are
    generated with their own fixed budgets, never above the family budget, and
    the per-tool sections are stitched in without another model call unless
    heading regeneration is enabled.
    """

    METADATA_SYSTEM_PROMPT = (
        "You are a technical writer producing reference documentation for command-line tools. "
        "Write concise, accurate markdown. Never invent tools or parameters."
    )
    RELATED_SYSTEM_PROMPT = (
        "You are a technical writer. Produce only the requested related-content section in markdown."
    )
    HEADING_SYSTEM_PROMPT = (
        "You write short, task-oriented documentation headings. Reply with the heading text only."
    )

    def __init__(
        self,
        client: RetryingContentClient,
        *,
        estimator: TokenBudgetEstimator | None = None,
        library: PromptLibrary | None = None,
        budget: BudgetConfig | None = None,
        regenerate_headings: bool = False,
        linter: MarkdownLinter | None = None,
    ) -> None:
        self.client = client
        self.budget = budget or BudgetConfig()
        self.estimator = estimator or TokenBudgetEstimator(self.budget)
        self.library = library or PromptLibrary()
        self.regenerate_headings = regenerate_headings
        self.linter = linter or MarkdownLinter()
        self.logger = get_logger("families.assembler")

    def assemble(self, family: FamilyGroup) -> FamilyDocument:
        """Generate and stitch the document for ``family``; raises GenerationError on failure."""
        estimate = self.estimator.compute(family.family_key, tool_count=family.tool_count)
        self.logger.info(
            "Assembling '%s' (%d tools, budget %d tokens)",
            family.family_key,
            family.tool_count,
            estimate.max_output_tokens,
        )
        tools = sorted(family.tools, key=tool_sort_key)
        values = {
            "display_name": family.display_name,
            "tool_count": family.tool_count,
            "tools": tools,
        }

        metadata = self._generate(
            self.METADATA_SYSTEM_PROMPT,
            self.library.render("family-metadata-user.j2", values),
            min(self.budget.metadata_tokens, estimate.max_output_tokens),
        )
        related = self._generate(
            self.RELATED_SYSTEM_PROMPT,
            self.library.render("family-related-user.j2", values),
            min(self.budget.related_tokens, estimate.max_output_tokens),
        )

        fallbacks: List[str] = []
        sections = [self._tool_section(tool, fallbacks) for tool in tools]
        content = stitch(metadata, sections, related)
        return FamilyDocument(
            family_key=family.family_key,
            display_name=family.display_name,
            content=content,
            metadata=metadata,
            related=related,
            budget=estimate,
            heading_fallbacks=fallbacks,
        )

    def _generate(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        # Only generated blocks are linted; composed tool sections pass through verbatim.
        text = strip_code_fences(self.client.complete(system_prompt, user_prompt, max_tokens))
        return self.linter.lint(text)

    def _tool_section(self, tool: ToolContent, fallbacks: List[str]) -> str:
        if not self.regenerate_headings:
            return demote_h1(tool.content)
        try:
            generated = self.client.complete(
                self.HEADING_SYSTEM_PROMPT,
                self.library.render(
                    "tool-heading-user.j2",
                    {
                        "tool_name": tool.tool_name,
                        "command": tool.command or "",
                        "description": tool.description,
                    },
                ),
                self.budget.heading_tokens,
            )
        except GenerationCancelled:
            raise
        except GenerationError as exc:
            self.logger.warning("Heading generation failed for %s, keeping original: %s", tool.file_name, exc)
            fallbacks.append(tool.file_name)
            return demote_h1(tool.content)

        heading = clean_heading(strip_code_fences(generated))
        if heading is None:
            fallbacks.append(tool.file_name)
            return demote_h1(tool.content)
        return replace_heading(tool.content, heading)

    def write(
        self,
        document: FamilyDocument,
        *,
        family_dir: Path,
        metadata_dir: Path | None = None,
        related_dir: Path | None = None,
    ) -> Path:
        """Persist the intermediate fragments, then the stitched document last."""
        if metadata_dir is not None:
            metadata_dir.mkdir(parents=True, exist_ok=True)
            (metadata_dir / f"{document.family_key}-metadata.md").write_text(
                document.metadata.strip() + "\n", encoding="utf-8"
            )
        if related_dir is not None:
            related_dir.mkdir(parents=True, exist_ok=True)
            (related_dir / f"{document.family_key}-related.md").write_text(
                document.related.strip() + "\n", encoding="utf-8"
            )
        family_dir.mkdir(parents=True, exist_ok=True)
        target = family_dir / document.file_name
        target.write_text(document.content, encoding="utf-8")
        return target

    def run(
        self,
        families: Iterable[FamilyGroup],
        *,
        family_dir: Path,
        metadata_dir: Path | None = None,
        related_dir: Path | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchSummary:
        """Assemble families one at a time; a failed family never stops the batch."""
        summary = BatchSummary(stage="families")
        for family in families:
            if cancel_event is not None and cancel_event.is_set():
                summary.record_skip(family.family_key)
                continue
            try:
                document = self.assemble(family)
                self.write(
                    document,
                    family_dir=family_dir,
                    metadata_dir=metadata_dir,
                    related_dir=related_dir,
                )
            except GenerationCancelled:
                summary.record_skip(family.family_key)
                continue
            except (GenerationError, OSError) as exc:
                self.logger.error("Family '%s' failed: %s", family.family_key, exc)
                summary.record_failure(family.family_key, str(exc))
                continue
            if document.budget.capped:
                summary.warnings.append(
                    f"{family.family_key}: budget capped at {document.budget.max_output_tokens} "
                    f"(needed ~{document.budget.raw_tokens})"
                )
            summary.record_success(family.family_key)
        return summary


__all__ = ["FamilyAssembler", "FamilyDocument"]
