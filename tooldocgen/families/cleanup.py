"""Single-pass model rewrite of existing family documents."""

from __future__ import annotations

import threading
from pathlib import Path

from ..errors import GenerationCancelled, GenerationError, TruncationError
from ..llm.client import RetryingContentClient
from ..logging import get_logger
from ..postproc.lint import MarkdownLinter
from ..postproc.text import looks_like_markdown, strip_code_fences
from ..prompting import PromptLibrary
from ..report import BatchSummary
from .budget import TokenBudgetEstimator
from .reader import Found, extract_tool_count


class FamilyCleaner:
    """Rewrites each family page in one call, budgeted from its tool count or length."""

    SYSTEM_PROMPT = (
        "You are an editor for command-line tool reference documentation. "
        "Preserve every tool section and every fact; only fix structure and wording."
    )

    def __init__(
        self,
        client: RetryingContentClient,
        *,
        estimator: TokenBudgetEstimator | None = None,
        library: PromptLibrary | None = None,
        linter: MarkdownLinter | None = None,
    ) -> None:
        self.client = client
        self.estimator = estimator or TokenBudgetEstimator()
        self.library = library or PromptLibrary()
        self.linter = linter or MarkdownLinter()
        self.logger = get_logger("families.cleanup")

    def clean(self, path: Path, output_dir: Path) -> Path:
        content = path.read_text(encoding="utf-8")
        count = extract_tool_count(content)
        estimate = self.estimator.compute(
            path.stem,
            tool_count=count.value if isinstance(count, Found) else None,
            word_count=len(content.split()),
        )
        prompt = self.library.render(
            "family-cleanup-user.j2",
            {
                "tool_count": count.value if isinstance(count, Found) else "several",
                "content": content,
            },
        )
        prompts_dir = output_dir / "prompts"
        prompts_dir.mkdir(parents=True, exist_ok=True)
        (prompts_dir / f"{path.stem}-prompt.md").write_text(prompt, encoding="utf-8")

        try:
            generated = self.client.complete(self.SYSTEM_PROMPT, prompt, estimate.max_output_tokens)
        except TruncationError as exc:
            note = output_dir / f"{path.stem}-truncation-error.txt"
            note.write_text(
                f"Cleanup of {path.name} was truncated at {estimate.max_output_tokens} output tokens.\n"
                f"Estimated need: {estimate.raw_tokens} tokens ({estimate.method}).\n"
                "Split the family or raise budget.model_ceiling and re-run.\n",
                encoding="utf-8",
            )
            raise GenerationError(f"{exc} (see {note.name})") from exc

        cleaned = strip_code_fences(generated)
        if not looks_like_markdown(cleaned):
            raise GenerationError("model output does not look like a markdown document")
        target = output_dir / path.name
        target.write_text(self.linter.lint(cleaned), encoding="utf-8")
        return target

    def run(
        self,
        family_dir: Path,
        output_dir: Path,
        *,
        cancel_event: threading.Event | None = None,
    ) -> BatchSummary:
        if not family_dir.is_dir():
            raise FileNotFoundError(f"Family directory not found: {family_dir}")
        summary = BatchSummary(stage="cleanup")
        output_dir.mkdir(parents=True, exist_ok=True)
        for path in sorted(family_dir.glob("*.md")):
            if cancel_event is not None and cancel_event.is_set():
                summary.record_skip(path.name)
                continue
            try:
                self.clean(path, output_dir)
            except GenerationCancelled:
                summary.record_skip(path.name)
                continue
            except (GenerationError, OSError) as exc:
                self.logger.error("Cleanup of %s failed: %s", path.name, exc)
                summary.record_failure(path.name, str(exc))
                continue
            summary.record_success(path.name)
        return summary


__all__ = ["FamilyCleaner"]
