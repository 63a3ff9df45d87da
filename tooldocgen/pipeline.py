"""Sequential orchestration of the generation stages."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .composer import FragmentComposer
from .config import ToolDocGenConfig
from .examples import ExamplePromptGenerator
from .families import FamilyAssembler, FamilyCleaner, FamilyReader, TokenBudgetEstimator
from .fragments import FragmentGenerator
from .llm import LLMRunner, RetryingContentClient
from .logging import get_logger
from .models import ToolDescriptor, load_tool_list
from .naming import FragmentKind, NameContext, load_name_context
from .prompting import PromptLibrary
from .raw import RawToolGenerator
from .report import BatchSummary


class Pipeline:
    """Runs each stage over its items one at a time.

    Collaborators are created lazily from configuration unless injected, so
    deterministic stages never touch the text-generation backend.
    """

    def __init__(
        self,
        config: ToolDocGenConfig,
        *,
        name_context: NameContext | None = None,
        runner: LLMRunner | None = None,
        client: RetryingContentClient | None = None,
        library: PromptLibrary | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
        version: str = "unknown",
    ) -> None:
        self.config = config
        self.cancel_event = cancel_event or threading.Event()
        self.library = library or PromptLibrary()
        self.version = version
        self.logger = get_logger("pipeline")
        self._name_context = name_context
        self._runner = runner
        self._client = client
        self._sleep = sleep

    @property
    def name_context(self) -> NameContext:
        # Loaded once per pipeline; a load failure is fatal before any item runs.
        if self._name_context is None:
            self._name_context = load_name_context(self.config.paths.data_dir)
        return self._name_context

    @property
    def client(self) -> RetryingContentClient:
        if self._client is None:
            runner = self._runner or LLMRunner.from_config(self.config.llm)
            self._client = RetryingContentClient.from_config(
                runner,
                self.config.retry,
                sleep=self._sleep,
                cancel_event=self.cancel_event,
            )
        return self._client

    def cancel(self) -> None:
        """Request a cooperative stop; the current item finishes, the rest are skipped."""
        self.cancel_event.set()

    def run_raw(self, tool_list: Path) -> BatchSummary:
        tools = self._load_tools(tool_list)
        generator = RawToolGenerator(self.name_context, self.library, version=self.version)
        return self._finish(
            generator.write_all(tools, self.config.paths.raw_dir, cancel_event=self.cancel_event)
        )

    def run_fragments(self, tool_list: Path) -> BatchSummary:
        tools = self._load_tools(tool_list)
        generator = FragmentGenerator(self.name_context, self.library, version=self.version)
        paths = self.config.paths
        return self._finish(
            generator.write_all(
                tools,
                paths.annotations_dir,
                paths.parameters_dir,
                cancel_event=self.cancel_event,
            )
        )

    def run_examples(self, tool_list: Path) -> BatchSummary:
        tools = self._load_tools(tool_list)
        generator = ExamplePromptGenerator(
            self.client,
            self.name_context,
            self.library,
            max_output_tokens=self.config.budget.example_prompt_tokens,
            version=self.version,
        )
        paths = self.config.paths
        return self._finish(
            generator.write_all(
                tools,
                paths.example_prompts_dir,
                paths.prompts_dir,
                cancel_event=self.cancel_event,
            )
        )

    def run_compose(self) -> BatchSummary:
        paths = self.config.paths
        if not paths.raw_dir.is_dir():
            raise FileNotFoundError(f"Raw tool directory not found: {paths.raw_dir}")
        composer = FragmentComposer(self.name_context, self.fragment_dirs())
        return self._finish(
            composer.compose_directory(
                paths.raw_dir,
                paths.composed_dir,
                report_dir=paths.reports_dir,
                cancel_event=self.cancel_event,
            )
        )

    def run_families(self, families: Optional[List[str]] = None) -> BatchSummary:
        paths = self.config.paths
        groups = FamilyReader(self.name_context).read_directory(paths.composed_dir)
        if families:
            wanted = {name.lower() for name in families}
            groups = {key: value for key, value in groups.items() if key in wanted}
            for name in sorted(wanted - set(groups)):
                self.logger.warning("No tools found for family '%s'", name)
        assembler = FamilyAssembler(
            self.client,
            estimator=TokenBudgetEstimator(self.config.budget),
            library=self.library,
            budget=self.config.budget,
            regenerate_headings=self.config.families.regenerate_headings,
        )
        return self._finish(
            assembler.run(
                groups.values(),
                family_dir=paths.family_dir,
                metadata_dir=paths.metadata_dir,
                related_dir=paths.related_dir,
                cancel_event=self.cancel_event,
            )
        )

    def run_cleanup(self) -> BatchSummary:
        paths = self.config.paths
        cleaner = FamilyCleaner(
            self.client,
            estimator=TokenBudgetEstimator(self.config.budget),
            library=self.library,
        )
        return self._finish(
            cleaner.run(paths.family_dir, paths.cleanup_dir, cancel_event=self.cancel_event)
        )

    def run_all(self, tool_list: Path, *, skip_examples: bool = False) -> BatchSummary:
        """Run every stage in order and return the combined summary."""
        combined = BatchSummary(stage="all")
        combined.merge(self.run_raw(tool_list))
        combined.merge(self.run_fragments(tool_list))
        if skip_examples:
            self.logger.info("Skipping example prompt generation")
        else:
            combined.merge(self.run_examples(tool_list))
        combined.merge(self.run_compose())
        combined.merge(self.run_families())
        combined.save(self.config.paths.reports_dir)
        return combined

    def fragment_dirs(self) -> Dict[FragmentKind, Path]:
        paths = self.config.paths
        return {
            FragmentKind.EXAMPLE_PROMPT: paths.example_prompts_dir,
            FragmentKind.PARAMETER: paths.parameters_dir,
            FragmentKind.ANNOTATION: paths.annotations_dir,
        }

    def _load_tools(self, tool_list: Path) -> List[ToolDescriptor]:
        tools = load_tool_list(tool_list)
        self.logger.info("Loaded %d tools from %s", len(tools), tool_list)
        return tools

    def _finish(self, summary: BatchSummary) -> BatchSummary:
        level = logging.INFO if summary.ok else logging.WARNING
        self.logger.log(level, summary.describe())
        for warning in summary.warnings:
            self.logger.debug("%s warning: %s", summary.stage, warning)
        summary.save(self.config.paths.reports_dir)
        return summary


__all__ = ["Pipeline"]
