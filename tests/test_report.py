"""Tests for batch outcome summaries."""

from __future__ import annotations

import json
from pathlib import Path

from tooldocgen.report import BatchSummary


def test_describe_lists_skipped_and_failed_items() -> None:
    summary = BatchSummary(stage="compose")
    summary.record_success("a.md")
    summary.record_skip("b.md")
    summary.record_failure("c.md", "unreadable raw file")

    assert summary.describe() == (
        "compose: 1 succeeded, 1 skipped, 1 failed\n"
        "  skipped:\n"
        "    - b.md\n"
        "  failed:\n"
        "    - c.md: unreadable raw file"
    )


def test_merged_summary_names_the_originating_stage(tmp_path: Path) -> None:
    raw = BatchSummary(stage="raw")
    raw.record_success("aks nodepool get")
    families = BatchSummary(stage="families")
    families.record_skip("storage")
    families.record_failure("aks", "status 400")

    combined = BatchSummary(stage="all")
    combined.merge(raw)
    combined.merge(families)

    assert combined.succeeded == ["raw:aks nodepool get"]
    assert combined.skipped == ["families:storage"]
    assert "    - [families] aks: status 400" in combined.describe()
    saved = json.loads(combined.save(tmp_path).read_text(encoding="utf-8"))
    assert saved["failed"] == [{"item": "aks", "reason": "status 400", "stage": "families"}]
