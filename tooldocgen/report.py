"""Per-batch outcome reporting."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List


@dataclass
class ItemFailure:
    """One item that could not be produced, with the reason."""

    item: str
    reason: str
    stage: str = ""


@dataclass
class BatchSummary:
    """Outcome of a batch: which items succeeded, were skipped or failed."""

    stage: str
    succeeded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[ItemFailure] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def record_success(self, item: str) -> None:
        self.succeeded.append(item)

    def record_skip(self, item: str) -> None:
        self.skipped.append(item)

    def record_failure(self, item: str, reason: str) -> None:
        self.failed.append(ItemFailure(item=item, reason=reason, stage=self.stage))

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: "BatchSummary") -> None:
        """Fold ``other`` in; items from another stage are prefixed with ``stage:``."""
        prefix = f"{other.stage}:" if other.stage != self.stage else ""
        self.succeeded.extend(prefix + item for item in other.succeeded)
        self.skipped.extend(prefix + item for item in other.skipped)
        self.failed.extend(other.failed)
        self.warnings.extend(other.warnings)

    def to_dict(self) -> Dict[str, object]:
        return {
            "stage": self.stage,
            "succeeded": list(self.succeeded),
            "skipped": list(self.skipped),
            "failed": [
                {"item": f.item, "reason": f.reason, "stage": f.stage} for f in self.failed
            ],
            "warnings": list(self.warnings),
            "counts": {
                "succeeded": len(self.succeeded),
                "skipped": len(self.skipped),
                "failed": len(self.failed),
            },
        }

    def describe(self) -> str:
        line = (
            f"{self.stage}: {len(self.succeeded)} succeeded, "
            f"{len(self.skipped)} skipped, {len(self.failed)} failed"
        )
        lines = [line]
        if self.skipped:
            lines.append("  skipped:")
            lines.extend(f"    - {item}" for item in self.skipped)
        if self.failed:
            lines.append("  failed:")
            for failure in self.failed:
                origin = f"[{failure.stage}] " if failure.stage and failure.stage != self.stage else ""
                lines.append(f"    - {origin}{failure.item}: {failure.reason}")
        return "\n".join(lines)

    def save(self, reports_dir: Path) -> Path:
        output = reports_dir / f"{self.stage}-summary.json"
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
        return output


__all__ = ["BatchSummary", "ItemFailure"]
