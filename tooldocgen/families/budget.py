"""Output token budgets for family-level generation calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import BudgetConfig
from ..logging import get_logger
from .reader import FamilyGroup

TOOL_COUNT = "tool-count"
WORD_COUNT = "word-count"


@dataclass(frozen=True)
class BudgetEstimate:
    """The clamped budget plus how it was derived."""

    family_key: str
    max_output_tokens: int
    raw_tokens: int
    method: str

    @property
    def capped(self) -> bool:
        return self.raw_tokens > self.max_output_tokens


class TokenBudgetEstimator:
    """Estimates how many output tokens a family document needs."""

    def __init__(self, config: BudgetConfig | None = None) -> None:
        self.config = config or BudgetConfig()
        if self.config.min_floor > self.config.model_ceiling:
            raise ValueError("min_floor must not exceed model_ceiling")
        self.logger = get_logger("families.budget")

    def compute(
        self,
        family_key: str,
        *,
        tool_count: Optional[int] = None,
        word_count: int = 0,
    ) -> BudgetEstimate:
        """Budget from the tool count when known, otherwise from the word count."""
        cfg = self.config
        if tool_count is not None:
            raw = tool_count * cfg.per_tool_tokens + cfg.base_tokens
            method = TOOL_COUNT
        else:
            raw = int(word_count / cfg.words_per_token * cfg.buffer_factor)
            method = WORD_COUNT

        clamped = max(cfg.min_floor, min(raw, cfg.model_ceiling))
        estimate = BudgetEstimate(
            family_key=family_key,
            max_output_tokens=clamped,
            raw_tokens=raw,
            method=method,
        )
        if estimate.capped:
            self.logger.warning(
                "Family '%s' needs ~%d output tokens but the model ceiling is %d; output may be truncated",
                family_key,
                raw,
                cfg.model_ceiling,
            )
        else:
            self.logger.debug(
                "Family '%s' budget %d tokens (%s, raw %d)", family_key, clamped, method, raw
            )
        return estimate

    def estimate(self, family: FamilyGroup) -> int:
        return self.compute(family.family_key, tool_count=family.tool_count).max_output_tokens


__all__ = ["BudgetEstimate", "TOOL_COUNT", "TokenBudgetEstimator", "WORD_COUNT"]
