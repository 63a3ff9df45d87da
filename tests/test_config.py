"""Tests for tooldocgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from tooldocgen.config import (
    BudgetConfig,
    ConfigError,
    LLMConfig,
    RetryConfig,
    ToolDocGenConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ToolDocGenConfig)
    assert config.root == tmp_path.resolve()
    assert config.llm is None
    assert config.retry == RetryConfig()
    assert config.budget == BudgetConfig()
    assert config.paths.output_dir == tmp_path.resolve() / "generated"
    assert config.paths.data_dir is None
    assert config.families.regenerate_headings is False


def test_default_budget_constants() -> None:
    budget = BudgetConfig()
    assert (budget.per_tool_tokens, budget.base_tokens) == (1000, 2000)
    assert (budget.words_per_token, budget.buffer_factor) == (0.75, 2.0)
    assert (budget.min_floor, budget.model_ceiling) == (12000, 16384)
    assert (budget.metadata_tokens, budget.related_tokens, budget.heading_tokens) == (2000, 1000, 100)


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text(
        """
llm:
  model: "gpt-4o"
  base_url: "https://contoso.openai.azure.com/openai/deployments/gpt-4o"
  api_key: "test-key"
  api_version: "2024-06-01"
  temperature: 0.1
  request_timeout: 90
retry:
  max_attempts: 3
  initial_delay: 0.5
budget:
  per_tool_tokens: 800
  model_ceiling: 32000
  words_per_token: 0.8
paths:
  output_dir: "out"
  data_dir: "tables"
families:
  regenerate_headings: true
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.llm == LLMConfig(
        model="gpt-4o",
        base_url="https://contoso.openai.azure.com/openai/deployments/gpt-4o",
        api_key="test-key",
        api_version="2024-06-01",
        temperature=0.1,
        request_timeout=90.0,
    )
    assert config.retry == RetryConfig(max_attempts=3, initial_delay=0.5)
    assert config.budget.per_tool_tokens == 800
    assert config.budget.model_ceiling == 32000
    assert config.budget.words_per_token == 0.8
    assert config.budget.base_tokens == 2000
    root = tmp_path.resolve()
    assert config.paths.output_dir == root / "out"
    assert config.paths.data_dir == root / "tables"
    assert config.paths.composed_dir == root / "out" / "tools"
    assert config.families.regenerate_headings is True


def test_load_config_accepts_explicit_file_path(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("retry:\n  max_attempts: 2\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.retry.max_attempts == 2


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text("\n", encoding="utf-8")
    assert load_config(tmp_path).budget == BudgetConfig()


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text("- item\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text("llm: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_floor_above_ceiling_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text(
        "budget:\n  min_floor: 20000\n  model_ceiling: 16384\n", encoding="utf-8"
    )
    with pytest.raises(ConfigError, match="min_floor"):
        load_config(tmp_path)


def test_non_numeric_budget_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text("budget:\n  base_tokens: lots\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="integer"):
        load_config(tmp_path)


def test_zero_attempts_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text("retry:\n  max_attempts: -1\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="max_attempts"):
        load_config(tmp_path)
