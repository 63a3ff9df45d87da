"""Configuration loading for tooldocgen (.tooldocgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ToolDocGenError

CONFIG_FILE_NAME = ".tooldocgen.yml"


class ConfigError(ToolDocGenError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Text-generation backend settings from .tooldocgen.yml."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    api_version: Optional[str] = None
    temperature: Optional[float] = None
    request_timeout: Optional[float] = None


@dataclass
class RetryConfig:
    """Retry schedule for rate-limited generation calls."""

    max_attempts: int = 5
    initial_delay: float = 1.0


@dataclass
class BudgetConfig:
    """Output token budget constants."""

    per_tool_tokens: int = 1000
    base_tokens: int = 2000
    words_per_token: float = 0.75
    buffer_factor: float = 2.0
    min_floor: int = 12000
    model_ceiling: int = 16384
    metadata_tokens: int = 2000
    related_tokens: int = 1000
    heading_tokens: int = 100
    example_prompt_tokens: int = 1500


@dataclass
class PathsConfig:
    """Input and output locations, relative to the configuration root."""

    output_dir: Path
    data_dir: Optional[Path] = None

    @property
    def raw_dir(self) -> Path:
        return self.output_dir / "raw"

    @property
    def annotations_dir(self) -> Path:
        return self.output_dir / "annotations"

    @property
    def parameters_dir(self) -> Path:
        return self.output_dir / "parameters"

    @property
    def example_prompts_dir(self) -> Path:
        return self.output_dir / "example-prompts"

    @property
    def prompts_dir(self) -> Path:
        return self.output_dir / "example-prompts-prompts"

    @property
    def composed_dir(self) -> Path:
        return self.output_dir / "tools"

    @property
    def metadata_dir(self) -> Path:
        return self.output_dir / "tool-family-metadata"

    @property
    def related_dir(self) -> Path:
        return self.output_dir / "tool-family-related"

    @property
    def family_dir(self) -> Path:
        return self.output_dir / "tool-family"

    @property
    def cleanup_dir(self) -> Path:
        return self.output_dir / "tool-family-cleanup"

    @property
    def reports_dir(self) -> Path:
        return self.output_dir / "reports"


@dataclass
class FamiliesConfig:
    """Family assembly switches."""

    regenerate_headings: bool = False


@dataclass
class ToolDocGenConfig:
    """Represents the high-level settings defined in .tooldocgen.yml."""

    root: Path
    paths: PathsConfig
    llm: Optional[LLMConfig] = None
    retry: RetryConfig = field(default_factory=RetryConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    families: FamiliesConfig = field(default_factory=FamiliesConfig)


def load_config(config_path: Path) -> ToolDocGenConfig:
    """Load configuration from disk, falling back to defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ToolDocGenConfig(root=root, paths=PathsConfig(output_dir=root / "generated"))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = None
    if llm_data:
        llm = LLMConfig(
            model=_as_str(llm_data.get("model")),
            base_url=_as_str(llm_data.get("base_url")),
            api_key=_as_str(llm_data.get("api_key")),
            api_version=_as_str(llm_data.get("api_version")),
            temperature=_as_float(llm_data.get("temperature")),
            request_timeout=_as_float(llm_data.get("request_timeout")),
        )
        if not any(
            (
                llm.model,
                llm.base_url,
                llm.api_key,
                llm.api_version,
                llm.temperature,
                llm.request_timeout,
            )
        ):
            llm = None

    retry = RetryConfig()
    retry_data = _as_dict(data.get("retry"))
    if retry_data:
        max_attempts = _as_int(retry_data.get("max_attempts"))
        if max_attempts is not None:
            retry.max_attempts = max_attempts
        initial_delay = _as_float(retry_data.get("initial_delay"))
        if initial_delay is not None:
            retry.initial_delay = initial_delay
    if retry.max_attempts < 1:
        raise ConfigError("retry.max_attempts must be at least 1")
    if retry.initial_delay < 0:
        raise ConfigError("retry.initial_delay must not be negative")

    budget = _load_budget(_as_dict(data.get("budget")))

    paths_data = _as_dict(data.get("paths"))
    output_dir_str = _as_str(paths_data.get("output_dir")) if paths_data else None
    data_dir_str = _as_str(paths_data.get("data_dir")) if paths_data else None
    paths = PathsConfig(
        output_dir=root / (output_dir_str or "generated"),
        data_dir=root / data_dir_str if data_dir_str else None,
    )

    families = FamiliesConfig()
    families_data = _as_dict(data.get("families"))
    if families_data:
        families.regenerate_headings = bool(_as_bool(families_data.get("regenerate_headings")))

    return ToolDocGenConfig(
        root=root,
        paths=paths,
        llm=llm,
        retry=retry,
        budget=budget,
        families=families,
    )


def _load_budget(budget_data: Dict[str, Any]) -> BudgetConfig:
    budget = BudgetConfig()
    for name in (
        "per_tool_tokens",
        "base_tokens",
        "min_floor",
        "model_ceiling",
        "metadata_tokens",
        "related_tokens",
        "heading_tokens",
        "example_prompt_tokens",
    ):
        value = _as_int(budget_data.get(name))
        if value is not None:
            if value <= 0:
                raise ConfigError(f"budget.{name} must be a positive integer")
            setattr(budget, name, value)
    for name in ("words_per_token", "buffer_factor"):
        value = _as_float(budget_data.get(name))
        if value is not None:
            if value <= 0:
                raise ConfigError(f"budget.{name} must be positive")
            setattr(budget, name, value)
    if budget.min_floor > budget.model_ceiling:
        raise ConfigError(
            f"budget.min_floor ({budget.min_floor}) exceeds budget.model_ceiling ({budget.model_ceiling})"
        )
    return budget


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Expected a number, got {value!r}") from None


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Expected an integer, got {value!r}") from None


def _as_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "on", "1"}:
            return True
        if lowered in {"false", "no", "off", "0"}:
            return False
    raise ConfigError(f"Expected a boolean, got {value!r}")


__all__ = [
    "BudgetConfig",
    "CONFIG_FILE_NAME",
    "ConfigError",
    "FamiliesConfig",
    "LLMConfig",
    "PathsConfig",
    "RetryConfig",
    "ToolDocGenConfig",
    "load_config",
]
