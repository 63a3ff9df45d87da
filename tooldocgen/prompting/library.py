"""Jinja2-backed templates for fragments and generation prompts."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


class PromptLibrary:
    """Renders named templates; a custom directory overrides bundled templates by name."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        search_path = [str(DEFAULT_TEMPLATES_DIR)]
        if templates_dir is not None:
            search_path.insert(0, str(templates_dir))
        self._env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, name: str, values: Mapping[str, Any] | None = None) -> str:
        try:
            template = self._env.get_template(name)
        except TemplateNotFound as exc:
            raise FileNotFoundError(f"Template not found: {name}") from exc
        return template.render(**dict(values or {}))


__all__ = ["DEFAULT_TEMPLATES_DIR", "PromptLibrary"]
