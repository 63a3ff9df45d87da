"""Lookup tables that drive deterministic file naming."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..errors import NameContextError
from ..logging import get_logger

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
BRAND_MAPPING_FILE = "brand-to-server-mapping.json"
COMPOUND_WORDS_FILE = "compound-words.json"
STOP_WORDS_FILE = "stop-words.json"

_logger = get_logger("naming")


@dataclass(frozen=True)
class BrandMapping:
    """Brand details for one command namespace."""

    server_name: str
    brand_name: str = ""
    short_name: str = ""
    file_slug: str = ""


@dataclass(frozen=True)
class NameContext:
    """Immutable lookup tables shared by every name resolution call."""

    brand_map: Mapping[str, BrandMapping] = field(
        default_factory=lambda: MappingProxyType({})
    )
    compound_words: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    stop_words: frozenset[str] = frozenset()

    @classmethod
    def build(
        cls,
        *,
        brands: Iterable[BrandMapping] = (),
        compound_words: Mapping[str, str] | None = None,
        stop_words: Iterable[str] = (),
    ) -> "NameContext":
        """Construct a context from plain collections, copying them into read-only views."""
        brand_map = {brand.server_name: brand for brand in brands}
        return cls(
            brand_map=MappingProxyType(brand_map),
            compound_words=MappingProxyType(dict(compound_words or {})),
            stop_words=frozenset(stop_words),
        )

    def brand_for(self, area: str) -> Optional[BrandMapping]:
        return self.brand_map.get(area)


def load_name_context(data_dir: Path | None = None) -> NameContext:
    """Load the brand, compound-word and stop-word tables from ``data_dir``.

    Any missing or malformed table is fatal: naming must never silently
    degrade in the middle of a batch.
    """
    directory = data_dir or DEFAULT_DATA_DIR
    brands_payload = _read_json(directory / BRAND_MAPPING_FILE)
    compounds_payload = _read_json(directory / COMPOUND_WORDS_FILE)
    stop_payload = _read_json(directory / STOP_WORDS_FILE)

    if not isinstance(brands_payload, list):
        raise NameContextError(f"{BRAND_MAPPING_FILE} must contain an array of mappings")
    brands = []
    for entry in brands_payload:
        if not isinstance(entry, dict):
            raise NameContextError(f"{BRAND_MAPPING_FILE} contains a non-object entry: {entry!r}")
        server_name = _get_ci(entry, "mcpServerName")
        if not server_name:
            continue
        brands.append(
            BrandMapping(
                server_name=str(server_name),
                brand_name=str(_get_ci(entry, "brandName") or ""),
                short_name=str(_get_ci(entry, "shortName") or ""),
                file_slug=str(_get_ci(entry, "fileName") or ""),
            )
        )

    if not isinstance(compounds_payload, dict) or not all(
        isinstance(value, str) for value in compounds_payload.values()
    ):
        raise NameContextError(f"{COMPOUND_WORDS_FILE} must map words to hyphenated strings")

    if not isinstance(stop_payload, list) or not all(isinstance(word, str) for word in stop_payload):
        raise NameContextError(f"{STOP_WORDS_FILE} must contain an array of strings")

    context = NameContext.build(
        brands=brands,
        compound_words=compounds_payload,
        stop_words=stop_payload,
    )
    _logger.debug(
        "Loaded %d brand mappings, %d compound words, %d stop words from %s",
        len(context.brand_map),
        len(context.compound_words),
        len(context.stop_words),
        directory,
    )
    return context


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise NameContextError(f"Naming table not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise NameContextError(f"Unable to load naming table {path}: {exc}") from exc


def _get_ci(entry: Mapping[str, Any], key: str) -> Any:
    if key in entry:
        return entry[key]
    lowered = key.lower()
    for candidate, value in entry.items():
        if candidate.lower() == lowered:
            return value
    return None


__all__ = [
    "BrandMapping",
    "DEFAULT_DATA_DIR",
    "NameContext",
    "load_name_context",
]
