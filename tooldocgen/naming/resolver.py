"""Deterministic mapping from CLI commands to documentation file names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .context import NameContext

UNKNOWN_SLUG = "unknown"
AZURE_PREFIX = "azure-"


class FragmentKind(str, Enum):
    """Artifact kinds that share a resolved base name."""

    ANNOTATION = "annotation"
    PARAMETER = "parameter"
    EXAMPLE_PROMPT = "example-prompt"
    TOOL = "tool"
    RAW = "raw"
    INPUT_PROMPT = "input-prompt"
    RAW_OUTPUT = "raw-output"

    @property
    def suffix(self) -> str:
        return _SUFFIXES[self]


_SUFFIXES = {
    FragmentKind.ANNOTATION: "-annotations.md",
    FragmentKind.PARAMETER: "-parameters.md",
    FragmentKind.EXAMPLE_PROMPT: "-example-prompts.md",
    FragmentKind.TOOL: ".md",
    FragmentKind.RAW: ".md",
    FragmentKind.INPUT_PROMPT: "-input-prompt.md",
    FragmentKind.RAW_OUTPUT: "-raw-output.txt",
}


class PrefixSource(str, Enum):
    """Which lookup produced the area prefix of a resolved name."""

    BRAND = "brand"
    COMPOUND = "compound"
    LITERAL = "literal"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ResolvedName:
    """Base slug for a command plus the lookup level that produced its prefix."""

    command: str
    base_slug: str
    prefix_source: PrefixSource

    def file_name(self, kind: FragmentKind) -> str:
        return self.base_slug + kind.suffix


def explain(command: Optional[str], ctx: NameContext) -> ResolvedName:
    """Resolve ``command`` and report which lookup level supplied the area prefix."""
    tokens = (command or "").split()
    if not tokens:
        return ResolvedName(command=command or "", base_slug=UNKNOWN_SLUG, prefix_source=PrefixSource.UNKNOWN)

    area, rest = tokens[0], tokens[1:]
    prefix, source = _area_prefix(area, ctx)
    pieces = [prefix]
    pieces.extend(_clean_tokens(rest, ctx))
    return ResolvedName(command=command or "", base_slug="-".join(pieces), prefix_source=source)


def resolve_base(command: Optional[str], ctx: NameContext) -> str:
    """Return the base slug for ``command``; blank input yields ``"unknown"``."""
    return explain(command, ctx).base_slug


def resolve_file_name(command: Optional[str], ctx: NameContext, kind: FragmentKind) -> str:
    """Return the file name of the ``kind`` artifact for ``command``."""
    return resolve_base(command, ctx) + kind.suffix


def _area_prefix(area: str, ctx: NameContext) -> tuple[str, PrefixSource]:
    # Area lookups are exact and case-sensitive; an uppercase area is an unmapped literal.
    brand = ctx.brand_for(area)
    if brand is not None and brand.file_slug:
        prefix, source = brand.file_slug, PrefixSource.BRAND
    elif area in ctx.compound_words:
        prefix, source = ctx.compound_words[area], PrefixSource.COMPOUND
    else:
        prefix, source = area.lower(), PrefixSource.LITERAL
    if not prefix.lower().startswith(AZURE_PREFIX):
        prefix = AZURE_PREFIX + prefix
    return prefix, source


def _clean_tokens(tokens: List[str], ctx: NameContext) -> List[str]:
    cleaned: List[str] = []
    for token in tokens:
        for piece in token.lower().split("-"):
            if not piece:
                continue
            expansion = ctx.compound_words.get(piece, piece)
            for part in expansion.split("-"):
                if part and part not in ctx.stop_words:
                    cleaned.append(part)
    return cleaned


__all__ = [
    "FragmentKind",
    "PrefixSource",
    "ResolvedName",
    "UNKNOWN_SLUG",
    "explain",
    "resolve_base",
    "resolve_file_name",
]
