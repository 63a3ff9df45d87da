"""Name resolution for generated documentation artifacts."""

from .context import BrandMapping, NameContext, load_name_context
from .display import tool_display_name
from .resolver import (
    FragmentKind,
    PrefixSource,
    ResolvedName,
    explain,
    resolve_base,
    resolve_file_name,
)

__all__ = [
    "BrandMapping",
    "FragmentKind",
    "NameContext",
    "PrefixSource",
    "ResolvedName",
    "explain",
    "load_name_context",
    "resolve_base",
    "resolve_file_name",
    "tool_display_name",
]
