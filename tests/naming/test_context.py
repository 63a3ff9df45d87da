"""Tests for loading the naming lookup tables."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tooldocgen.errors import NameContextError
from tooldocgen.naming import load_name_context, resolve_base


def _write_tables(directory: Path, *, brands: object, compounds: object, stops: object) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "brand-to-server-mapping.json").write_text(json.dumps(brands), encoding="utf-8")
    (directory / "compound-words.json").write_text(json.dumps(compounds), encoding="utf-8")
    (directory / "stop-words.json").write_text(json.dumps(stops), encoding="utf-8")


def test_load_name_context_reads_tables(tmp_path: Path) -> None:
    _write_tables(
        tmp_path,
        brands=[
            {
                "brandName": "Azure Kubernetes Service",
                "mcpServerName": "aks",
                "shortName": "AKS",
                "fileName": "azure-kubernetes-service",
            },
            {"brandName": "No server name"},
        ],
        compounds={"nodepool": "node-pool"},
        stops=["The", "of"],
    )

    context = load_name_context(tmp_path)

    assert list(context.brand_map) == ["aks"]
    assert context.brand_map["aks"].brand_name == "Azure Kubernetes Service"
    assert context.stop_words == frozenset({"The", "of"})
    assert resolve_base("aks nodepool get", context) == "azure-kubernetes-service-node-pool-get"


def test_context_tables_are_read_only(tmp_path: Path) -> None:
    _write_tables(tmp_path, brands=[], compounds={"a": "b"}, stops=[])
    context = load_name_context(tmp_path)

    with pytest.raises(TypeError):
        context.compound_words["x"] = "y"  # type: ignore[index]


def test_missing_table_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(NameContextError, match="not found"):
        load_name_context(tmp_path)


def test_malformed_table_is_fatal(tmp_path: Path) -> None:
    _write_tables(tmp_path, brands={"aks": "oops"}, compounds={}, stops=[])
    with pytest.raises(NameContextError, match="array"):
        load_name_context(tmp_path)


def test_invalid_json_is_fatal(tmp_path: Path) -> None:
    _write_tables(tmp_path, brands=[], compounds={}, stops=[])
    (tmp_path / "stop-words.json").write_text("[not json", encoding="utf-8")
    with pytest.raises(NameContextError):
        load_name_context(tmp_path)


def test_bundled_tables_load() -> None:
    context = load_name_context()
    assert resolve_base("aks nodepool get", context) == "azure-kubernetes-service-node-pool-get"
