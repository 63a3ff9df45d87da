"""Tests for family grouping of composed tools."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.fakes import write_tool_file
from tooldocgen.families.reader import (
    FamilyReader,
    Found,
    NotFound,
    extract_description,
    extract_namespace,
    extract_tool_count,
    extract_tool_name,
    family_key_from_file_name,
)
from tooldocgen.naming import BrandMapping, NameContext


def test_extractors_return_tagged_results() -> None:
    content = "# List accounts\n\n<!-- @mcpcli Storage account list -->\n\nLists accounts.\n"

    assert extract_tool_name(content) == Found("List accounts")
    assert extract_namespace(content) == Found("storage")
    assert extract_description(content) == Found("Lists accounts.")
    assert isinstance(extract_tool_count(content), NotFound)


def test_extract_tool_count() -> None:
    assert extract_tool_count("Intro\n\n**Tool Count:** 19\n") == Found(19)


def test_extract_namespace_missing() -> None:
    assert extract_namespace("# Title only") == NotFound("@mcpcli marker")


@pytest.mark.parametrize(
    ("file_name", "expected"),
    [
        ("azure-storage-account-list.md", "storage"),
        ("storage-account-list.md", "storage"),
        ("ai-foundry-agents-connect.md", "ai-foundry"),
        ("azure-ai-foundry-agents-connect.md", "ai-foundry"),
        ("azure.md", "azure"),
    ],
)
def test_family_key_from_file_name(file_name: str, expected: str) -> None:
    assert family_key_from_file_name(file_name) == expected


def test_parse_prefers_marker_over_file_name(name_context: NameContext) -> None:
    content = "---\nms.topic: include\n---\n\n# Nodepool: Get\n\n<!-- @mcpcli aks nodepool get -->\n\nGets a pool.\n"

    tool = FamilyReader(name_context).parse(content, "azure-kubernetes-service-node-pool-get.md")

    assert tool.family_key == "aks"
    assert tool.tool_name == "Nodepool: Get"
    assert tool.command == "aks nodepool get"
    assert tool.description == "Gets a pool."
    assert tool.content.startswith("# Nodepool: Get")


def test_parse_falls_back_to_file_name_and_stem() -> None:
    tool = FamilyReader().parse("No heading here.\n", "azure-storage-list.md")

    assert tool.family_key == "storage"
    assert tool.tool_name == "azure-storage-list"
    assert tool.command is None


def test_read_directory_groups_and_sorts(tmp_path: Path, name_context: NameContext) -> None:
    write_tool_file(tmp_path, "b.md", title="nodepool: list", command="aks nodepool list")
    write_tool_file(tmp_path, "a.md", title="Cluster: Get", command="aks cluster get")
    write_tool_file(tmp_path, "c.md", title="Nodepool: Get", command="aks nodepool get")
    write_tool_file(tmp_path, "azure-storage-list.md", title="List", command=None)

    families = FamilyReader(name_context).read_directory(tmp_path)

    assert list(families) == ["aks", "storage"]
    aks = families["aks"]
    assert aks.display_name == "Azure Kubernetes Service"
    assert aks.tool_count == 3
    assert [tool.tool_name for tool in aks.tools] == ["Cluster: Get", "Nodepool: Get", "nodepool: list"]
    assert families["storage"].display_name == "Storage"


def test_grouping_is_order_independent(tmp_path: Path) -> None:
    reader = FamilyReader()
    paths = [
        write_tool_file(tmp_path, "x.md", title="Zeta", command="kv secret list"),
        write_tool_file(tmp_path, "y.md", title="Alpha", command="kv secret get"),
        write_tool_file(tmp_path, "z.md", title="Mid", command="kv key list"),
    ]
    tools = [reader.parse(path.read_text(encoding="utf-8"), path.name) for path in paths]

    forward = reader.group(tools)
    backward = reader.group(list(reversed(tools)))

    assert [t.tool_name for t in forward["kv"].tools] == [t.tool_name for t in backward["kv"].tools]
    assert [t.tool_name for t in forward["kv"].tools] == ["Alpha", "Mid", "Zeta"]


def test_read_directory_requires_existing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        FamilyReader().read_directory(tmp_path / "missing")


def test_display_name_falls_back_to_short_name() -> None:
    context = NameContext.build(brands=[BrandMapping(server_name="kv", short_name="Key Vault")])

    assert FamilyReader(context).display_name_for("kv") == "Key Vault"
    assert FamilyReader(context).display_name_for("sql") == "Sql"
