"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tooldocgen.cli import _build_parser, main


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "compose"])
    assert args.verbose is True
    assert args.command == "compose"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["compose", "--verbose"])
    assert args.verbose is True


def test_cli_config_defaults_to_current_directory() -> None:
    args = _build_parser().parse_args(["families", "--family", "aks", "--family", "storage"])
    assert args.config == "."
    assert args.families == ["aks", "storage"]


def test_cli_all_accepts_skip_examples() -> None:
    args = _build_parser().parse_args(["all", "tools.json", "--skip-examples", "--config", "cfg"])
    assert args.tool_list == "tools.json"
    assert args.skip_examples is True
    assert args.config == "cfg"


def test_cli_resolve_rejects_unknown_kind() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["resolve", "aks nodepool get", "--kind", "bogus"])


def test_resolve_prints_file_names(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["resolve", "aks nodepool get", "--config", str(tmp_path)])

    out = capsys.readouterr().out
    assert out.startswith("azure-kubernetes-service-node-pool-get (prefix from brand)")
    assert "annotation: azure-kubernetes-service-node-pool-get-annotations.md" in out


def test_resolve_single_kind(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["resolve", "storage list", "--kind", "parameter", "--config", str(tmp_path)])
    assert capsys.readouterr().out.strip() == "azure-storage-list-parameters.md"


def test_raw_and_fragments_commands_write_files(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    tool_list = tmp_path / "tools.json"
    tool_list.write_text(json.dumps([{"command": "storage list", "description": "List."}]), encoding="utf-8")

    main(["raw", str(tool_list), "--config", str(tmp_path)])
    main(["fragments", str(tool_list), "--config", str(tmp_path)])

    assert (tmp_path / "generated" / "raw" / "azure-storage-list.md").is_file()
    assert (tmp_path / "generated" / "parameters" / "azure-storage-list-parameters.md").is_file()
    assert "raw: 1 succeeded, 0 skipped, 0 failed" in capsys.readouterr().out


def test_compose_without_raw_directory_exits_non_zero(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["compose", "--config", str(tmp_path)])
    assert excinfo.value.code == 1


def test_invalid_config_exits_non_zero(tmp_path: Path) -> None:
    (tmp_path / ".tooldocgen.yml").write_text("- not a mapping\n", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main(["compose", "--config", str(tmp_path)])
    assert excinfo.value.code == 1


def test_failed_items_exit_non_zero(tmp_path: Path) -> None:
    tool_list = tmp_path / "tools.json"
    tool_list.write_text(json.dumps([{"command": ""}]), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["raw", str(tool_list), "--config", str(tmp_path)])
    assert excinfo.value.code == 1
