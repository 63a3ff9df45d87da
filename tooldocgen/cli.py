"""CLI entrypoints for tooldocgen commands."""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path
from typing import Callable

from .config import load_config
from .errors import ToolDocGenError
from .logging import configure_logging
from .naming import FragmentKind, explain, load_name_context
from .pipeline import Pipeline
from .report import BatchSummary


def _add_common_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    verbose_kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
        "default": argparse.SUPPRESS if suppress_default else False,
    }
    parser.add_argument("-v", "--verbose", **verbose_kwargs)
    parser.add_argument(
        "--config",
        default=argparse.SUPPRESS if suppress_default else ".",
        help="Path to .tooldocgen.yml or the directory containing it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write debug logs to this file.",
    )


def _add_tool_list_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("tool_list", help="Path to the tool list JSON produced by the CLI.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tooldocgen",
        description="Generate reference documentation for CLI tools and tool families.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve", help="Show the file names a command resolves to."
    )
    _add_common_options(resolve_parser, suppress_default=True)
    resolve_parser.add_argument("tool_command", help='Tool command, e.g. "aks nodepool get".')
    resolve_parser.add_argument(
        "--kind",
        choices=[kind.value for kind in FragmentKind],
        default=None,
        help="Print only the file name for this artifact kind.",
    )

    raw_parser = subparsers.add_parser("raw", help="Write raw tool skeletons with placeholders.")
    _add_common_options(raw_parser, suppress_default=True)
    _add_tool_list_argument(raw_parser)

    fragments_parser = subparsers.add_parser(
        "fragments", help="Write annotation and parameter fragments."
    )
    _add_common_options(fragments_parser, suppress_default=True)
    _add_tool_list_argument(fragments_parser)

    examples_parser = subparsers.add_parser(
        "examples", help="Generate example prompt fragments with the model."
    )
    _add_common_options(examples_parser, suppress_default=True)
    _add_tool_list_argument(examples_parser)

    compose_parser = subparsers.add_parser(
        "compose", help="Fill raw skeleton placeholders with fragments."
    )
    _add_common_options(compose_parser, suppress_default=True)

    families_parser = subparsers.add_parser(
        "families", help="Assemble tool family documents from composed tools."
    )
    _add_common_options(families_parser, suppress_default=True)
    families_parser.add_argument(
        "--family",
        action="append",
        dest="families",
        help="Only assemble this family (repeatable).",
    )

    cleanup_parser = subparsers.add_parser(
        "cleanup", help="Rewrite existing family documents in a single model pass."
    )
    _add_common_options(cleanup_parser, suppress_default=True)

    all_parser = subparsers.add_parser("all", help="Run every generation stage in order.")
    _add_common_options(all_parser, suppress_default=True)
    _add_tool_list_argument(all_parser)
    all_parser.add_argument(
        "--skip-examples",
        action="store_true",
        help="Do not call the model for example prompts.",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_common_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tooldocgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)
    config_path = Path(args.config)

    if args.command == "resolve":
        try:
            config = load_config(config_path)
            context = load_name_context(config.paths.data_dir)
        except ToolDocGenError as exc:
            parser.exit(1, f"tooldocgen resolve failed: {exc}\n")
        resolved = explain(args.tool_command, context)
        if args.kind:
            print(resolved.file_name(FragmentKind(args.kind)))
            return
        print(f"{resolved.base_slug} (prefix from {resolved.prefix_source.value})")
        for kind in FragmentKind:
            print(f"  {kind.value}: {resolved.file_name(kind)}")
        return

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config_path=config_path)
        return

    try:
        pipeline = Pipeline(load_config(config_path))
    except ToolDocGenError as exc:
        parser.exit(1, f"tooldocgen {args.command} failed: {exc}\n")

    actions: dict[str, Callable[[], BatchSummary]] = {
        "raw": lambda: pipeline.run_raw(Path(args.tool_list)),
        "fragments": lambda: pipeline.run_fragments(Path(args.tool_list)),
        "examples": lambda: pipeline.run_examples(Path(args.tool_list)),
        "compose": pipeline.run_compose,
        "families": lambda: pipeline.run_families(args.families),
        "cleanup": pipeline.run_cleanup,
        "all": lambda: pipeline.run_all(
            Path(args.tool_list), skip_examples=bool(args.skip_examples)
        ),
    }
    action = actions.get(args.command)
    if action is None:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    try:
        summary = _run_cancellable(pipeline, action)
    except (FileNotFoundError, ToolDocGenError) as exc:
        parser.exit(
            1, f"tooldocgen {args.command} failed: {exc}\nRun with --verbose for more details.\n"
        )

    print(summary.describe())
    if not summary.ok:
        parser.exit(1)


def _run_cancellable(pipeline: Pipeline, action: Callable[[], BatchSummary]) -> BatchSummary:
    """Turn Ctrl+C into a cooperative cancel so the current item can finish cleanly."""

    def _handle_interrupt(signum: int, frame: object) -> None:
        if pipeline.cancel_event.is_set():
            raise KeyboardInterrupt
        print("Cancelling after the current item (press Ctrl+C again to abort)...", file=sys.stderr)
        pipeline.cancel()

    previous = signal.signal(signal.SIGINT, _handle_interrupt)
    try:
        return action()
    finally:
        signal.signal(signal.SIGINT, previous)


if __name__ == "__main__":
    main(sys.argv[1:])
