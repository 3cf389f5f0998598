"""CLI entrypoints for contractweaver commands."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from .analyzers.tree_sitter import TreeSitterDefinitionBuilder
from .config import ConfigError, WeaverConfig, load_config
from .errors import WeaverError
from .hierarchy import DependencyHierarchy
from .logging import configure_logging, get_logger
from .models import StructureDescriptor
from .weaving.pipeline import weave_file

_WEAVABLE_KINDS = ("class", "trait")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .contractweaver.yml or its directory (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contractweaver",
        description="Weave design-by-contract checks into PHP source files.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    weave_parser = subparsers.add_parser(
        "weave",
        help="Instrument the contract-bearing methods of one structure.",
    )
    _add_verbose_option(weave_parser, suppress_default=True)
    _add_config_option(weave_parser)
    weave_parser.add_argument("file", help="PHP source file to weave.")
    weave_parser.add_argument(
        "--structure",
        default=None,
        help="Qualified or short name of the structure to weave (defaults to the first class or trait).",
    )
    weave_parser.add_argument(
        "--output",
        default=None,
        help="Write the woven source here instead of stdout.",
    )
    weave_parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Deliver the source to the weaver in chunks of roughly this many characters.",
    )

    deps_parser = subparsers.add_parser(
        "deps",
        help="Report structures required by the given files that are not supplied.",
    )
    _add_verbose_option(deps_parser, suppress_default=True)
    _add_config_option(deps_parser)
    deps_parser.add_argument("files", nargs="+", help="PHP source files to inspect.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for contractweaver commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config = load_config(Path(args.config) if args.config else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "weave":
        try:
            woven = _run_weave(args, config)
        except (OSError, WeaverError) as exc:
            parser.exit(1, f"contractweaver weave failed: {exc}\nRun with --verbose for more details.\n")
        if args.output:
            Path(args.output).write_text(woven, encoding="utf-8")
            print(f"Woven source written to {args.output}")
        else:
            sys.stdout.write(woven)
    elif args.command == "deps":
        try:
            hierarchy = _run_deps(args.files, config)
        except (OSError, WeaverError) as exc:
            parser.exit(1, f"contractweaver deps failed: {exc}\nRun with --verbose for more details.\n")
        pending = hierarchy.pending()
        for name in pending:
            print(f"pending: {name}")
        if pending:
            parser.exit(1, "Hierarchy incomplete\n")
        print("Hierarchy complete")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_weave(args: argparse.Namespace, config: WeaverConfig) -> str:
    path = Path(args.file)
    builder = TreeSitterDefinitionBuilder(config.weaving.accessor_hooks)
    structure = select_structure(builder.build_file(path), args.structure)
    if args.chunk_size is not None:
        chunk_size = args.chunk_size if args.chunk_size > 0 else None
        config = replace(config, weaving=replace(config.weaving, chunk_size=chunk_size))
    return weave_file(path, structure, config=config)


def _run_deps(files: Sequence[str], config: WeaverConfig) -> DependencyHierarchy:
    logger = get_logger("cli")
    builder = TreeSitterDefinitionBuilder(config.weaving.accessor_hooks)
    hierarchy = DependencyHierarchy()
    for file in files:
        for structure in builder.build_file(Path(file)):
            hierarchy.insert(structure)
            logger.debug("Inserted %s from %s", structure.qualified_name, file)
    return hierarchy


def select_structure(
    structures: List[StructureDescriptor], name: Optional[str] = None
) -> StructureDescriptor:
    """Pick the structure named ``name`` or the first weavable one."""
    if name:
        wanted = name.lstrip("\\")
        for structure in structures:
            if wanted in (structure.qualified_name, structure.short_name):
                return structure
        raise WeaverError(f"No structure named {name} found")
    for structure in structures:
        if structure.kind in _WEAVABLE_KINDS:
            return structure
    raise WeaverError("No class or trait found to weave")


__all__ = ["main", "select_structure"]
