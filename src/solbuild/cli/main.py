# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the Solbuild command-line interface."""

import argparse
import functools
import json
import logging
import sys
from pathlib import Path

import structlog

from solbuild.compiler.build import BuildContext, build
from solbuild.compiler.cache import FileCacheStore
from solbuild.compiler.errors import CompilerError
from solbuild.compiler.invoker import invoke_compiler
from solbuild.model.result import PerContract
from solbuild.workspace.config import CONFIG_FILE_NAME, ProjectConfig, ProjectConfigError, load_project_config
from solbuild.workspace.frameworks import forge_build_info, hardhat_build_info
from solbuild.workspace.project import ProjectKind, detect_project

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the Solbuild CLI."""
    parser = argparse.ArgumentParser(
        prog="solbuild",
        description="Solbuild - cached Solidity compilation and artifact extraction",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # detect subcommand
    detect_parser = subparsers.add_parser(
        "detect",
        help="Print the detected project type",
        description="Detect whether a directory is a Foundry, Hardhat, or plain Solidity project.",
    )
    detect_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )

    # build subcommand
    build_parser = subparsers.add_parser(
        "build",
        help="Compile a project and print its artifacts as JSON",
        description="Compile all sources of a project and print the normalized build results.",
    )
    build_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )
    build_parser.add_argument(
        "--project",
        choices=[kind.value for kind in ProjectKind],
        default=None,
        help="Project type (default: from the project config, else auto)",
    )
    build_parser.add_argument(
        "--compiler-version",
        default=None,
        help="Compiler version for plain Solidity folders, e.g. v0.8.20",
    )
    build_parser.add_argument(
        "--contract",
        default=None,
        help="Only extract artifacts of this contract (plain Solidity folders only)",
    )
    build_parser.add_argument(
        "--cache-dir",
        default=None,
        help="Cache directory (default: from the project config, else '.tmp' in the project)",
    )
    build_parser.add_argument(
        "--output",
        default=None,
        help="Write the JSON result to this file instead of standard output",
    )
    build_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "detect":
        return _cmd_detect(args)
    if args.command == "build":
        return _cmd_build(args)
    return 0


def _configure_logging(verbose: bool) -> None:
    """Send structlog output to stderr so stdout carries only results."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _cmd_detect(args: argparse.Namespace) -> int:
    """Handle the detect subcommand."""
    _configure_logging(verbose=False)
    directory = Path(args.directory).resolve()

    if not directory.is_dir():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    print(detect_project(directory).value)
    return 0


def _cmd_build(args: argparse.Namespace) -> int:
    """Handle the build subcommand."""
    _configure_logging(args.verbose)
    directory = Path(args.directory).resolve()

    if not directory.is_dir():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config = ProjectConfig()
    config_file = directory / CONFIG_FILE_NAME
    if config_file.exists():
        try:
            config = load_project_config(config_file)
        except ProjectConfigError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    cache_dir = Path(args.cache_dir).resolve() if args.cache_dir else directory / config.cache_directory
    context = BuildContext(
        store=FileCacheStore(cache_dir),
        invoker=functools.partial(invoke_compiler, timeout=config.compiler_timeout),
        frameworks={
            ProjectKind.HARDHAT: functools.partial(hardhat_build_info, timeout=config.compiler_timeout),
            ProjectKind.FORGE: functools.partial(forge_build_info, timeout=config.compiler_timeout),
        },
    )
    project = args.project or config.project
    compiler_version = args.compiler_version or config.compiler_version
    selection = PerContract(name=args.contract) if args.contract else None

    try:
        results = build(project, directory, context, compiler_version, selection)
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    payload = json.dumps([result.to_legacy_dict() for result in results], indent=2)
    if args.output:
        output_path = Path(args.output)
        try:
            output_path.write_text(payload + "\n", encoding="utf-8")
        except OSError as exc:
            print(f"Error: cannot write '{output_path}': {exc}", file=sys.stderr)
            return 1
        print(f"Wrote {len(results)} build result(s) to '{output_path}'.", file=sys.stderr)
    else:
        print(payload)
    return 0
