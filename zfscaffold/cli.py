"""Command-line entry point.

Usage::

    zfscaffold create project ./my-app
    zfscaffold create module Blog ./my-app
    zfscaffold create controller Index Blog ./my-app --no-config
    zfscaffold create action show Index Blog ./my-app
    zfscaffold create routing Blog ./my-app --single-route
    zfscaffold modules list ./my-app
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError as ConfigValidationError

from zfscaffold.commands import CommandResult, ScaffoldCommands
from zfscaffold.config import ToolConfig
from zfscaffold.utils import print_error


def _add_common_flags(parser: argparse.ArgumentParser, *, no_config: bool = False) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Root of the ZF2 application (default: current directory)",
    )
    parser.add_argument(
        "-i", "--ignore-conventions",
        action="store_true",
        help="Use the names as given instead of applying the ZF2 naming conventions",
    )
    parser.add_argument(
        "-d", "--no-docblocks",
        action="store_true",
        help="Do not generate doc blocks",
    )
    if no_config:
        parser.add_argument(
            "-n", "--no-config",
            action="store_true",
            help="Do not register the controller in module.config.php",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zfscaffold",
        description="Scaffolding for Zend Framework 2 applications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  zfscaffold create project ./my-app\n"
            "  zfscaffold create module Blog ./my-app\n"
            "  zfscaffold create action show Index Blog ./my-app\n"
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: built from ZFS_* environment variables)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a project, module, controller, ...")
    targets = create.add_subparsers(dest="target", required=True)

    project = targets.add_parser("project", help="Create a project from the skeleton application")
    project.add_argument("path", help="Directory of the new project (must not exist)")

    module = targets.add_parser("module", help="Create a module")
    module.add_argument("module_name")
    _add_common_flags(module)

    controller = targets.add_parser("controller", help="Create a controller in a module")
    controller.add_argument("controller_name")
    controller.add_argument("module_name")
    _add_common_flags(controller, no_config=True)

    action = targets.add_parser("action", help="Add an action to a controller")
    action.add_argument("action_name")
    action.add_argument("controller_name")
    action.add_argument("module_name")
    _add_common_flags(action)

    routing = targets.add_parser("routing", help="Write the router configuration of a module")
    routing.add_argument("module_name")
    _add_common_flags(routing)
    routing.add_argument(
        "-s", "--single-route",
        action="store_true",
        help="Use one segment route for the whole module",
    )

    modules = commands.add_parser("modules", help="List the modules of an application")
    modules.add_argument(
        "args",
        nargs="*",
        metavar="ARGS",
        help="Optional 'list' keyword, then the root of the ZF2 application",
    )
    return parser


def _load_config(path: str | None) -> ToolConfig:
    if path is None:
        return ToolConfig.from_env()
    return ToolConfig.load(Path(path))


def dispatch(args: argparse.Namespace, commands: ScaffoldCommands) -> CommandResult:
    """Run the command selected by *args*."""
    if args.command == "modules":
        rest = list(args.args)
        if rest and rest[0] == "list":
            rest.pop(0)
        return commands.list_modules(rest[0] if rest else ".")

    flags = {
        "ignore_conventions": getattr(args, "ignore_conventions", False),
        "no_docblocks": getattr(args, "no_docblocks", False),
    }
    if args.target == "project":
        return commands.project(args.path)
    if args.target == "module":
        return commands.module(args.module_name, args.path, **flags)
    if args.target == "controller":
        return commands.controller(
            args.controller_name, args.module_name, args.path, no_config=args.no_config, **flags
        )
    if args.target == "action":
        return commands.action(
            args.action_name, args.controller_name, args.module_name, args.path, **flags
        )
    return commands.routing(args.module_name, args.path, single_route=args.single_route, **flags)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``zfscaffold`` / ``python -m zfscaffold``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args.config)
    except (OSError, ValueError, ConfigValidationError) as exc:
        print_error(f"Error: invalid configuration: {exc}")
        sys.exit(1)

    result = dispatch(args, ScaffoldCommands(config))
    sys.exit(result.error_level)


if __name__ == "__main__":
    main()
