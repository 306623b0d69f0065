"""Vertebrae CLI: route table inspection and lazy controller checks.

Entry point registered as ``vertebrae`` in ``pyproject.toml``::

    [project.scripts]
    vertebrae = "vertebrae.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``vertebrae`` command."""
    parser = argparse.ArgumentParser(
        prog="vertebrae",
        description="Vertebrae: an application shell for controller transitions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- vertebrae routes -------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app or myapp:MyApp)",
    )

    # -- vertebrae check --------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Import every lazy controller")
    check_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app or myapp:MyApp)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from vertebrae.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from vertebrae.cli._check import run_check

        run_check(args)
