"""pressroute CLI: inspect a router's routes and middleware.

Entry point registered as ``pressroute`` in ``pyproject.toml``::

    [project.scripts]
    pressroute = "pressroute.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``pressroute`` command."""
    parser = argparse.ArgumentParser(
        prog="pressroute",
        description="pressroute: one route declaration for data, page, panel, and action endpoints.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- pressroute routes ------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List declared routes")
    routes_parser.add_argument("router", help="Import string (e.g. myplugin.routes:router)")
    routes_parser.add_argument(
        "--surface",
        choices=("data", "page", "panel", "action"),
        default=None,
        help="Only list routes on one surface",
    )
    routes_parser.add_argument("--json", action="store_true", help="Print routes as JSON")

    # -- pressroute middleware --------------------------------------------
    middleware_parser = subparsers.add_parser("middleware", help="List resolvable middleware names")
    middleware_parser.add_argument("router", help="Import string (e.g. myplugin.routes:router)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from pressroute.cli._routes import run_routes

        run_routes(args)
    elif args.command == "middleware":
        from pressroute.cli._middleware import run_middleware

        run_middleware(args)
