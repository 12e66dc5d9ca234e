"""``pressroute routes``: list a router's routes.

Prints one row per route with surface, methods, path, name, and the
effective middleware stack. Declared routes that have not registered yet
are listed too, marked ``pending``.
"""

import argparse
import json
import logging
import sys

from pressroute.cli._resolve import resolve_router
from pressroute.routing.route import Route

HEADERS = ("SURFACE", "METHOD", "PATH", "NAME", "MIDDLEWARE")


def _row(route: Route) -> tuple[str, ...]:
    info = route.to_dict()
    path = info["path"]
    if info["namespace"]:
        path = f"{info['namespace']}/{path}"
    if info["state"] == "pending":
        path = f"{path} (pending)"
    return (
        info["surface"],
        ",".join(info["methods"]),
        path,
        info["name"] or "",
        ", ".join(info["middleware"]),
    )


def format_table(routes: list[Route]) -> str:
    rows = [_row(route) for route in routes]
    widths = [max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(HEADERS)]
    fmt = "  ".join(f"{{:<{width}}}" for width in widths)
    lines = [fmt.format(*HEADERS).rstrip(), "-" * min(sum(widths) + 2 * (len(widths) - 1), 100)]
    lines.extend(fmt.format(*row).rstrip() for row in rows)
    return "\n".join(lines)


def run_routes(args: argparse.Namespace) -> None:
    """Resolve ``args.router`` and print its routes."""
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(level=router.config.log_level.upper())

    routes = [*router.routes(), *router.manager.pending()]
    if args.surface:
        routes = [route for route in routes if route.surface.value == args.surface]

    if args.json:
        print(json.dumps([route.to_dict() for route in routes], indent=2, default=str))
        return

    if not routes:
        print("No routes declared.")
        return

    print(format_table(routes))
