"""``pressroute middleware``: list the names a router's registry resolves."""

import argparse
import sys

from pressroute.cli._resolve import resolve_router


def run_middleware(args: argparse.Namespace) -> None:
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    registry = router.registry
    builtins = set(registry.builtin_names())
    for name in registry.all():
        origin = "built-in" if name in builtins else "registered"
        print(f"{name:<16} {origin}")
