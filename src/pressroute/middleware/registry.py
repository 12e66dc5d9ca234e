"""Name -> middleware registry.

Targets are stored unresolved and resolved fresh on every ``get``:

* a class is instantiated,
* ``MethodTarget(cls, "method")`` yields the method bound to a new instance,
* ``Factory(fn)`` calls ``fn()``,
* anything else (plain functions, instances) is returned as-is.

Built-ins are seeded at construction. A user registration with the same
name shadows the built-in; removing it brings the built-in back.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class MethodTarget:
    """A class plus the method to bind on a fresh instance."""

    cls: type
    method: str


@dataclass(frozen=True, slots=True)
class Factory:
    """A zero-argument callable producing a fresh middleware per lookup."""

    fn: Callable[[], Any]


def resolve_target(target: Any) -> Any:
    """Resolve one registered target to a callable middleware."""
    if isinstance(target, Factory):
        return target.fn()
    if isinstance(target, MethodTarget):
        return getattr(target.cls(), target.method)
    if isinstance(target, type):
        return target()
    return target


class MiddlewareRegistry:
    """Resolvable middleware by name."""

    __slots__ = ("_builtins", "_user")

    def __init__(self, builtins: Mapping[str, Any] | None = None) -> None:
        self._builtins: dict[str, Any] = dict(builtins or {})
        self._user: dict[str, Any] = {}

    def register(self, name: str, target: Any) -> None:
        self._user[name] = target

    def register_many(self, targets: Mapping[str, Any]) -> None:
        for name, target in targets.items():
            self.register(name, target)

    def get(self, name: str) -> Any | None:
        """A fresh resolution of *name*, or ``None`` when unknown."""
        if name in self._user:
            return resolve_target(self._user[name])
        if name in self._builtins:
            return resolve_target(self._builtins[name])
        return None

    def has(self, name: str) -> bool:
        return name in self._user or name in self._builtins

    def all(self) -> list[str]:
        """Every resolvable name: built-ins first, then user registrations."""
        return list(dict.fromkeys([*self._builtins, *self._user]))

    def builtin_names(self) -> list[str]:
        return list(self._builtins)

    def remove(self, name: str) -> None:
        """Drop a user registration (built-ins are never removed)."""
        self._user.pop(name, None)

    def clear(self) -> None:
        """Drop every user registration."""
        self._user.clear()

    def group(self, name: str, entries: Iterable[Any]) -> None:
        """Register *name* as a stack of other middleware, run in order.

        The stack short-circuits like the route pipeline does.
        """
        from pressroute.middleware.pipeline import run_pipeline

        stack = tuple(entries)

        def grouped(envelope: Any) -> Any:
            return run_pipeline(stack, envelope, self)

        grouped.__qualname__ = f"group[{name}]"
        self.register(name, grouped)
