"""Handler references and their resolution.

A route's handler is one of two shapes:

``Inline(func)``
    Any callable, invoked with the request envelope.

``Bound(target, method)``
    A class (or zero-argument factory) plus a method name. The target is
    constructed lazily, once per dispatch, and the method is invoked with
    the envelope as its first argument.

String references (``"Class@method"`` or ``"pkg.module:Class@method"``)
are turned into ``Bound`` values by ``HandlerResolver`` when the route
registers, so an unknown class surfaces at boot instead of on the first
request.
"""

import importlib
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from pressroute.errors import HandlerResolutionError


@dataclass(frozen=True, slots=True)
class Inline:
    """A plain callable handler."""

    func: Callable[..., Any]

    def describe(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


@dataclass(frozen=True, slots=True)
class Bound:
    """A target type (or factory) and the method to call on a fresh instance."""

    target: Any
    method: str

    def instantiate(self) -> Any:
        """Construct the target. Classes and factories are called; anything else is used as-is."""
        if callable(self.target):
            return self.target()
        return self.target

    def describe(self) -> str:
        name = getattr(self.target, "__qualname__", type(self.target).__name__)
        return f"{name}@{self.method}"


type HandlerRef = Inline | Bound

# What a route accepts before resolution
type HandlerSpec = HandlerRef | Callable[..., Any] | str | tuple[Any, str]


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class HandlerResolver:
    """Turns handler specs into ``Inline`` / ``Bound`` values.

    ``"Class@method"`` is looked up in registered factories first, then in
    each search package (``pkg.Class``, then ``pkg.class_module.Class``).
    ``"pkg.module:Class@method"`` imports the module directly.
    """

    __slots__ = ("_factories", "_packages")

    def __init__(self, packages: Iterable[str] = ()) -> None:
        self._factories: dict[str, Any] = {}
        self._packages: list[str] = list(packages)

    def register(self, name: str, factory: Any) -> None:
        """Make *factory* (a class or zero-argument callable) resolvable as *name*."""
        self._factories[name] = factory

    def add_package(self, package: str) -> None:
        """Search *package* for controller classes."""
        if package not in self._packages:
            self._packages.append(package)

    @property
    def packages(self) -> tuple[str, ...]:
        return tuple(self._packages)

    def resolve(self, spec: HandlerSpec) -> HandlerRef:
        """Return a resolved handler reference.

        Raises ``HandlerResolutionError`` when a string or tuple reference
        cannot be resolved, or when *spec* is not a handler at all.
        """
        if isinstance(spec, (Inline, Bound)):
            return spec
        if isinstance(spec, str):
            return self._resolve_string(spec)
        if isinstance(spec, tuple) and len(spec) == 2 and isinstance(spec[1], str):
            target, method = spec
            if isinstance(target, str):
                target = self.resolve_target(target)
            self._check_method(target, method)
            return Bound(target, method)
        if callable(spec):
            return Inline(spec)
        msg = f"Cannot use {spec!r} as a route handler."
        raise HandlerResolutionError(msg)

    def _resolve_string(self, spec: str) -> Bound:
        target_name, sep, method = spec.rpartition("@")
        if not sep or not target_name or not method:
            msg = f"Handler reference {spec!r} must look like 'Class@method' or 'pkg.module:Class@method'."
            raise HandlerResolutionError(msg)
        target = self.resolve_target(target_name)
        self._check_method(target, method)
        return Bound(target, method)

    def resolve_target(self, name: str) -> Any:
        """Resolve a class name (or ``module:Class``) to the class itself."""
        if ":" in name:
            module_path, _, attr = name.partition(":")
            return self._import_attr(module_path, attr, name)

        if name in self._factories:
            return self._factories[name]

        for package in self._packages:
            for module_path in (package, f"{package}.{_snake(name)}"):
                try:
                    module = importlib.import_module(module_path)
                except ModuleNotFoundError as exc:
                    if exc.name is not None and module_path.startswith(exc.name):
                        continue
                    raise
                if hasattr(module, name):
                    return getattr(module, name)

        searched = ", ".join(self._packages) or "no search packages"
        msg = f"Controller {name!r} not found (searched registered factories and {searched})."
        raise HandlerResolutionError(msg)

    def _import_attr(self, module_path: str, attr: str, original: str) -> Any:
        try:
            module = importlib.import_module(module_path)
        except ModuleNotFoundError as exc:
            msg = f"Cannot import module {module_path!r} for handler {original!r}: {exc}"
            raise HandlerResolutionError(msg) from exc
        try:
            return getattr(module, attr)
        except AttributeError as exc:
            msg = f"Module {module_path!r} has no attribute {attr!r} (handler {original!r})."
            raise HandlerResolutionError(msg) from exc

    @staticmethod
    def _check_method(target: Any, method: str) -> None:
        if not hasattr(target, method) and isinstance(target, type):
            msg = f"{target.__qualname__} has no method {method!r}."
            raise HandlerResolutionError(msg)


def invoke(handler: HandlerRef, envelope: Any) -> Any:
    """Call *handler* with *envelope*.

    Bound targets are constructed here, per call. Targets exposing
    ``with_request`` (``pressroute.controller.Controller``) get the
    envelope before the method runs.
    """
    if isinstance(handler, Inline):
        return handler.func(envelope)
    instance = handler.instantiate()
    bind = getattr(instance, "with_request", None)
    if callable(bind):
        bind(envelope)
    return getattr(instance, handler.method)(envelope)
