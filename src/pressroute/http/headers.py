"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]``. Hosts hand headers over in many shapes
(``Content-Type``, ``content_type``, ``HTTP_CONTENT_TYPE``); names are
normalized once at construction so lookups never care which one arrived.
"""

from collections.abc import Iterable, Iterator, Mapping


def normalize_header_name(name: str) -> str:
    """Lowercase *name* and use dashes (``X_WP_Nonce`` -> ``x-wp-nonce``)."""
    key = name.strip().lower().replace("_", "-")
    if key.startswith("http-"):
        key = key[5:]
    return key


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_raw",)

    def __init__(
        self,
        raw: Mapping[str, str | list[str]] | Iterable[tuple[str, str]] = (),
    ) -> None:
        pairs: list[tuple[str, str]] = []
        items = raw.items() if isinstance(raw, Mapping) else raw
        for name, value in items:
            key = normalize_header_name(name)
            if isinstance(value, (list, tuple)):
                pairs.extend((key, str(v)) for v in value)
            else:
                pairs.append((key, str(value)))
        object.__setattr__(self, "_raw", tuple(pairs))

    def __getitem__(self, key: str) -> str:
        wanted = normalize_header_name(key)
        for name, value in self._raw:
            if name == wanted:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        wanted = normalize_header_name(key)
        return any(name == wanted for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            if name not in seen:
                seen.add(name)
                yield name

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        wanted = normalize_header_name(key)
        return [value for name, value in self._raw if name == wanted]
