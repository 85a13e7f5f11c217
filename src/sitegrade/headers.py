"""Case-insensitive, insertion-ordered header map."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class HeaderMap(Mapping[str, str]):
    """Read-only view of response headers.

    Names are folded to lower case on ingestion; repeated names are joined
    with ", " in the order they were received.
    """

    __slots__ = ("_items",)

    def __init__(self, headers: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, str] = {}
        if headers:
            self._extend(headers.items())

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> HeaderMap:
        instance = cls()
        instance._extend(pairs)
        return instance

    def _extend(self, pairs: Iterable[tuple[str, str]]) -> None:
        for name, value in pairs:
            key = name.lower()
            if key in self._items:
                self._items[key] = f"{self._items[key]}, {value}"
            else:
                self._items[key] = value

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"HeaderMap({self._items!r})"
