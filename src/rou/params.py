"""Per-request string maps: route params (mutable) and query params (read-only)."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class RouteParams(Mapping[str, str]):
    """Values bound by ":name" segments of the matched route pattern.

    Created fresh for every request. Handlers and the dispatcher share it
    through the request's Context.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values) if values else {}

    def get(self, name: str, default: str | None = None) -> str | None:  # type: ignore[override]
        return self._values.get(name, default)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def has(self, name: str) -> bool:
        return name in self._values

    def delete(self, name: str) -> None:
        """Remove name if present; missing names are ignored."""
        self._values.pop(name, None)

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"RouteParams({self._values!r})"


class QueryParams(Mapping[str, str]):
    """Immutable view of the request's own query string.

    ``__getitem__`` and ``get`` return the first value for a key,
    ``get_list`` returns all of them.
    """

    __slots__ = ("_data",)

    def __init__(self, query_string: str = "") -> None:
        self._data: dict[str, list[str]] = parse_qs(
            query_string, keep_blank_values=True
        )

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, []))
