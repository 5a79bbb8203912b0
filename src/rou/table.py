"""Route storage: per-method ordered route lists plus a method-agnostic path index.

Matching is a linear scan in registration order, the first route whose
pattern fits the request path wins.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, NamedTuple

from rou.match import match_path

if TYPE_CHECKING:
    from rou.context import Context
    from rou.middleware import Middleware

logger = logging.getLogger(__name__)

type Handler = Callable[[Context], Awaitable[Any]]
type HTTPMethod = Literal[
    "CONNECT", "DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT", "TRACE"
]

HTTP_METHODS: frozenset[str] = frozenset(
    {"CONNECT", "DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT", "TRACE"}
)


class RouteKey(NamedTuple):
    method: str
    path: str


@dataclass(slots=True, eq=False)
class Route:
    """A registered handler and its own middleware chain.

    method, path and handler are fixed; the chain only grows, through
    middleware(), until the owning table is frozen.
    """

    method: str
    path: str
    handler: Handler
    chain: list[Middleware] = field(default_factory=list)
    frozen: bool = field(default=False, repr=False)

    @property
    def key(self) -> RouteKey:
        return RouteKey(self.method, self.path)

    def middleware(self, *middleware: Middleware) -> Route:
        """Appends middleware run after this route matches, before its handler."""
        if self.frozen:
            msg = f"route {self.method} {self.path} is finalized"
            raise RuntimeError(msg)
        self.chain.extend(middleware)
        return self

    def match(self, path: str) -> dict[str, str] | None:
        """Params for path if it fits this route's pattern, else None."""
        if path == self.path:  # literal match, no params
            return {}
        return match_path(self.path, path)


class RouteTable:
    """Owns every Route of a router.

    Registration is not synchronised: register everything, then freeze(),
    then serve. A frozen table is only read.
    """

    __slots__ = ("_frozen", "_keys", "_paths", "_routes")

    def __init__(self) -> None:
        self._routes: dict[str, list[Route]] = {}
        self._keys: set[RouteKey] = set()
        self._paths: dict[str, None] = {}  # insertion-ordered set
        self._frozen = False

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Route]:
        """Routes grouped by method, in registration order within a method."""
        for routes in self._routes.values():
            yield from routes

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, method: str, path: str, handler: Handler) -> Route | None:
        """Adds a route for method/path.

        Returns the new route, or None when method/path is already registered;
        the existing route (and its handler) is kept.
        """
        if self._frozen:
            msg = f"cannot register {method} {path}: route table is finalized"
            raise RuntimeError(msg)
        method = method.upper()
        if method not in HTTP_METHODS:
            msg = f"unsupported http method {method!r}"
            raise ValueError(msg)
        if not path.startswith("/"):
            msg = f"path must start with '/', provided {path=}"
            raise ValueError(msg)

        key = RouteKey(method, path)
        if key in self._keys:
            logger.debug("ignoring duplicate route %s %s", method, path)
            return None

        route = Route(method=method, path=path, handler=handler)
        self._keys.add(key)
        self._paths[path] = None
        self._routes.setdefault(method, []).append(route)
        logger.debug("registered %s %s", method, path)
        return route

    def routes_for(self, method: str) -> Sequence[Route]:
        return self._routes.get(method, ())

    def path_exists(self, path: str) -> bool:
        """True if path fits any registered pattern, under any method."""
        return any(match_path(pattern, path) is not None for pattern in self._paths)

    def methods_for(self, path: str) -> list[str]:
        """Methods with at least one route whose pattern fits path."""
        return [
            method
            for method, routes in self._routes.items()
            if any(route.match(path) is not None for route in routes)
        ]

    def freeze(self) -> None:
        """Makes the table read-only. Idempotent."""
        if self._frozen:
            return
        for route in self:
            route.frozen = True
        self._frozen = True


def format_routes(table: RouteTable) -> str:
    """Format registered routes as a column-aligned list:

        GET      /                          home
        GET      /users/:id                 get_user       [auth]
        POST     /users                     create_user
        DELETE   /users/:id                 delete_user    [auth > audit]

    Routes are grouped by method in the order methods were first used, and by
    registration order within a method, i.e. the order they are matched in.
    """
    rows = [
        (route.method, route.path, _qualname(route.handler), route.chain)
        for route in table
    ]
    if not rows:
        return ""

    method_w = max(len(r[0]) for r in rows)
    path_w = max(len(r[1]) for r in rows)
    handler_w = max(len(r[2]) for r in rows)

    lines: list[str] = []
    for method, path, handler, chain in rows:
        if chain:
            mw = " > ".join(_qualname(m) for m in chain)
            lines.append(
                f"{method:<{method_w}}   {path:<{path_w}}   "
                f"{handler:<{handler_w}}   [{mw}]"
            )
        else:
            lines.append(f"{method:<{method_w}}   {path:<{path_w}}   {handler}")
    return "\n".join(lines)


def _qualname(obj: object) -> str:
    """Extract __qualname__ from a callable, falling back to repr."""
    return str(obj.__qualname__) if hasattr(obj, "__qualname__") else repr(obj)
