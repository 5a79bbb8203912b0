"""HTTP router/dispatcher implementation, served as an RSGI application.

Per request:

    global middleware -> routes for method -> first matching route
        -> route middleware -> handler(Context)

If no route for the request method fits the path, the response is a 405 when
the path fits a route registered under another method, and a 404 otherwise.
"""

import asyncio
import logging
from contextvars import ContextVar

from rou.context import Context, JSONDumps, dumps
from rou.middleware import Middleware, run_chain
from rou.params import RouteParams
from rou.rsgi import HTTPProtocol, HTTPScope
from rou.table import Handler, HTTPMethod, Route, RouteTable

logger = logging.getLogger(__name__)

http_route: ContextVar[str] = ContextVar("http_route")

MESSAGE_NOT_FOUND = "Page not found"
MESSAGE_METHOD_NOT_ALLOWED = "Method not allowed"


class Router:
    """Matches requests to handlers registered per method and path pattern.

    Register every route and global middleware before serving. finalize()
    (called by the server through __rsgi_init__) makes the route table
    read-only; later registration raises RuntimeError.

    Example:
        router = Router()
        router.use(require_headers("Authorization"))
        router.get("/users/:id", get_user).middleware(audit)

        server = Server(router, address="127.0.0.1", port=8000)
    """

    __slots__ = (
        "_finalized",
        "_json_dumps",
        "_method_not_allowed_handler",
        "_middleware",
        "_not_found_handler",
        "_table",
    )

    def __init__(
        self,
        *,
        table: RouteTable | None = None,
        not_found_handler: Handler | None = None,
        method_not_allowed_handler: Handler | None = None,
        json_dumps: JSONDumps | None = None,
    ) -> None:
        self._table = table if table is not None else RouteTable()
        self._not_found_handler = not_found_handler or self._not_found
        self._method_not_allowed_handler = (
            method_not_allowed_handler or self._method_not_allowed
        )
        self._json_dumps = json_dumps or dumps
        self._middleware: list[Middleware] = []
        self._finalized = False

    @property
    def table(self) -> RouteTable:
        return self._table

    # --- RSGI -----------------------------------------------------------------
    def __rsgi_init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.finalize()

    def __rsgi_del__(self, loop: asyncio.AbstractEventLoop) -> None:
        pass

    async def __rsgi__(self, scope: HTTPScope, proto: HTTPProtocol) -> None:
        if scope.proto != "http":
            msg = f"unsupported protocol {scope.proto!r}, only http is routed"
            raise ValueError(msg)
        await self.dispatch(scope, proto)

    # --- dispatch -------------------------------------------------------------
    def match(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        """Finds the first route registered for method that fits path.

        Pure lookup: no middleware or handler runs. Returns the route and the
        values bound by its ":name" segments, or None.
        """
        for route in self._table.routes_for(method.upper()):
            params = route.match(path)
            if params is not None:
                return route, params
        return None

    async def dispatch(self, scope: HTTPScope, proto: HTTPProtocol) -> None:
        """Runs the full request flow for one request."""
        if not await run_chain(self._middleware, scope, proto):
            return

        # path is unescaped by the rsgi server
        path = scope.path
        matched = self.match(scope.method, path)
        if matched is not None:
            route, params = matched
            ctx = Context(
                scope,
                proto,
                RouteParams(params),
                route=route.path,
                json_dumps=self._json_dumps,
            )
            if not await run_chain(route.chain, scope, proto):
                return
            with http_route.set(route.path):
                await route.handler(ctx)
            return

        ctx = Context(scope, proto, json_dumps=self._json_dumps)
        if self._table.path_exists(path):
            logger.debug("method not allowed: %s %s", scope.method, path)
            await self._method_not_allowed_handler(ctx)
        else:
            logger.debug("not found: %s %s", scope.method, path)
            await self._not_found_handler(ctx)

    async def _not_found(self, ctx: Context) -> None:
        ctx.error_json(404, MESSAGE_NOT_FOUND)

    async def _method_not_allowed(self, ctx: Context) -> None:
        allow = ", ".join(self._table.methods_for(ctx.scope.path))
        ctx.error_json(405, MESSAGE_METHOD_NOT_ALLOWED, [("allow", allow)])

    # --- registration ---------------------------------------------------------
    def finalize(self) -> None:
        """Freezes the route table. Idempotent.

        Called automatically by RSGI servers at startup, but can be called
        manually, e.g. before handing the router to a server that does not
        call __rsgi_init__.
        """
        if self._finalized:
            return
        self._table.freeze()
        self._finalized = True
        logger.info("router finalized with %d routes", len(self._table))

    def use(self, *middleware: Middleware) -> None:
        """Adds global middleware, run for every request before matching."""
        if self._finalized:
            msg = "cannot add middleware: router is finalized"
            raise RuntimeError(msg)
        self._middleware.extend(middleware)

    def method(self, method: HTTPMethod, path: str, handler: Handler) -> Route:
        """Registers handler for method at path.

        Registering the same method and path again keeps the first handler;
        the returned route is then detached, so middleware added to it has
        no effect.
        """
        route = self._table.register(method, path, handler)
        if route is None:
            return Route(method=method.upper(), path=path, handler=handler)
        return route

    def get(self, path: str, handler: Handler) -> Route:
        """Registers handler at path for GET."""
        return self.method("GET", path, handler)

    def post(self, path: str, handler: Handler) -> Route:
        """Registers handler at path for POST."""
        return self.method("POST", path, handler)

    def put(self, path: str, handler: Handler) -> Route:
        """Registers handler at path for PUT."""
        return self.method("PUT", path, handler)

    def patch(self, path: str, handler: Handler) -> Route:
        """Registers handler at path for PATCH."""
        return self.method("PATCH", path, handler)

    def delete(self, path: str, handler: Handler) -> Route:
        """Registers handler at path for DELETE."""
        return self.method("DELETE", path, handler)

    def options(self, path: str, handler: Handler) -> Route:
        """Registers handler at path for OPTIONS."""
        return self.method("OPTIONS", path, handler)

    def head(self, path: str, handler: Handler) -> Route:
        """Registers handler at path for HEAD."""
        return self.method("HEAD", path, handler)
