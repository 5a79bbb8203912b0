"""Short-circuiting middleware chains.

A middleware is an async predicate over the raw request and response sink:

    async def auth(scope: HTTPScope, proto: HTTPProtocol) -> bool:
        if "authorization" not in scope.headers:
            proto.response_str(401, [], "unauthorized")
            return False
        return True

Returning True lets the request continue. Returning False stops the chain;
nothing after it runs (later middleware, route middleware, the handler) and
the middleware that halted is responsible for the response.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable

from rou.rsgi import HTTPProtocol, HTTPScope

from .headers import require_headers

__all__ = ["Middleware", "require_headers", "run_chain"]

logger = logging.getLogger(__name__)

type Middleware = Callable[[HTTPScope, HTTPProtocol], Awaitable[bool]]


async def run_chain(
    chain: Iterable[Middleware], scope: HTTPScope, proto: HTTPProtocol
) -> bool:
    """Runs chain in order, returns False as soon as one middleware halts."""
    for middleware in chain:
        if not await middleware(scope, proto):
            logger.debug(
                "%s halted %s %s",
                getattr(middleware, "__qualname__", middleware),
                scope.method,
                scope.path,
            )
            return False
    return True
