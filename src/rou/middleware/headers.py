"""Middleware that rejects requests missing required headers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rou.context import dumps, error_envelope

if TYPE_CHECKING:
    from rou.context import JSONDumps
    from rou.middleware import Middleware
    from rou.rsgi import HTTPProtocol, HTTPScope


def require_headers(
    *names: str,
    status: int = 401,
    message: str | None = None,
    json_dumps: JSONDumps = dumps,
) -> Middleware:
    """Create middleware that halts when any of names is missing or empty.

    Headers are checked in the order given; the first missing one produces a
    JSON error envelope with the given status.

    Args:
        names: Header names. Compared case-insensitively.
        status: Status code of the rejection response.
        message: Error message. Defaults to "<Name> header should be provided".
        json_dumps: Serializer for the rejection body. Pass the router's own
            when it is built with a custom json_dumps.

    Example:
        router.use(require_headers("Authorization"))

        router.get("/users", list_users).middleware(
            require_headers("X-Request-Data", status=400),
        )
    """
    if not names:
        msg = "require_headers needs at least one header name"
        raise ValueError(msg)
    if not 400 <= status <= 599:
        msg = f"status must be an error status code, got {status}"
        raise ValueError(msg)

    # Pre-compute at creation time
    required = tuple((name.lower(), name) for name in names)

    async def middleware(scope: HTTPScope, proto: HTTPProtocol) -> bool:
        for key, name in required:
            if not scope.headers.get(key):
                body = message or f"{name} header should be provided"
                proto.response_str(
                    status,
                    [("content-type", "application/json")],
                    error_envelope(status, body, json_dumps),
                )
                return False
        return True

    return middleware
