"""Per-request handler context and the JSON response envelope.

Every JSON response written by the router or through a Context has the shape

    {"error": null, "body": <payload>}                            # success
    {"error": {"message": <str>, "code": <status>}, "body": null} # error
"""

import json
from collections.abc import Callable
from typing import Any

from rou.params import QueryParams, RouteParams
from rou.rsgi import HTTPProtocol, HTTPScope

type JSONDumps = Callable[[Any], str]

JSON_HEADERS = (("content-type", "application/json"),)


def dumps(obj: Any) -> str:
    """Compact JSON, keys kept in insertion order."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def success_envelope(body: Any, json_dumps: JSONDumps = dumps) -> str:
    return json_dumps({"error": None, "body": body})


def error_envelope(status: int, message: str, json_dumps: JSONDumps = dumps) -> str:
    return json_dumps({"error": {"message": message, "code": status}, "body": None})


class Context:
    """What a handler gets for one request.

    Attributes:
        scope: The RSGI request scope.
        proto: The RSGI protocol, i.e. the response sink.
        params: Values bound by the matched pattern's ":name" segments.
        route: The matched route pattern, e.g. "/users/:id".
    """

    __slots__ = ("_json_dumps", "_query", "params", "proto", "route", "scope")

    def __init__(
        self,
        scope: HTTPScope,
        proto: HTTPProtocol,
        params: RouteParams | None = None,
        route: str = "",
        json_dumps: JSONDumps = dumps,
    ) -> None:
        self.scope = scope
        self.proto = proto
        self.params = params if params is not None else RouteParams()
        self.route = route
        self._json_dumps = json_dumps
        self._query: QueryParams | None = None

    @property
    def query(self) -> QueryParams:
        """Query string params, parsed on first access."""
        if self._query is None:
            self._query = QueryParams(self.scope.query_string)
        return self._query

    async def body(self) -> bytes:
        """Reads the full request body."""
        return await self.proto()

    def success_json(self, body: Any) -> None:
        """Writes a 200 response with body wrapped in the success envelope."""
        self.proto.response_str(
            200, list(JSON_HEADERS), success_envelope(body, self._json_dumps)
        )

    def error_json(
        self,
        status: int,
        message: str,
        headers: list[tuple[str, str]] | None = None,
    ) -> None:
        """Writes status with message wrapped in the error envelope."""
        self.proto.response_str(
            status,
            [*JSON_HEADERS, *(headers or ())],
            error_envelope(status, message, self._json_dumps),
        )
