import pytest

from rou.context import Context
from rou.table import Route, RouteKey, RouteTable, format_routes


async def handler(ctx: Context) -> None:
    pass


async def other_handler(ctx: Context) -> None:
    pass


@pytest.mark.parametrize(
    "method", ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
)
def test_register_keeps_order(method: str) -> None:
    table = RouteTable()
    table.register(method, "/test-1", handler)
    table.register(method, "/test-2", handler)

    assert [r.path for r in table.routes_for(method)] == ["/test-1", "/test-2"]


def test_register_returns_route() -> None:
    table = RouteTable()
    route = table.register("GET", "/users/:id", handler)

    assert isinstance(route, Route)
    assert route.key == RouteKey("GET", "/users/:id")
    assert route.handler is handler
    assert route.chain == []


def test_register_normalises_method_case() -> None:
    table = RouteTable()
    table.register("get", "/users", handler)
    assert len(table.routes_for("GET")) == 1


def test_duplicate_registration_is_ignored() -> None:
    table = RouteTable()
    first = table.register("GET", "/users", handler)
    second = table.register("GET", "/users", other_handler)

    assert first is not None
    assert second is None
    routes = table.routes_for("GET")
    assert len(routes) == 1
    assert routes[0].handler is handler
    assert len(table) == 1


def test_same_path_different_methods() -> None:
    table = RouteTable()
    table.register("GET", "/users", handler)
    table.register("POST", "/users", handler)

    assert len(table.routes_for("GET")) == 1
    assert len(table.routes_for("POST")) == 1
    assert len(table) == 2


def test_routes_for_unknown_method_is_empty() -> None:
    table = RouteTable()
    table.register("GET", "/users", handler)
    assert list(table.routes_for("DELETE")) == []


def test_register_rejects_relative_path() -> None:
    table = RouteTable()
    with pytest.raises(ValueError, match="path must start with '/'"):
        table.register("GET", "users", handler)


def test_register_rejects_unknown_method() -> None:
    table = RouteTable()
    with pytest.raises(ValueError, match="unsupported http method 'FETCH'"):
        table.register("FETCH", "/users", handler)


def test_path_exists_any_method() -> None:
    table = RouteTable()
    table.register("POST", "/test-route/:id", handler)

    assert table.path_exists("/test-route/10")
    assert not table.path_exists("/test-route")
    assert not table.path_exists("/bad-route/10")


def test_methods_for() -> None:
    table = RouteTable()
    table.register("GET", "/users/:id", handler)
    table.register("DELETE", "/users/:id", handler)
    table.register("POST", "/users", handler)

    assert table.methods_for("/users/1") == ["GET", "DELETE"]
    assert table.methods_for("/users") == ["POST"]
    assert table.methods_for("/nope") == []


def test_route_match_literal_first() -> None:
    route = Route(method="GET", path="/users/:id", handler=handler)
    assert route.match("/users/:id") == {}
    assert route.match("/users/7") == {"id": "7"}
    assert route.match("/users") is None


def test_route_middleware_is_chainable() -> None:
    async def mw1(scope, proto) -> bool:
        return True

    async def mw2(scope, proto) -> bool:
        return True

    table = RouteTable()
    route = table.register("GET", "/users", handler)
    assert route is not None
    assert route.middleware(mw1).middleware(mw2) is route
    assert route.chain == [mw1, mw2]


def test_freeze_rejects_registration() -> None:
    table = RouteTable()
    route = table.register("GET", "/users", handler)
    table.freeze()
    table.freeze()  # idempotent

    assert table.frozen
    with pytest.raises(RuntimeError, match="route table is finalized"):
        table.register("GET", "/other", handler)
    assert route is not None
    with pytest.raises(RuntimeError, match="is finalized"):
        route.middleware()
    assert [r.path for r in table.routes_for("GET")] == ["/users"]


def test_format_routes() -> None:
    async def auth(scope, proto) -> bool:
        return True

    async def audit(scope, proto) -> bool:
        return True

    table = RouteTable()
    table.register("GET", "/", handler)
    route = table.register("DELETE", "/users/:id", other_handler)
    assert route is not None
    route.middleware(auth, audit)

    expected = "\n".join(
        [
            "GET      /            handler",
            "DELETE   /users/:id   other_handler   "
            "[test_format_routes.<locals>.auth > test_format_routes.<locals>.audit]",
        ]
    )
    assert format_routes(table) == expected


def test_format_routes_empty() -> None:
    assert format_routes(RouteTable()) == ""
