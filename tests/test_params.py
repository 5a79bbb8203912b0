from collections.abc import Mapping

from rou.params import QueryParams, RouteParams


# --- RouteParams --------------------------------------------------------------
def test_route_params_set() -> None:
    params = RouteParams()
    params.set("user", "Melony")
    assert params["user"] == "Melony"


def test_route_params_get() -> None:
    params = RouteParams()
    params.set("user", "Melony")
    assert params.get("user") == "Melony"
    assert params.get("missing") is None
    assert params.get("missing", "") == ""


def test_route_params_has() -> None:
    params = RouteParams()
    params.set("user", "Melony")
    assert params.has("user")
    assert not params.has("bad")
    assert "user" in params


def test_route_params_delete() -> None:
    params = RouteParams()
    params.set("user", "Melony")
    params.set("age", "20")
    params.delete("user")
    assert not params.has("user")
    assert params.has("age")


def test_route_params_delete_missing_is_noop() -> None:
    params = RouteParams({"age": "20"})
    params.delete("user")
    assert params.to_dict() == {"age": "20"}


def test_route_params_set_overwrites() -> None:
    params = RouteParams({"id": "1"})
    params.set("id", "2")
    assert params.to_dict() == {"id": "2"}
    assert len(params) == 1


def test_route_params_equality() -> None:
    assert RouteParams({"id": "10"}) == {"id": "10"}
    assert RouteParams({"id": "10"}) == RouteParams({"id": "10"})
    assert RouteParams({"id": "10"}) != {"id": "11"}


def test_route_params_is_a_mapping() -> None:
    params = RouteParams({"id": "10", "name": "melony"})
    assert isinstance(params, Mapping)
    assert dict(params) == {"id": "10", "name": "melony"}
    assert list(params.items()) == [("id", "10"), ("name", "melony")]
    assert {**params} == params.to_dict()


def test_route_params_to_dict_is_a_copy() -> None:
    params = RouteParams({"id": "10"})
    copied = params.to_dict()
    copied["id"] = "changed"
    assert params["id"] == "10"


# --- QueryParams --------------------------------------------------------------
def test_query_params_first_value() -> None:
    query = QueryParams("name=Joe&age=48&name=Ann")
    assert query["name"] == "Joe"
    assert query.get("age") == "48"
    assert query.get_list("name") == ["Joe", "Ann"]


def test_query_params_missing() -> None:
    query = QueryParams("")
    assert len(query) == 0
    assert query.get("name") is None
    assert query.get("name", "anon") == "anon"
    assert query.get_list("name") == []


def test_query_params_blank_values_kept() -> None:
    query = QueryParams("flag=&x=1")
    assert "flag" in query
    assert query["flag"] == ""


def test_query_params_decoding() -> None:
    query = QueryParams("q=hello%20world&plus=a+b")
    assert query["q"] == "hello world"
    assert query["plus"] == "a b"
