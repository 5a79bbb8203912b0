from importlib.metadata import version

from .context import Context
from .match import match_path
from .middleware import Middleware, require_headers
from .params import QueryParams, RouteParams
from .router import Router, http_route
from .table import Handler, Route, RouteTable, format_routes

__all__ = [
    "Context",
    "Handler",
    "Middleware",
    "QueryParams",
    "Route",
    "RouteParams",
    "RouteTable",
    "Router",
    "__version__",
    "format_routes",
    "http_route",
    "match_path",
    "require_headers",
]

__version__ = version("rou")
