"""OpenTelemetry tracing and metrics for a router.

Creates HTTP server spans and metrics with semantic conventions for each request.

Install with: uv add "rou[otel]"
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from rou.router import Router
    from rou.rsgi import HTTPProtocol, HTTPScope, RSGIHTTPHandler

try:
    from opentelemetry import metrics, trace
    from opentelemetry.propagate import extract
    from opentelemetry.trace import SpanKind, StatusCode, TracerProvider
except ImportError as e:
    msg = (
        "OpenTelemetry instrumentation requires the 'otel' extra. "
        "Install with: uv add 'rou[otel]'"
    )
    raise ImportError(msg) from e

# seconds, the http.server.request.duration advisory boundaries
_DURATION_BUCKETS = (
    0.001, 0.005, 0.01, 0.025, 0.05, 0.075, 0.1,
    0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0,
)  # fmt: skip


class _StatusRecorder:
    """Passes everything through to proto, noting the status of the response."""

    __slots__ = ("_proto", "status")

    def __init__(self, proto: HTTPProtocol) -> None:
        self._proto = proto
        self.status: int | None = None

    async def __call__(self) -> bytes:
        return await self._proto()

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._proto.__aiter__()

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._proto, name)
        if not name.startswith("response_"):
            return attr

        def respond(status: int, *args: Any) -> Any:
            self.status = status
            return attr(status, *args)

        return respond


def otel(
    *,
    tracer_provider: TracerProvider | None = None,
    meter_provider: metrics.MeterProvider | None = None,
) -> Callable[[Router], RSGIHTTPHandler]:
    """Create OpenTelemetry tracing and metrics instrumentation for a router.

    The returned function takes a Router and gives back an RSGI handler that
    serves it inside one server span per request. The route is resolved with
    ``Router.match`` before dispatch, so the span is named ``METHOD /pattern``
    from the start. Requests no route fits (404/405) are renamed to
    ``METHOD STATUS`` once the response is written.

    Extracts trace context from incoming request headers (e.g. ``traceparent``)
    for distributed tracing. Only depends on ``opentelemetry-api``; users bring
    their own SDK and exporters.

    Metrics emitted:
        - ``http.server.request.duration`` (histogram, seconds)
        - ``http.server.active_requests`` (up-down counter)

    Args:
        tracer_provider: Optional TracerProvider. If None, uses the global provider.
        meter_provider: Optional MeterProvider. If None, uses the global provider.

    Example:
        router = Router()
        router.get("/users/:id", get_user)
        router.finalize()
        app = otel()(router)
    """
    tracer = trace.get_tracer("rou", tracer_provider=tracer_provider)
    meter = metrics.get_meter("rou", meter_provider=meter_provider)
    duration_histogram = meter.create_histogram(
        "http.server.request.duration",
        unit="s",
        description="Duration of HTTP server requests.",
        explicit_bucket_boundaries_advisory=_DURATION_BUCKETS,
    )
    active_requests_counter = meter.create_up_down_counter(
        "http.server.active_requests",
        unit="{request}",
        description="Number of active HTTP server requests.",
    )

    def instrument(router: Router) -> RSGIHTTPHandler:
        async def traced(scope: HTTPScope, proto: HTTPProtocol) -> None:
            method = scope.method
            matched = router.match(method, scope.path)
            route = matched[0].path if matched is not None else None

            attributes: dict[str, str | int] = {
                "http.request.method": method,
                "url.path": scope.path,
                "url.scheme": scope.scheme,
                "network.protocol.version": scope.http_version,
                "server.address": scope.server,
                "client.address": scope.client,
            }
            if scope.query_string:
                attributes["url.query"] = scope.query_string
            if user_agent := scope.headers.get("user-agent"):
                attributes["user_agent.original"] = user_agent
            if route is not None:
                attributes["http.route"] = route

            base_attrs: dict[str, str | int] = {
                "http.request.method": method,
                "url.scheme": scope.scheme,
            }
            duration_attrs = dict(base_attrs)
            if route is not None:
                duration_attrs["http.route"] = route

            recorder = _StatusRecorder(proto)
            active_requests_counter.add(1, base_attrs)
            start = time.perf_counter()
            with tracer.start_as_current_span(
                f"{method} {route}" if route is not None else method,
                context=extract(scope.headers),
                kind=SpanKind.SERVER,
                attributes=attributes,
                record_exception=True,
                set_status_on_exception=True,
            ) as span:
                try:
                    await router.__rsgi__(scope, recorder)  # type: ignore[arg-type]
                finally:
                    active_requests_counter.add(-1, base_attrs)
                    status = recorder.status
                    if status is not None:
                        span.set_attribute("http.response.status_code", status)
                        duration_attrs["http.response.status_code"] = status
                        if route is None:
                            span.update_name(f"{method} {status}")
                        if status >= 500:
                            span.set_status(StatusCode.ERROR)
                    duration_histogram.record(
                        time.perf_counter() - start, duration_attrs
                    )

        return traced

    return instrument
