from __future__ import annotations

import json
import os
import time
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import StatusCode

P = ParamSpec("P")
R = TypeVar("R")

_TRACER_NAME = "warranty-bridge.observability"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return an OTel tracer scoped to the given name (or the default)."""
    return trace.get_tracer(name or _TRACER_NAME)


# ---------------------------------------------------------------------------
# MCP handler decorators
# ---------------------------------------------------------------------------


def traced_tool(
    *,
    name: str | None = None,
    capture_io: bool | None = None,
) -> Callable[
    [Callable[P, Coroutine[Any, Any, R]]],
    Callable[P, Coroutine[Any, Any, R]],
]:
    """Wrap an MCP tool handler in a ``tools/call {name}`` span.

    Usage::

        @mcp.tool()
        @traced_tool()
        async def get_asset_info(service_tag: str, ctx: Context) -> str:
            ...

    Args:
        name: Override the tool name (defaults to the function name).
        capture_io: Record input/output values on the span.  When ``None``,
            defers to the ``WARRANTY_OTEL_CAPTURE_IO`` environment variable.
    """

    def decorator(
        fn: Callable[P, Coroutine[Any, Any, R]],
    ) -> Callable[P, Coroutine[Any, Any, R]]:
        tool_name = name or fn.__name__
        tracer = get_tracer()

        @wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            should_capture = _should_capture_io(capture_io)

            with tracer.start_as_current_span(f"tools/call {tool_name}") as span:
                span.set_attribute("mcp.method.name", "tools/call")
                span.set_attribute("rpc.system", "mcp")
                span.set_attribute("gen_ai.tool.name", tool_name)

                if should_capture:
                    _set_input_attrs(span, kwargs)

                result = await _run_recording_errors(span, fn, args, kwargs)

                if should_capture and result is not None:
                    span.set_attribute("output.value", _safe_serialize(result))
                return result

        return wrapper

    return decorator


def traced_resource(
    *,
    uri: str | None = None,
) -> Callable[
    [Callable[P, Coroutine[Any, Any, R]]],
    Callable[P, Coroutine[Any, Any, R]],
]:
    """Wrap an MCP resource handler in a ``resources/read {uri}`` span."""

    def decorator(
        fn: Callable[P, Coroutine[Any, Any, R]],
    ) -> Callable[P, Coroutine[Any, Any, R]]:
        resource_uri = uri or fn.__name__
        tracer = get_tracer()

        @wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with tracer.start_as_current_span(f"resources/read {resource_uri}") as span:
                span.set_attribute("mcp.method.name", "resources/read")
                span.set_attribute("rpc.system", "mcp")
                span.set_attribute("mcp.resource.uri", resource_uri)
                return await _run_recording_errors(span, fn, args, kwargs)

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# Vendor client spans (async context managers)
# ---------------------------------------------------------------------------


class _SpanScope:
    """Shared enter/exit plumbing: start a span, make it current, end it on exit."""

    span_name = "vendor"

    def __init__(self) -> None:
        self._tracer = get_tracer()
        self._span: trace.Span | None = None
        self._scope: Any = None
        self._start: float = 0.0

    def _annotate(self, span: trace.Span) -> None:
        pass

    async def __aenter__(self) -> trace.Span:
        self._start = time.monotonic()
        self._span = self._tracer.start_span(self.span_name)
        self._scope = trace.use_span(self._span, end_on_exit=False)
        self._scope.__enter__()
        self._annotate(self._span)
        return self._span

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        assert self._span is not None

        elapsed = time.monotonic() - self._start
        self._span.set_attribute("duration_ms", round(elapsed * 1000, 2))

        if exc_val is not None:
            self._span.set_status(StatusCode.ERROR, str(exc_val))
            self._span.record_exception(exc_val)

        self._span.end()
        self._scope.__exit__(exc_type, exc_val, exc_tb)


class traced_vendor_call(_SpanScope):
    """Span around one HTTP request to the vendor.

    Usage::

        async with traced_vendor_call("GET", url) as span:
            response = await http.get(url)
            span.set_attribute("http.response.status_code", response.status_code)
    """

    def __init__(self, method: str, url: str, *, attempt: int = 1) -> None:
        super().__init__()
        self.span_name = f"vendor.http {method}"
        self._method = method
        self._url = url
        self._attempt = attempt

    def _annotate(self, span: trace.Span) -> None:
        span.set_attribute("http.request.method", self._method)
        span.set_attribute("url.full", self._url)
        span.set_attribute("vendor.attempt", self._attempt)


class traced_token_exchange(_SpanScope):
    """Span around an OAuth2 client-credentials exchange.

    Usage::

        async with traced_token_exchange(token_url=url, client_id=cid) as span:
            token = await exchange()
            span.set_attribute("auth.outcome", "success")
    """

    span_name = "vendor.auth.token_exchange"

    def __init__(self, *, token_url: str, client_id: str | None = None) -> None:
        super().__init__()
        self._token_url = token_url
        self._client_id = client_id

    def _annotate(self, span: trace.Span) -> None:
        span.set_attribute("url.full", self._token_url)
        span.set_attribute("oauth.grant_type", "client_credentials")
        if self._client_id is not None:
            span.set_attribute("oauth.client_id", self._client_id)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _run_recording_errors(
    span: trace.Span,
    fn: Callable[..., Coroutine[Any, Any, R]],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> R:
    try:
        return await fn(*args, **kwargs)
    except Exception as exc:
        span.set_status(StatusCode.ERROR, str(exc))
        span.record_exception(exc)
        raise


def _should_capture_io(explicit: bool | None) -> bool:
    if explicit is not None:
        return explicit
    return os.getenv("WARRANTY_OTEL_CAPTURE_IO", "false").lower() in (
        "true",
        "1",
        "yes",
    )


def _safe_serialize(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return str(value)


def _set_input_attrs(span: trace.Span, kwargs: dict[str, Any]) -> None:
    serializable_kwargs = {
        k: v for k, v in kwargs.items() if not k.startswith("ctx") and k != "context"
    }
    if serializable_kwargs:
        span.set_attribute("tool.parameters", json.dumps(serializable_kwargs, default=str))
