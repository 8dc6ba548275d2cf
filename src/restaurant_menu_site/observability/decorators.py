"""OpenTelemetry tracing decorators."""

import asyncio
import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

from restaurant_menu_site.observability.metrics import record_data_service_call

F = TypeVar("F", bound=Callable[..., Any])


def _mark_failure(span: Span, error: Exception) -> None:
    span.set_attribute("success", False)
    span.set_attribute("error.type", type(error).__name__)
    span.set_attribute("error.message", str(error))
    span.record_exception(error)


def traced(
    span_name: str | None = None,
    service_name: str = "menu-site",
    timed: bool = False,
) -> Callable[[F], F]:
    """Decorator to add OpenTelemetry tracing to a function.

    Creates a span around the decorated function, marks it failed when the
    function raises, and re-raises. Async functions are supported.

    Args:
        span_name: Name for the span (defaults to function name)
        service_name: Service name for span attributes
        timed: Also record the call duration in the data service histogram

    Returns:
        Decorated function with tracing

    Example:
        @traced("data_service.list_available_items", timed=True)
        async def list_available_items(self) -> list[MenuRow] | None:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        def start(span: Span) -> float:
            span.set_attribute("service.name", service_name)
            if span_name:
                span.set_attribute("function.name", func.__name__)
            return time.perf_counter()

        def finish(started: float) -> None:
            if timed:
                record_data_service_call(func.__name__, time.perf_counter() - started)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                started = start(span)
                try:
                    result = await func(*args, **kwargs)
                    span.set_attribute("success", True)
                    return result
                except Exception as e:
                    _mark_failure(span, e)
                    raise
                finally:
                    finish(started)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                started = start(span)
                try:
                    result = func(*args, **kwargs)
                    span.set_attribute("success", True)
                    return result
                except Exception as e:
                    _mark_failure(span, e)
                    raise
                finally:
                    finish(started)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
