"""Render-time instrumentation for callable components.

``measure_render`` wraps a component (any callable producing its rendered
output, sync or async) and reports how long each successful render took to
the collector it was given. Inputs and outputs pass through untouched.
"""

from __future__ import annotations

import functools
import inspect
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, Optional, TypeVar

if TYPE_CHECKING:
    from perf_monitor.services.collector import MetricsCollector

F = TypeVar("F", bound=Callable)


@contextmanager
def render_timer(collector: "MetricsCollector", component_name: str) -> Iterator[None]:
    start = time.perf_counter()
    yield
    collector.record_component_metric(
        component_name, (time.perf_counter() - start) * 1000
    )


def measure_render(
    collector: "MetricsCollector", component_name: Optional[str] = None
) -> Callable[[F], F]:
    def decorator(component: F) -> F:
        name = (
            component_name
            or getattr(component, "display_name", None)
            or getattr(component, "__qualname__", type(component).__qualname__)
        )

        if inspect.iscoroutinefunction(component):

            @functools.wraps(component)
            async def async_wrapper(*args, **kwargs):
                with render_timer(collector, name):
                    return await component(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(component)
        def wrapper(*args, **kwargs):
            with render_timer(collector, name):
                return component(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
