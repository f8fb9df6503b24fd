from fastapi import Request
from perf_monitor.runtime.observer import PerformanceRuntime
from perf_monitor.services.collector import MetricsCollector


def get_runtime(request: Request) -> PerformanceRuntime:
    return request.app.state.runtime  # type: ignore[return-value]


def get_collector(request: Request) -> MetricsCollector:
    return request.app.state.collector  # type: ignore[return-value]
