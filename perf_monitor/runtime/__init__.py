from .observer import PerformanceObserver, PerformanceRuntime

__all__ = ["PerformanceObserver", "PerformanceRuntime"]
