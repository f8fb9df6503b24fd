import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Optional, TypeVar

T = TypeVar("T")


class ExecutionTimer:
    """Named execution timings over a sliding window of recent measurements."""

    def __init__(self, window: int = 100):
        self.window = window
        self._timings: Dict[str, Deque[float]] = {}

    def record(self, name: str, duration_ms: float) -> None:
        if name not in self._timings:
            self._timings[name] = deque(maxlen=self.window)
        self._timings[name].append(duration_ms)

    def measure(self, name: str, fn: Callable[[], T]) -> T:
        start = time.perf_counter()
        result = fn()
        self.record(name, (time.perf_counter() - start) * 1000)
        return result

    async def measure_async(self, name: str, fn: Callable[[], Awaitable[T]]) -> T:
        start = time.perf_counter()
        result = await fn()
        self.record(name, (time.perf_counter() - start) * 1000)
        return result

    def get_stats(self, name: str) -> Optional[Dict[str, Any]]:
        timings = self._timings.get(name)
        if not timings:
            return None
        ordered = sorted(timings)
        count = len(ordered)
        return {
            "count": count,
            "min": ordered[0],
            "max": ordered[-1],
            "average": sum(ordered) / count,
            "median": ordered[count // 2],
            "p95": ordered[int(count * 0.95)],
        }

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        return {name: self.get_stats(name) for name in self._timings}  # type: ignore[misc]
