"""Host runtime delivering performance entries to registered observers.

Mirrors the browser ``PerformanceObserver`` contract: an observer is created
with a callback, subscribes to a set of entry types and receives, per
dispatch, the matching entries in delivery order. Heap and network
snapshots are optional capabilities that stay ``None`` until a page reports
them.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from perf_monitor.core.exceptions import UnsupportedEntryTypeError
from perf_monitor.core.logger import COMPONENT, get_logger
from perf_monitor.domain.entries import PerformanceEntry
from perf_monitor.domain.models import MemoryUsage, NetworkInfo

logger = get_logger("perf_monitor.runtime")

ObserverCallback = Callable[[list[PerformanceEntry]], None]


class PerformanceObserver:
    def __init__(self, runtime: "PerformanceRuntime", callback: ObserverCallback):
        self._runtime = runtime
        self._callback = callback
        self.entry_types: frozenset[str] = frozenset()

    @property
    def connected(self) -> bool:
        return self._runtime.is_registered(self)

    def observe(self, entry_types: Iterable[str]) -> None:
        """Subscribe to the requested types the runtime can deliver.

        Unsupported types are skipped, as browsers do.

        Raises:
            UnsupportedEntryTypeError: if the runtime cannot deliver any of them
        """
        requested = list(entry_types)
        supported = [t for t in requested if t in self._runtime.supported_entry_types]
        if not supported:
            raise UnsupportedEntryTypeError(requested)
        self.entry_types = frozenset(supported)
        self._runtime.register(self)

    def disconnect(self) -> None:
        self._runtime.unregister(self)

    def deliver(self, entries: list[PerformanceEntry]) -> None:
        self._callback(entries)


class PerformanceRuntime:
    def __init__(self, supported_entry_types: Iterable[str]):
        self.supported_entry_types = frozenset(supported_entry_types)
        self.memory: MemoryUsage | None = None
        self.connection: NetworkInfo | None = None
        self._observers: list[PerformanceObserver] = []

    def create_observer(self, callback: ObserverCallback) -> PerformanceObserver:
        return PerformanceObserver(self, callback)

    def register(self, observer: PerformanceObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unregister(self, observer: PerformanceObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def is_registered(self, observer: PerformanceObserver) -> bool:
        return observer in self._observers

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def update_capabilities(
        self,
        memory: MemoryUsage | None = None,
        connection: NetworkInfo | None = None,
    ) -> None:
        """Replace the heap/network snapshots reported by the current page."""
        self.memory = memory
        self.connection = connection

    def dispatch(self, entries: Sequence[PerformanceEntry]) -> int:
        """Deliver ``entries`` to every matching observer.

        Observers are served in registration order; each receives its
        matching entries in the order given. A failing callback is logged
        and does not prevent delivery to the remaining observers.

        Returns:
            Number of observer callbacks invoked.
        """
        delivered = 0
        for observer in list(self._observers):
            batch = [e for e in entries if e.entry_type in observer.entry_types]
            if not batch:
                continue
            try:
                observer.deliver(batch)
            except Exception as e:  # noqa: BLE001
                logger.exception(
                    "Observer callback failed",
                    extra={
                        "component": COMPONENT,
                        "entry_types": sorted(observer.entry_types),
                        "error": str(e),
                    },
                )
            delivered += 1
        return delivered
