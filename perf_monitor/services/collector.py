"""Navigation and render performance collector.

Samples are appended to a bounded live buffer when a navigation entry
arrives and are drained into bounded history every ``flush_every`` samples,
or unconditionally before a report or export is produced. Paint, LCP, FID
and CLS arrive later through their own observers and patch the sample of
the navigation they belong to.
"""

import itertools
import time
from collections import OrderedDict, deque
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, TypeVar

from perf_monitor.core.config import Settings, settings
from perf_monitor.core.exceptions import UnsupportedEntryTypeError
from perf_monitor.core.logger import COMPONENT, get_logger
from perf_monitor.domain.entries import (
    FirstInputEntry,
    LargestContentfulPaintEntry,
    LayoutShiftEntry,
    NavigationEntry,
    PaintEntry,
    PerformanceEntry,
    ResourceEntry,
)
from perf_monitor.domain.models import (
    TIMING_FIELDS,
    ComponentRenderMetric,
    DatabaseStatus,
    MemoryUsage,
    MetricsExport,
    NetworkInfo,
    PerformanceReport,
    PerformanceSample,
)
from perf_monitor.runtime.observer import PerformanceObserver, PerformanceRuntime
from perf_monitor.services.cache_stats import (
    AssetRegistry,
    CacheStatsProvider,
    EmptyApiCache,
)
from perf_monitor.services.execution_stats import ExecutionTimer
from perf_monitor.services.recommendations import generate_recommendations
from shared.constants import EntryTypes
from shared.metrics import get_counter, get_gauge

SAMPLES_RECORDED = get_counter(
    "samples_recorded_total", "Navigation samples recorded", service="perf_monitor"
)
BUFFER_FLUSHES = get_counter(
    "buffer_flushes_total", "Live buffer flushes into history", service="perf_monitor"
)
SLOW_RESOURCES = get_counter(
    "slow_resources_total",
    "Resources slower than the configured threshold",
    service="perf_monitor",
    labelnames=("initiator_type",),
)
PATCHES_DROPPED = get_counter(
    "patches_dropped_total",
    "Web-vital entries with no sample to patch",
    service="perf_monitor",
    labelnames=("entry_type",),
)
LIVE_BUFFER_SIZE = get_gauge(
    "live_buffer_size", "Samples waiting in the live buffer", service="perf_monitor"
)
HISTORY_SIZE = get_gauge(
    "history_size", "Samples retained in history", service="perf_monitor"
)

logger = get_logger("perf_monitor.collector")

T = TypeVar("T")


def _now_ms() -> int:
    return int(time.time() * 1000)


class MetricsCollector:
    """Collects page performance samples and component render timings.

    One instance is built per application and passed to whoever records or
    queries metrics. Without a runtime the collector still tracks component
    metrics and execution timings, it simply never receives entries.
    """

    def __init__(
        self,
        runtime: Optional[PerformanceRuntime] = None,
        config: Settings = settings,
        api_cache: Optional[CacheStatsProvider] = None,
        asset_cache: Optional[CacheStatsProvider] = None,
    ):
        self.config = config
        self.runtime = runtime
        self.api_cache = api_cache if api_cache is not None else EmptyApiCache()
        self.asset_cache = asset_cache if asset_cache is not None else AssetRegistry()
        self.executions = ExecutionTimer(config.execution_window)
        self.database_status = DatabaseStatus()

        self._live: Deque[PerformanceSample] = deque(
            maxlen=config.live_buffer_capacity
        )
        self._history: List[PerformanceSample] = []
        self._components: Dict[str, ComponentRenderMetric] = {}
        self._by_navigation: "OrderedDict[str, PerformanceSample]" = OrderedDict()
        self._sample_ids = itertools.count(1)
        self._session_cls = 0.0
        self._observers: List[PerformanceObserver] = []
        self._monitoring = False

        self._initialize_observers()

    # ------------------------------------------------------------------
    # Observer wiring
    # ------------------------------------------------------------------
    def _initialize_observers(self) -> None:
        if self.runtime is None:
            return

        try:
            umbrella = self.runtime.create_observer(self._process_entries)
            umbrella.observe(EntryTypes.timeline_types())
            self._observers.append(umbrella)
        except UnsupportedEntryTypeError as e:
            logger.warning(
                "Performance Observer initialization failed",
                extra={"component": COMPONENT, "error": str(e)},
            )

        self._observe_web_vital(EntryTypes.LARGEST_CONTENTFUL_PAINT, self._on_lcp)
        self._observe_web_vital(EntryTypes.FIRST_INPUT, self._on_first_input)
        self._observe_web_vital(EntryTypes.LAYOUT_SHIFT, self._on_layout_shift)

    def _observe_web_vital(
        self, entry_type: str, callback: Callable[[List[Any]], None]
    ) -> None:
        observer = self.runtime.create_observer(callback)  # type: ignore[union-attr]
        try:
            observer.observe([entry_type])
        except UnsupportedEntryTypeError:
            logger.debug(
                "Web vital not supported by runtime",
                extra={"component": COMPONENT, "entry_type": entry_type},
            )
            return
        self._observers.append(observer)

    @property
    def active_observers(self) -> int:
        return len(self._observers)

    def _process_entries(self, entries: List[PerformanceEntry]) -> None:
        for entry in entries:
            if isinstance(entry, NavigationEntry):
                self._record_navigation(entry)
            elif isinstance(entry, ResourceEntry):
                self._record_resource(entry)
            elif isinstance(entry, PaintEntry):
                self._record_paint(entry)

    def _record_navigation(self, entry: NavigationEntry) -> None:
        sample = PerformanceSample(
            sample_id=next(self._sample_ids),
            navigation_id=entry.navigation_id,
            captured_at_ms=_now_ms(),
            page_load_ms=entry.load_event_end - entry.fetch_start,
            dom_content_loaded_ms=entry.dom_content_loaded_event_end
            - entry.fetch_start,
            memory_usage=self._memory_usage(),
            network_info=self._network_info(),
        )
        self._add_sample(sample)

    def _record_resource(self, entry: ResourceEntry) -> None:
        record_asset = getattr(self.asset_cache, "record_resource", None)
        if record_asset is not None:
            record_asset(entry)

        duration = entry.response_end - entry.start_time
        if duration > self.config.slow_resource_threshold_ms:
            SLOW_RESOURCES.labels(initiator_type=entry.initiator_type).inc()
            logger.warning(
                "Slow resource detected",
                extra={
                    "component": COMPONENT,
                    "resource": entry.name,
                    "duration": f"{duration:.2f}",
                    "size": entry.transfer_size or 0,
                    "type": entry.initiator_type,
                },
            )

    def _record_paint(self, entry: PaintEntry) -> None:
        if entry.name != EntryTypes.FIRST_CONTENTFUL_PAINT:
            return
        sample = self._target_sample(entry)
        if sample is not None:
            sample.first_contentful_paint_ms = entry.start_time

    def _on_lcp(self, entries: List[LargestContentfulPaintEntry]) -> None:
        if not entries:
            return
        last = entries[-1]
        sample = self._target_sample(last)
        if sample is not None:
            sample.largest_contentful_paint_ms = last.start_time

    def _on_first_input(self, entries: List[FirstInputEntry]) -> None:
        for entry in entries:
            sample = self._target_sample(entry)
            if sample is not None:
                sample.record_first_input(entry.processing_start - entry.start_time)

    def _on_layout_shift(self, entries: List[LayoutShiftEntry]) -> None:
        for entry in entries:
            if entry.had_recent_input:
                continue
            sample = self._target_sample(entry)
            if self.config.cls_scope == "session":
                self._session_cls += entry.value
                if sample is not None:
                    sample.cumulative_layout_shift = self._session_cls
            elif sample is not None:
                sample.cumulative_layout_shift += entry.value

    def _target_sample(self, entry: PerformanceEntry) -> Optional[PerformanceSample]:
        """Sample an asynchronous entry should patch.

        Entries naming their navigation go to that navigation's sample, even
        when newer samples exist or it was already flushed. Entries without
        one fall back to the newest live sample.
        """
        if entry.navigation_id is not None:
            sample = self._by_navigation.get(entry.navigation_id)
        else:
            sample = self._live[-1] if self._live else None
        if sample is None:
            PATCHES_DROPPED.labels(entry_type=entry.entry_type).inc()
        return sample

    def _memory_usage(self) -> Optional[MemoryUsage]:
        memory = getattr(self.runtime, "memory", None)
        if memory is None:
            return None
        return memory.model_copy()

    def _network_info(self) -> Optional[NetworkInfo]:
        connection = getattr(self.runtime, "connection", None)
        if connection is None:
            return None
        return connection.model_copy()

    # ------------------------------------------------------------------
    # Buffering
    # ------------------------------------------------------------------
    def _add_sample(self, sample: PerformanceSample) -> None:
        self._live.append(sample)
        SAMPLES_RECORDED.inc()
        if sample.navigation_id is not None:
            self._by_navigation[sample.navigation_id] = sample
            self._by_navigation.move_to_end(sample.navigation_id)
            while len(self._by_navigation) > self.config.correlation_capacity:
                self._by_navigation.popitem(last=False)

        flush_every = self.config.flush_every
        if flush_every > 0 and len(self._live) % flush_every == 0:
            self._flush()
        else:
            LIVE_BUFFER_SIZE.set(len(self._live))

    def _flush(self) -> None:
        if self._live:
            BUFFER_FLUSHES.inc()
        self._history.extend(self._live)
        self._live.clear()

        capacity = self.config.history_capacity
        if len(self._history) > capacity:
            cut = len(self._history) - capacity // 2
            self._forget(self._history[:cut])
            self._history = self._history[cut:]

        LIVE_BUFFER_SIZE.set(0)
        HISTORY_SIZE.set(len(self._history))

    def _forget(self, samples: List[PerformanceSample]) -> None:
        # A newer navigation may have reused the id; only drop our own entry
        for sample in samples:
            if sample.navigation_id is None:
                continue
            if self._by_navigation.get(sample.navigation_id) is sample:
                del self._by_navigation[sample.navigation_id]

    @property
    def live_samples(self) -> List[PerformanceSample]:
        return list(self._live)

    @property
    def history(self) -> List[PerformanceSample]:
        return list(self._history)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    @property
    def is_monitoring(self) -> bool:
        return self._monitoring

    def start_monitoring(self) -> None:
        if self._monitoring:
            return

        self._monitoring = True
        if not self._observers:
            self._initialize_observers()

        logger.info(
            "Performance monitoring started",
            extra={"component": COMPONENT, "observers": len(self._observers)},
        )

    def stop_monitoring(self) -> None:
        if not self._monitoring:
            return

        self._monitoring = False
        for observer in self._observers:
            observer.disconnect()
        self._observers = []

        logger.info("Performance monitoring stopped", extra={"component": COMPONENT})

    def record_component_metric(self, component_name: str, render_time_ms: float) -> None:
        now = _now_ms()
        existing = self._components.get(component_name)
        if existing is None:
            self._components[component_name] = ComponentRenderMetric(
                component_name=component_name,
                render_time_ms=render_time_ms,
                last_updated_at_ms=now,
            )
            return
        existing.update(render_time_ms, now, self.config.render_time_averaging)

    def get_component_metric(
        self, component_name: str
    ) -> Optional[ComponentRenderMetric]:
        return self._components.get(component_name)

    def get_performance_report(self) -> PerformanceReport:
        self._flush()

        latest = self._history[-1] if self._history else None
        current = latest.model_copy(deep=True) if latest is not None else None
        return PerformanceReport(
            current=current,
            averages=self._average_metrics(),
            database=self.database_status.model_copy(deep=True),
            api=dict(self.api_cache.get_cache_stats()),
            assets=dict(self.asset_cache.get_cache_stats()),
            components=[m.model_copy() for m in self._components.values()],
            recommendations=generate_recommendations(current, self.config),
        )

    def _average_metrics(self) -> Dict[str, float]:
        if not self._history:
            return {}
        count = len(self._history)
        return {
            field: sum(getattr(s, field) for s in self._history) / count
            for field in TIMING_FIELDS
        }

    def export_metrics(self) -> MetricsExport:
        self._flush()
        return MetricsExport(
            page_metrics=[s.model_copy(deep=True) for s in self._history],
            component_metrics=[m.model_copy() for m in self._components.values()],
            executions=self.executions.get_all_stats(),
            exported_at=datetime.now(timezone.utc).isoformat(),
        )

    def measure_execution(self, name: str, fn: Callable[[], T]) -> T:
        return self.executions.measure(name, fn)

    async def measure_async_execution(
        self, name: str, fn: Callable[[], Awaitable[T]]
    ) -> T:
        return await self.executions.measure_async(name, fn)

    def get_execution_stats(self) -> Dict[str, Dict[str, Any]]:
        return self.executions.get_all_stats()
