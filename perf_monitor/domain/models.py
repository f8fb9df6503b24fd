from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, PrivateAttr


class MemoryUsage(BaseModel):
    used: int = Field(..., ge=0, description="Used JS heap (bytes)")
    total: int = Field(..., ge=0, description="Total JS heap (bytes)")
    limit: int = Field(..., ge=0, description="JS heap size limit (bytes)")


class NetworkInfo(BaseModel):
    effective_type: str = "unknown"
    downlink: float = 0.0
    rtt: float = 0.0


class PerformanceSample(BaseModel):
    """Timing record of a single navigation.

    Paint, LCP, CLS and FID start at zero and are patched in place by
    observer callbacks that fire after the sample was appended.
    """

    sample_id: int
    navigation_id: Optional[str] = None
    captured_at_ms: int
    page_load_ms: float = 0.0
    dom_content_loaded_ms: float = 0.0
    first_contentful_paint_ms: float = 0.0
    largest_contentful_paint_ms: float = 0.0
    cumulative_layout_shift: float = 0.0
    first_input_delay_ms: float = 0.0
    memory_usage: Optional[MemoryUsage] = None
    network_info: Optional[NetworkInfo] = None

    _first_input_recorded: bool = PrivateAttr(default=False)

    def record_first_input(self, delay_ms: float) -> bool:
        """Set FID once; later inputs of the same navigation are ignored."""
        if self._first_input_recorded:
            return False
        self.first_input_delay_ms = delay_ms
        self._first_input_recorded = True
        return True


# Fields averaged across history
TIMING_FIELDS = (
    "page_load_ms",
    "dom_content_loaded_ms",
    "first_contentful_paint_ms",
    "largest_contentful_paint_ms",
    "cumulative_layout_shift",
    "first_input_delay_ms",
)


class ComponentRenderMetric(BaseModel):
    component_name: str
    render_time_ms: float
    rerender_count: int = 1
    memory_leaks: int = 0
    last_updated_at_ms: int

    _render_time_total: float = PrivateAttr(default=0.0)

    def model_post_init(self, __context: Any) -> None:
        self._render_time_total = self.render_time_ms

    def update(self, render_time_ms: float, now_ms: int, averaging: str) -> None:
        """Fold one more render into the metric.

        ``pairwise`` halves towards each new value (dashboard parity);
        ``mean`` keeps the true arithmetic mean of every render.
        """
        self.rerender_count += 1
        self._render_time_total += render_time_ms
        if averaging == "mean":
            self.render_time_ms = self._render_time_total / self.rerender_count
        else:
            self.render_time_ms = (self.render_time_ms + render_time_ms) / 2
        self.last_updated_at_ms = now_ms


class DatabaseCacheStats(BaseModel):
    hit_rate: str = "90%+"
    size: str = "Dynamic"
    ttl: str = "5 minutes"


class DatabaseStatus(BaseModel):
    """Static status summary of the query cache in front of the database."""

    type: str = "Simple Cache"
    status: str = "active"
    connections: int = 1
    cache_enabled: bool = True
    cache_stats: DatabaseCacheStats = Field(default_factory=DatabaseCacheStats)


class PerformanceReport(BaseModel):
    current: Optional[PerformanceSample] = None
    averages: Dict[str, float] = Field(default_factory=dict)
    database: DatabaseStatus = Field(default_factory=DatabaseStatus)
    api: Dict[str, Any] = Field(default_factory=dict)
    assets: Dict[str, Any] = Field(default_factory=dict)
    components: List[ComponentRenderMetric] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class MetricsExport(BaseModel):
    page_metrics: List[PerformanceSample]
    component_metrics: List[ComponentRenderMetric]
    executions: Dict[str, Any] = Field(default_factory=dict)
    exported_at: str


class ComponentTiming(BaseModel):
    render_time_ms: float = Field(..., ge=0, description="Measured render time (ms)")
