from typing import Literal

from shared.config import BaseServiceConfig
from shared.constants import EntryTypes


class Settings(BaseServiceConfig):
    otel_service_name: str = "perf_monitor"

    # Buffers
    live_buffer_capacity: int = 100
    history_capacity: int = 1000  # trimmed to half when exceeded
    flush_every: int = 10

    # Correlation of async web-vital entries to their navigation sample
    correlation_capacity: int = 100

    # Signal semantics
    cls_scope: Literal["navigation", "session"] = "navigation"
    render_time_averaging: Literal["pairwise", "mean"] = "pairwise"

    # Diagnostics
    slow_resource_threshold_ms: float = 1000.0

    # Recommendation thresholds (all strict >)
    page_load_threshold_ms: float = 3000.0
    lcp_threshold_ms: float = 2500.0
    cls_threshold: float = 0.1
    fid_threshold_ms: float = 100.0
    memory_usage_ratio_threshold: float = 0.8

    # Execution timings
    execution_window: int = 100

    # Entry types the ingestion runtime can deliver
    supported_entry_types: list[str] = EntryTypes.all_types()

    # Start monitoring when the app boots
    monitor_on_startup: bool = True


settings = Settings()
