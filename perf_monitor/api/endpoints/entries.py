import time

from fastapi import APIRouter, Depends, status
from perf_monitor.api.dependencies import get_runtime
from perf_monitor.core.logger import COMPONENT, get_logger
from perf_monitor.domain.entries import Beacon
from perf_monitor.runtime.observer import PerformanceRuntime
from shared.metrics import get_counter, get_histogram

ENTRIES_RECEIVED = get_counter(
    "entries_received_total",
    "Performance entries received",
    service="perf_monitor",
    labelnames=("entry_type",),
)
BEACON_LATENCY = get_histogram(
    "beacon_latency_seconds", "Beacon dispatch latency", service="perf_monitor"
)

router = APIRouter()


@router.post(
    "/entries",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Ingest performance entries",
    response_description="Entries delivered to observers",
)
async def ingest_entries(
    beacon: Beacon, runtime: PerformanceRuntime = Depends(get_runtime)
):
    logger = get_logger("perf_monitor.api.entries")
    start_time = time.time()

    logger.debug(
        "Received performance beacon",
        extra={
            "component": COMPONENT,
            "entries": len(beacon.entries),
            "has_memory": beacon.memory is not None,
            "has_connection": beacon.connection is not None,
        },
    )

    try:
        runtime.update_capabilities(memory=beacon.memory, connection=beacon.connection)
        for entry in beacon.entries:
            ENTRIES_RECEIVED.labels(entry_type=entry.entry_type).inc()
        runtime.dispatch(beacon.entries)
        return {"status": "accepted", "entries": len(beacon.entries)}
    finally:
        BEACON_LATENCY.observe(time.time() - start_time)
