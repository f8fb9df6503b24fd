from fastapi import APIRouter, Depends
from perf_monitor.api.dependencies import get_collector
from perf_monitor.domain.models import MetricsExport, PerformanceReport
from perf_monitor.services.collector import MetricsCollector

router = APIRouter()


@router.get("/report", response_model=PerformanceReport)
async def performance_report(
    collector: MetricsCollector = Depends(get_collector),
):
    return collector.get_performance_report()


@router.get("/export", response_model=MetricsExport)
async def export_metrics(collector: MetricsCollector = Depends(get_collector)):
    return collector.export_metrics()


@router.get("/executions")
async def execution_stats(collector: MetricsCollector = Depends(get_collector)):
    return {"executions": collector.get_execution_stats()}
