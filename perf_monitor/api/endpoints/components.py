from fastapi import APIRouter, Depends, HTTPException, status
from perf_monitor.api.dependencies import get_collector
from perf_monitor.domain.models import ComponentRenderMetric, ComponentTiming
from perf_monitor.services.collector import MetricsCollector

router = APIRouter(prefix="/components")


@router.post(
    "/{component_name}",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ComponentRenderMetric,
)
async def record_component(
    component_name: str,
    timing: ComponentTiming,
    collector: MetricsCollector = Depends(get_collector),
):
    collector.record_component_metric(component_name, timing.render_time_ms)
    return collector.get_component_metric(component_name)


@router.get("/{component_name}", response_model=ComponentRenderMetric)
async def component_metric(
    component_name: str, collector: MetricsCollector = Depends(get_collector)
):
    metric = collector.get_component_metric(component_name)
    if metric is None:
        raise HTTPException(status_code=404, detail="Unknown component")
    return metric
