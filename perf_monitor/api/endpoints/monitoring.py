from fastapi import APIRouter, Depends
from perf_monitor.api.dependencies import get_collector
from perf_monitor.services.collector import MetricsCollector

router = APIRouter(prefix="/monitoring")


@router.post("/start")
async def start_monitoring(collector: MetricsCollector = Depends(get_collector)):
    collector.start_monitoring()
    return {"monitoring": collector.is_monitoring}


@router.post("/stop")
async def stop_monitoring(collector: MetricsCollector = Depends(get_collector)):
    collector.stop_monitoring()
    return {"monitoring": collector.is_monitoring}
