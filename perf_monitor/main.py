from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import Response
from perf_monitor import __version__
from perf_monitor.api.endpoints import health
from perf_monitor.api.router import api_router
from perf_monitor.core.logger import COMPONENT, get_logger
from perf_monitor.startup import initialize_application
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator

logger = get_logger("perf_monitor.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.runtime, app.state.collector = initialize_application()
    try:
        yield
    finally:
        logger.info("perf_monitor_stopping", extra={"component": COMPONENT})
        app.state.collector.stop_monitoring()


app = FastAPI(
    title="Dayboard Performance Monitor", version=__version__, lifespan=lifespan
)


@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/docs", "/openapi.json", "/metrics"],
    inprogress_name="perf_monitor_inprogress",
    inprogress_labels=True,
)

instrumentator.instrument(app)

app.include_router(health.router)
app.include_router(api_router, prefix="/v1")
