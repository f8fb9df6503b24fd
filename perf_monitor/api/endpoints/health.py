import time

from fastapi import APIRouter, Request, Response

router = APIRouter()
_start_time = time.time()


@router.get("/healthz")
async def healthz():
    return {"status": "ok", "uptime_s": time.time() - _start_time}


@router.get("/readyz")
async def readyz(request: Request):
    collector = getattr(request.app.state, "collector", None)
    if collector is None:
        return Response(status_code=503, content="not ready")
    return {"status": "ready", "monitoring": collector.is_monitoring}
