from fastapi import APIRouter

from .endpoints import components, entries, monitoring, report

api_router = APIRouter()
api_router.include_router(entries.router)
api_router.include_router(report.router)
api_router.include_router(components.router)
api_router.include_router(monitoring.router)
