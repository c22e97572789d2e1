from fastapi import APIRouter

from dashboard_api.api.v1 import audit_logs, clusters, containers, stats

api_router = APIRouter()
api_router.include_router(containers.router)
api_router.include_router(clusters.router)
api_router.include_router(stats.router)
api_router.include_router(audit_logs.router)
