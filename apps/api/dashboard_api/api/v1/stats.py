from fastapi import APIRouter, Depends

from dashboard_api.core.deps import get_host_stats_service
from dashboard_api.schemas.stats import HostStats
from dashboard_api.services.host_stats_service import HostStatsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/host", response_model=HostStats)
async def host_stats(service: HostStatsService = Depends(get_host_stats_service)) -> HostStats:
    return await service.get_host_stats()
