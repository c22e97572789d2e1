from __future__ import annotations

import logging
import time

import psutil
from fastapi import HTTPException, status

from dashboard_api.schemas.stats import HostStats
from dashboard_api.services.metrics import sample_host_cpu_percent

logger = logging.getLogger(__name__)


class HostStatsService:
    async def get_host_stats(self) -> HostStats:
        try:
            mem = psutil.virtual_memory()
            total = int(mem.total)
            free = int(mem.available)
            used = max(total - free, 0)
            used_percent = (used / total * 100.0) if total > 0 else 0.0
            uptime = max(time.time() - psutil.boot_time(), 0.0)
            cpu_percent = await sample_host_cpu_percent()
        except (psutil.Error, OSError) as exc:
            logger.warning("host stats unavailable: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(exc) or "Host stats unavailable",
            ) from exc

        return HostStats(
            cpu_percent=cpu_percent,
            total_mem_bytes=total,
            free_mem_bytes=free,
            used_mem_bytes=used,
            used_mem_percent=round(used_percent, 2),
            uptime_seconds=round(uptime, 1),
        )
