from pydantic import BaseModel


class HostStats(BaseModel):
    cpu_percent: float
    total_mem_bytes: int
    free_mem_bytes: int
    used_mem_bytes: int
    used_mem_percent: float
    uptime_seconds: float
