from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import psutil

from dashboard_api.schemas.container import ContainerStatsSnapshot

HOST_CPU_SAMPLE_SECONDS = 0.5


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


@dataclass(frozen=True)
class RawStats:
    """Counters pulled out of one Docker stats payload.

    Every field is optional: the daemon omits ``precpu_stats.system_cpu_usage``
    on the first sample, ``online_cpus`` on old engines and ``pids_stats`` on
    some cgroup setups. A missing counter never becomes an error, it only makes
    the derived value degrade to 0.
    """

    cpu_total: int | None = None
    precpu_total: int | None = None
    system_cpu: int | None = None
    presystem_cpu: int | None = None
    online_cpus: int | None = None
    percpu_count: int | None = None
    mem_usage: int | None = None
    mem_limit: int | None = None
    pids: int | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any] | None) -> RawStats:
        data = data or {}
        cpu_stats = data.get("cpu_stats") or {}
        precpu_stats = data.get("precpu_stats") or {}
        cpu_usage = cpu_stats.get("cpu_usage") or {}
        precpu_usage = precpu_stats.get("cpu_usage") or {}
        mem_stats = data.get("memory_stats") or {}
        pids_stats = data.get("pids_stats") or {}

        percpu = cpu_usage.get("percpu_usage")
        return cls(
            cpu_total=_as_int(cpu_usage.get("total_usage")),
            precpu_total=_as_int(precpu_usage.get("total_usage")),
            system_cpu=_as_int(cpu_stats.get("system_cpu_usage")),
            presystem_cpu=_as_int(precpu_stats.get("system_cpu_usage")),
            online_cpus=_as_int(cpu_stats.get("online_cpus")),
            percpu_count=len(percpu) if isinstance(percpu, list) else None,
            mem_usage=_as_int(mem_stats.get("usage")),
            mem_limit=_as_int(mem_stats.get("limit")),
            pids=_as_int(pids_stats.get("current")),
        )

    @property
    def cpu_delta(self) -> int | None:
        if self.cpu_total is None or self.precpu_total is None:
            return None
        return self.cpu_total - self.precpu_total

    @property
    def system_delta(self) -> int | None:
        if self.system_cpu is None or self.presystem_cpu is None:
            return None
        return self.system_cpu - self.presystem_cpu

    @property
    def cpu_count(self) -> int:
        """Reported online CPUs, else the per-CPU array length, else 1."""
        if self.online_cpus:
            return self.online_cpus
        if self.percpu_count:
            return self.percpu_count
        return 1


def compute_cpu_percent(raw: RawStats) -> float:
    cpu_delta = raw.cpu_delta
    system_delta = raw.system_delta
    if cpu_delta is None or system_delta is None:
        return 0.0
    if cpu_delta <= 0 or system_delta <= 0:
        return 0.0
    return round((cpu_delta / system_delta) * raw.cpu_count * 100.0, 2)


def compute_memory_percent(usage: int | None, limit: int | None) -> float:
    if not usage or not limit or usage <= 0 or limit <= 0:
        return 0.0
    return round(usage / limit * 100.0, 2)


def compute_container_stats(raw: RawStats) -> ContainerStatsSnapshot:
    return ContainerStatsSnapshot(
        cpu_percent=compute_cpu_percent(raw),
        mem_usage_bytes=raw.mem_usage or 0,
        mem_limit_bytes=raw.mem_limit or 0,
        mem_percent=compute_memory_percent(raw.mem_usage, raw.mem_limit),
        pids=raw.pids,
    )


@dataclass(frozen=True)
class CpuTimesSample:
    idle: float
    total: float


def sum_cpu_times(per_core: Sequence[Any]) -> CpuTimesSample:
    idle = 0.0
    total = 0.0
    for times in per_core:
        core_idle = getattr(times, "idle", 0.0)
        idle += core_idle
        total += (
            getattr(times, "user", 0.0)
            + getattr(times, "nice", 0.0)
            + getattr(times, "system", 0.0)
            + core_idle
            + getattr(times, "irq", 0.0)
        )
    return CpuTimesSample(idle=idle, total=total)


def host_cpu_percent_between(first: CpuTimesSample, second: CpuTimesSample) -> float:
    idle_delta = second.idle - first.idle
    total_delta = second.total - first.total
    if total_delta <= 0:
        return 0.0
    return round(100.0 - (idle_delta / total_delta) * 100.0, 1)


def _read_per_core_times() -> Sequence[Any]:
    return psutil.cpu_times(percpu=True)


async def sample_host_cpu_percent(
    interval: float = HOST_CPU_SAMPLE_SECONDS,
    reader: Callable[[], Sequence[Any]] = _read_per_core_times,
) -> float:
    # Suspends the caller for the whole sampling window.
    first = sum_cpu_times(reader())
    await asyncio.sleep(interval)
    second = sum_cpu_times(reader())
    return host_cpu_percent_between(first, second)
