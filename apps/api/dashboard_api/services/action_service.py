from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from docker.errors import DockerException, NotFound
from fastapi import HTTPException, status
from requests.exceptions import RequestException

from dashboard_api.schemas.container import (
    BulkActionFailure,
    BulkActionRequest,
    BulkActionResult,
    ContainerAction,
    ContainerActionResponse,
    ContainerStatsSnapshot,
    ContainerSummary,
)
from dashboard_api.services.docker_service import DockerService, describe_error
from dashboard_api.services.executor import run_bounded
from dashboard_api.services.metrics import compute_container_stats
from dashboard_api.services.policy import ProtectionPolicy

logger = logging.getLogger(__name__)

# Upper bound on parallel runtime calls for one batch.
BULK_CONCURRENCY = 5
DEFAULT_CALL_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class InventoryListing:
    containers: list[ContainerSummary] = field(default_factory=list)
    degraded: bool = False
    error: str | None = None


@dataclass(frozen=True)
class ActionOutcome:
    target: ContainerSummary
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_bulk_result(
    targets: Sequence[ContainerSummary],
    outcomes: Sequence[ActionOutcome],
    *,
    degraded: bool = False,
) -> BulkActionResult:
    return BulkActionResult(
        total=len(targets),
        succeeded=[outcome.target.id for outcome in outcomes if outcome.ok],
        failed=[
            BulkActionFailure(id=outcome.target.id, name=outcome.target.name, error=outcome.error or "")
            for outcome in outcomes
            if not outcome.ok
        ],
        degraded=degraded,
    )


class ContainerActionService:
    """Single, bulk and cluster container actions plus per-container stats.

    Every runtime call goes through the threadpool with a per-call timeout.
    Batch actions never raise for an individual container; single-container
    calls raise ``HTTPException`` (404 missing, 502 runtime error, 504 timeout).
    """

    def __init__(
        self,
        docker_service: DockerService,
        policy: ProtectionPolicy,
        *,
        call_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS,
        concurrency: int = BULK_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.docker = docker_service
        self.policy = policy
        self.call_timeout = call_timeout
        self.concurrency = concurrency
        # Held until the runtime thread returns, timed out or not.
        self._slots = asyncio.Semaphore(concurrency)

    async def list_inventory(self) -> InventoryListing:
        try:
            containers = await self._call(self.docker.list_containers)
        except Exception as exc:  # noqa: BLE001
            message = describe_error(exc)
            logger.warning("container listing failed, using empty inventory: %s", message)
            return InventoryListing(degraded=True, error=message)
        return InventoryListing(containers=list(containers))

    async def perform_single_action(
        self,
        container_id: str,
        action: ContainerAction | str,
    ) -> ContainerActionResponse:
        action = ContainerAction(action)
        await self._single_call(self.docker.inspect, container_id)
        await self._single_call(self.docker.container_action, container_id, action)
        logger.info("%s container %s", action.value, container_id)
        return ContainerActionResponse(id=container_id, action=action.value)

    async def perform_bulk_action(
        self,
        action: ContainerAction | str,
        request: BulkActionRequest,
    ) -> BulkActionResult:
        action = ContainerAction(action)
        listing = await self.list_inventory()
        targets = self.policy.select_targets(listing.containers, request)
        return await self._run_batch(action, targets, degraded=listing.degraded, scope="bulk")

    async def perform_cluster_action(self, cluster: str, action: ContainerAction | str) -> BulkActionResult:
        action = ContainerAction(action)
        listing = await self.list_inventory()
        targets = self.policy.select_cluster(listing.containers, cluster)
        return await self._run_batch(action, targets, degraded=listing.degraded, scope=f"cluster={cluster}")

    async def compute_container_stats(self, container_id: str) -> ContainerStatsSnapshot:
        raw = await self._single_call(self.docker.stats_snapshot, container_id)
        return compute_container_stats(raw)

    async def get_logs(self, container_id: str, tail: int) -> str:
        return await self._single_call(self.docker.get_logs_text, container_id, tail=tail)

    async def _run_batch(
        self,
        action: ContainerAction,
        targets: list[ContainerSummary],
        *,
        degraded: bool,
        scope: str,
    ) -> BulkActionResult:
        async def apply(target: ContainerSummary) -> ActionOutcome:
            try:
                await self._call(self.docker.container_action, target.id, action)
            except Exception as exc:  # noqa: BLE001
                message = describe_error(exc)
                logger.warning("%s %s (%s) failed: %s", action.value, target.name, target.id, message)
                return ActionOutcome(target=target, error=message)
            return ActionOutcome(target=target)

        outcomes = await run_bounded(targets, apply, self.concurrency)
        result = build_bulk_result(targets, outcomes, degraded=degraded)
        logger.info(
            "%s %s: total=%d succeeded=%d failed=%d degraded=%s",
            scope,
            action.value,
            result.total,
            len(result.succeeded),
            len(result.failed),
            result.degraded,
        )
        return result

    async def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        await self._slots.acquire()
        call = asyncio.ensure_future(asyncio.to_thread(fn, *args, **kwargs))
        call.add_done_callback(self._release_slot)
        try:
            return await asyncio.wait_for(asyncio.shield(call), timeout=self.call_timeout)
        except asyncio.TimeoutError as exc:
            name = getattr(fn, "__name__", "runtime call")
            raise TimeoutError(f"{name} timed out after {self.call_timeout:g}s") from exc

    async def _single_call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return await self._call(fn, *args, **kwargs)
        except TimeoutError as exc:
            raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc)) from exc
        except NotFound as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=describe_error(exc)) from exc
        except (DockerException, RequestException, OSError) as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=describe_error(exc)) from exc

    def _release_slot(self, call: asyncio.Future) -> None:
        self._slots.release()
        if not call.cancelled() and call.exception() is not None:
            logger.debug("runtime call finished with %r", call.exception())
