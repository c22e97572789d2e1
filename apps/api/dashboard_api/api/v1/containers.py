from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from dashboard_api.core.audit import write_audit_log, write_batch_audit_log
from dashboard_api.core.config import get_settings
from dashboard_api.core.deps import get_action_service, get_docker_service, get_protection_policy
from dashboard_api.db.session import get_db
from dashboard_api.schemas.container import (
    BulkActionRequest,
    BulkActionResult,
    ContainerAction,
    ContainerActionResponse,
    ContainerStatsSnapshot,
    ContainerSummary,
    CreateContainerRequest,
)
from dashboard_api.services.action_service import ContainerActionService
from dashboard_api.services.docker_service import DockerService, container_display_name
from dashboard_api.services.policy import ProtectionPolicy
from dashboard_api.utils.confirm import check_confirmation, confirmation_header

router = APIRouter(prefix="/containers", tags=["containers"])
settings = get_settings()

DEGRADED_HEADER = "X-Inventory-Degraded"


@router.get("", response_model=list[ContainerSummary])
async def list_containers(
    response: Response,
    service: ContainerActionService = Depends(get_action_service),
) -> list[ContainerSummary]:
    listing = await service.list_inventory()
    if listing.degraded:
        response.headers[DEGRADED_HEADER] = "1"
    return listing.containers


@router.post("", response_model=ContainerActionResponse)
async def create_container(
    payload: CreateContainerRequest,
    docker_service: DockerService = Depends(get_docker_service),
    db: Session = Depends(get_db),
) -> ContainerActionResponse:
    container_id = await run_in_threadpool(docker_service.create_container, payload.model_dump())
    write_audit_log(
        db,
        action="container.create",
        resource_type="container",
        resource_id=container_id,
        detail={"image": payload.image, "name": payload.name},
    )
    return ContainerActionResponse(id=container_id, action="create")


@router.post("/bulk/{action}", response_model=BulkActionResult)
async def bulk_action(
    action: ContainerAction,
    payload: BulkActionRequest,
    service: ContainerActionService = Depends(get_action_service),
    db: Session = Depends(get_db),
) -> BulkActionResult:
    result = await service.perform_bulk_action(action, payload)
    write_batch_audit_log(db, result, action=f"container.bulk.{action.value}", resource_type="container")
    return result


@router.get("/{container_id}/stats", response_model=ContainerStatsSnapshot)
async def container_stats(
    container_id: str,
    service: ContainerActionService = Depends(get_action_service),
) -> ContainerStatsSnapshot:
    return await service.compute_container_stats(container_id)


@router.get("/{container_id}/logs", response_class=PlainTextResponse)
async def container_logs(
    container_id: str,
    tail: int | None = Query(default=None, ge=1, le=10000),
    service: ContainerActionService = Depends(get_action_service),
) -> PlainTextResponse:
    logs = await service.get_logs(container_id, tail or settings.logs_default_tail)
    return PlainTextResponse(content=logs)


@router.post("/{container_id}/{action}", response_model=ContainerActionResponse)
async def container_action(
    container_id: str,
    action: ContainerAction,
    service: ContainerActionService = Depends(get_action_service),
    db: Session = Depends(get_db),
) -> ContainerActionResponse:
    result = await service.perform_single_action(container_id, action)
    write_audit_log(
        db,
        action=f"container.{action.value}",
        resource_type="container",
        resource_id=container_id,
    )
    return result


@router.delete("/{container_id}", response_model=ContainerActionResponse)
async def remove_container(
    container_id: str,
    force: bool = False,
    confirm: bool = False,
    x_confirm_action: str | None = Depends(confirmation_header),
    docker_service: DockerService = Depends(get_docker_service),
    policy: ProtectionPolicy = Depends(get_protection_policy),
    db: Session = Depends(get_db),
) -> ContainerActionResponse:
    check_confirmation(confirm, "remove-container", x_confirm_action)

    attrs = await run_in_threadpool(docker_service.inspect, container_id)
    name = container_display_name([attrs.get("Name") or ""], container_id)
    if policy.is_protected(name):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Container is protected: {name}")

    await run_in_threadpool(docker_service.remove_container, container_id, force=force)
    write_audit_log(
        db,
        action="container.remove",
        resource_type="container",
        resource_id=container_id,
        detail={"force": force, "name": name},
    )
    return ContainerActionResponse(id=container_id, action="remove")
