from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dashboard_api.core.audit import write_batch_audit_log
from dashboard_api.core.deps import get_action_service
from dashboard_api.db.session import get_db
from dashboard_api.schemas.container import BulkActionResult, ContainerAction
from dashboard_api.services.action_service import ContainerActionService

router = APIRouter(prefix="/clusters", tags=["clusters"])


@router.post("/{cluster}/{action}", response_model=BulkActionResult)
async def cluster_action(
    cluster: str,
    action: ContainerAction,
    service: ContainerActionService = Depends(get_action_service),
    db: Session = Depends(get_db),
) -> BulkActionResult:
    result = await service.perform_cluster_action(cluster, action)
    write_batch_audit_log(db, result, action=f"cluster.{action.value}", resource_type="cluster", resource_id=cluster)
    return result
