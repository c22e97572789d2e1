from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from dashboard_api.db.session import get_db
from dashboard_api.models.audit_log import AuditLog
from dashboard_api.schemas.audit import AuditLogResponse, AuditStatus

router = APIRouter(prefix="/audit-logs", tags=["audit-logs"])


@router.get("", response_model=list[AuditLogResponse])
def list_audit_logs(
    action: str | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    status: AuditStatus | None = None,
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[AuditLogResponse]:
    stmt = select(AuditLog)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if resource_type:
        stmt = stmt.where(AuditLog.resource_type == resource_type)
    if resource_id:
        stmt = stmt.where(AuditLog.resource_id == resource_id)
    if status:
        stmt = stmt.where(AuditLog.status == status)
    stmt = stmt.order_by(desc(AuditLog.created_at), desc(AuditLog.id)).limit(limit)

    return [AuditLogResponse.model_validate(rec) for rec in db.scalars(stmt)]
