import logging
from typing import Any

from sqlalchemy.orm import Session

from dashboard_api.models.audit_log import AuditLog
from dashboard_api.schemas.container import BulkActionResult

logger = logging.getLogger(__name__)


def batch_status(succeeded: int, failed: int) -> str:
    if failed == 0:
        return "success"
    if succeeded == 0:
        return "failed"
    return "partial"


def write_audit_log(
    db: Session,
    *,
    action: str,
    resource_type: str,
    resource_id: str | None = None,
    status: str = "success",
    target_count: int = 1,
    failed_count: int = 0,
    detail: dict[str, Any] | None = None,
) -> AuditLog:
    record = AuditLog(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        status=status,
        target_count=target_count,
        failed_count=failed_count,
        detail=detail,
    )
    db.add(record)
    db.commit()
    logger.debug("audit %s %s/%s -> %s", action, resource_type, resource_id or "*", status)
    return record


def write_batch_audit_log(
    db: Session,
    result: BulkActionResult,
    *,
    action: str,
    resource_type: str,
    resource_id: str | None = None,
) -> AuditLog:
    """Record a bulk or cluster run; per-target failures go into ``detail``."""
    return write_audit_log(
        db,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        status=batch_status(len(result.succeeded), len(result.failed)),
        target_count=result.total,
        failed_count=len(result.failed),
        detail={
            "failed": [item.model_dump() for item in result.failed],
            "degraded": result.degraded,
        },
    )
