from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

AuditStatus = Literal["success", "partial", "failed"]


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    resource_type: Literal["container", "cluster"]
    resource_id: str | None
    status: AuditStatus
    target_count: int
    failed_count: int
    detail: dict | None
    created_at: datetime | None
