from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ContainerAction(str, Enum):
    start = "start"
    stop = "stop"
    restart = "restart"


class ContainerSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    image: str
    state: str
    status: str
    labels: dict[str, str] = Field(default_factory=dict)
    cluster: str | None = None


class ContainerStatsSnapshot(BaseModel):
    cpu_percent: float = 0.0
    mem_usage_bytes: int = 0
    mem_limit_bytes: int = 0
    mem_percent: float = 0.0
    pids: int | None = None


class ContainerActionResponse(BaseModel):
    id: str
    action: str
    status: str = "ok"


class BulkActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ids: list[str] | None = None
    names: list[str] | None = None
    include_all: bool = Field(default=False, alias="includeAll")


class BulkActionFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    error: str


class BulkActionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    total: int
    succeeded: list[str] = Field(default_factory=list)
    failed: list[BulkActionFailure] = Field(default_factory=list)
    degraded: bool = False


class CreateContainerRequest(BaseModel):
    image: str = Field(min_length=1)
    name: str | None = None
    command: str | list[str] | None = None
    environment: dict[str, str] | None = None
    ports: dict[str, str | int] | None = None
    labels: dict[str, str] | None = None
    restart_policy: dict[str, str] | None = None
