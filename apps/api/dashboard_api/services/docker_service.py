from __future__ import annotations

import logging
import threading
from typing import Any

import docker
from docker.errors import DockerException, NotFound
from fastapi import HTTPException, status

from dashboard_api.core.config import get_settings
from dashboard_api.schemas.container import ContainerAction, ContainerSummary
from dashboard_api.services.metrics import RawStats

logger = logging.getLogger(__name__)
settings = get_settings()

CLUSTER_LABELS = ("kz.cluster", "com.docker.compose.project")


def container_display_name(names: list[str] | None, container_id: str) -> str:
    if not names:
        return container_id
    name = names[0]
    if name.startswith("/"):
        name = name[1:]
    return name or container_id


def resolve_cluster(name: str, labels: dict[str, str]) -> str | None:
    for key in CLUSTER_LABELS:
        value = (labels.get(key) or "").strip()
        if value:
            return value
    for sep in ("-", "_"):
        head, found, _ = name.partition(sep)
        if found and head:
            return head
    return None


def to_container_summary(raw: dict[str, Any]) -> ContainerSummary:
    container_id = raw.get("Id", "")
    name = container_display_name(raw.get("Names"), container_id)
    labels = raw.get("Labels") or {}
    return ContainerSummary(
        id=container_id,
        name=name,
        image=raw.get("Image", ""),
        state=raw.get("State", "unknown"),
        status=raw.get("Status", ""),
        labels=labels,
        cluster=resolve_cluster(name, labels),
    )


class DockerService:
    def __init__(self) -> None:
        self._client: docker.DockerClient | None = None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> docker.DockerClient:
        # DockerClient contacts the daemon when built, so it is created on first use.
        with self._client_lock:
            if self._client is None:
                self._client = docker.DockerClient(
                    base_url=settings.docker_base_url,
                    timeout=settings.docker_timeout_seconds,
                )
            return self._client

    @client.setter
    def client(self, value) -> None:
        self._client = value

    def ping(self) -> bool:
        try:
            self.client.ping()
            return True
        except DockerException:
            return False

    def list_containers(self) -> list[ContainerSummary]:
        raw_items = self.client.api.containers(all=True)
        logger.debug("listed %d containers", len(raw_items))
        return [to_container_summary(item) for item in raw_items]

    def inspect(self, container_id: str) -> dict[str, Any]:
        return self._get_container(container_id).attrs

    def container_action(self, container_id: str, action: ContainerAction | str) -> None:
        action = ContainerAction(action)
        container = self.client.containers.get(container_id)
        if action is ContainerAction.start:
            container.start()
        elif action is ContainerAction.stop:
            container.stop()
        else:
            container.restart()

    def stats_snapshot(self, container_id: str) -> RawStats:
        container = self._get_container(container_id)
        return RawStats.from_payload(container.stats(stream=False))

    def get_logs_text(self, container_id: str, *, tail: int | str = 200, timestamps: bool = False) -> str:
        container = self._get_container(container_id)
        raw = container.logs(tail=tail, timestamps=timestamps)
        return raw.decode("utf-8", errors="replace")

    def create_container(self, payload: dict[str, Any]) -> str:
        kwargs: dict[str, Any] = {
            "image": payload["image"],
            "name": payload.get("name"),
            "command": payload.get("command"),
            "environment": payload.get("environment"),
            "ports": payload.get("ports"),
            "labels": payload.get("labels"),
            "restart_policy": payload.get("restart_policy"),
            "detach": True,
        }
        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        try:
            container = self.client.containers.run(**kwargs)
        except NotFound as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        except DockerException as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
        return container.id

    def remove_container(self, container_id: str, force: bool = False) -> None:
        container = self._get_container(container_id)
        container.remove(force=force)

    def _get_container(self, container_id: str):
        try:
            return self.client.containers.get(container_id)
        except NotFound as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Container not found: {container_id}",
            ) from exc
        except DockerException as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, HTTPException):
        return str(exc.detail)
    return str(exc) or type(exc).__name__
