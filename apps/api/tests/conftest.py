from __future__ import annotations

import os
import shutil
import threading
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

RUNTIME_DIR = Path(__file__).resolve().parent / ".runtime"
if RUNTIME_DIR.exists():
    shutil.rmtree(RUNTIME_DIR)
RUNTIME_DIR.mkdir(parents=True, exist_ok=True)

os.environ.setdefault("DATABASE_URL", f"sqlite:///{(RUNTIME_DIR / 'test.db').resolve()}")
os.environ.setdefault("PROTECTED_CONTAINERS", "kz-dashboard-api, KZ-Dashboard-Web")
os.environ.setdefault("ACTION_TIMEOUT_SECONDS", "5")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from dashboard_api.db.session import SessionLocal  # noqa: E402
import dashboard_api.services.docker_service as docker_service_module  # noqa: E402
from dashboard_api.main import app  # noqa: E402
from dashboard_api.models.audit_log import AuditLog  # noqa: E402
from dashboard_api.schemas.container import ContainerSummary  # noqa: E402
from dashboard_api.services.docker_service import DockerService  # noqa: E402

REAL_DOCKER_SERVICE_INIT = DockerService.__init__


def make_summary(
    container_id: str,
    name: str,
    *,
    state: str = "running",
    cluster: str | None = None,
    labels: dict[str, str] | None = None,
) -> ContainerSummary:
    return ContainerSummary(
        id=container_id,
        name=name,
        image="nginx:latest",
        state=state,
        status="Up 3 minutes" if state == "running" else "Exited (0) 1 minute ago",
        labels=labels or {},
        cluster=cluster,
    )


class FakeDockerService:
    """In-memory stand-in for ``DockerService`` used by engine tests."""

    def __init__(
        self,
        containers: list[ContainerSummary] | None = None,
        *,
        failures: dict[str, Exception] | None = None,
        list_error: Exception | None = None,
    ) -> None:
        self.containers = list(containers or [])
        self.failures = dict(failures or {})
        self.list_error = list_error
        self.calls: list[tuple[str, str]] = []
        self.raw_stats = None

    def list_containers(self) -> list[ContainerSummary]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.containers)

    def inspect(self, container_id: str) -> dict:
        for item in self.containers:
            if item.id == container_id:
                return {"Id": item.id, "Name": f"/{item.name}"}
        raise HTTPException(status_code=404, detail=f"Container not found: {container_id}")

    def container_action(self, container_id: str, action) -> None:
        self.calls.append((container_id, getattr(action, "value", action)))
        error = self.failures.get(container_id)
        if error is not None:
            raise error

    def stats_snapshot(self, container_id: str):
        self.inspect(container_id)
        return self.raw_stats

    def get_logs_text(self, container_id: str, *, tail=200, timestamps: bool = False) -> str:
        self.inspect(container_id)
        return "\n".join(f"line-{i}" for i in range(int(tail)))


@pytest.fixture
def client():
    app.dependency_overrides.clear()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_state(client):
    with SessionLocal() as db:
        db.query(AuditLog).delete()
        db.commit()
    yield


@pytest.fixture(autouse=True)
def stub_docker_service_init(monkeypatch):
    def fake_init(self) -> None:
        self._client_lock = threading.Lock()
        self._client = SimpleNamespace()

    monkeypatch.setattr(DockerService, "__init__", fake_init)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def summary_factory():
    return make_summary


@pytest.fixture
def fake_docker_factory():
    return FakeDockerService


@pytest.fixture
def unreachable_docker(monkeypatch):
    """Real ``DockerService`` construction pointed at a socket that does not exist."""
    monkeypatch.setattr(DockerService, "__init__", REAL_DOCKER_SERVICE_INIT)
    monkeypatch.setattr(docker_service_module.settings, "docker_base_url", "unix:///tmp/kz-dashboard-missing.sock")
    monkeypatch.setattr(docker_service_module.settings, "docker_timeout_seconds", 2)
