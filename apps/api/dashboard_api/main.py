import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dashboard_api.api.v1.router import api_router
from dashboard_api.core.config import get_settings
from dashboard_api.core.deps import get_protection_policy
from dashboard_api.db.init_db import init_db
from dashboard_api.services.docker_service import DockerService

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    policy = get_protection_policy()
    logger.info("protected containers: %s", ", ".join(sorted(policy.protected_names)))
    yield


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/healthz")
def healthz() -> dict:
    docker_ok = DockerService().ping()
    return {"status": "ok", "docker": docker_ok}
