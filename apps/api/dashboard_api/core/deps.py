from functools import lru_cache

from fastapi import Depends

from dashboard_api.core.config import get_settings
from dashboard_api.services.action_service import ContainerActionService
from dashboard_api.services.docker_service import DockerService
from dashboard_api.services.host_stats_service import HostStatsService
from dashboard_api.services.policy import ProtectionPolicy


@lru_cache(maxsize=1)
def get_protection_policy() -> ProtectionPolicy:
    return ProtectionPolicy.from_csv(get_settings().protected_containers)


def get_docker_service() -> DockerService:
    return DockerService()


def get_action_service(
    docker_service: DockerService = Depends(get_docker_service),
    policy: ProtectionPolicy = Depends(get_protection_policy),
) -> ContainerActionService:
    return ContainerActionService(
        docker_service,
        policy,
        call_timeout=get_settings().action_timeout_seconds,
    )


def get_host_stats_service() -> HostStatsService:
    return HostStatsService()
