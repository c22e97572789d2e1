from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from dashboard_api.schemas.container import BulkActionRequest, ContainerSummary

DEFAULT_PROTECTED_CONTAINERS: frozenset[str] = frozenset({"kz-dashboard-api", "kz-dashboard-web"})


def parse_protected_names(raw: str | None) -> frozenset[str]:
    if raw is None:
        return frozenset()
    return frozenset(item.strip().lower() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class ProtectionPolicy:
    """Decides which containers a batch action may touch.

    Containers whose name is protected are never targeted, whichever way they
    were selected. The policy holds no state besides the protected names.
    """

    protected_names: frozenset[str] = DEFAULT_PROTECTED_CONTAINERS

    @classmethod
    def from_csv(cls, raw: str | None) -> ProtectionPolicy:
        names = parse_protected_names(raw)
        return cls(protected_names=names or DEFAULT_PROTECTED_CONTAINERS)

    def is_protected(self, name: str) -> bool:
        return name.lower() in self.protected_names

    def select_targets(
        self,
        inventory: Sequence[ContainerSummary],
        request: BulkActionRequest,
    ) -> list[ContainerSummary]:
        ids = set(request.ids or [])
        names = {name.lower() for name in request.names or []}
        return [
            container
            for container in inventory
            if (request.include_all or container.id in ids or container.name.lower() in names)
            and not self.is_protected(container.name)
        ]

    def select_cluster(self, inventory: Iterable[ContainerSummary], cluster: str) -> list[ContainerSummary]:
        key = cluster.strip().lower()
        if not key:
            return []
        return [
            container
            for container in inventory
            if container.cluster is not None
            and container.cluster.lower() == key
            and not self.is_protected(container.name)
        ]
