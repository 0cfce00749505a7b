import logging
from typing import Dict, List, Optional

from podmanager.connector import NodeConnector
from podmanager.models.config import Settings
from podmanager.models.domain import PodConfig, QuorumResult, RotationReport
from podmanager.registry import Registry
from podmanager.services.auth import check_auth
from podmanager.services.operations import (
    FailoverOperation,
    RemoveOperation,
    ResetOperation,
    ValidateSentinelsOperation,
)
from podmanager.services.quorum import QuorumExecutor
from podmanager.services.rotation import rotate_credential
from podmanager.services.topology import walk_topology

logger = logging.getLogger(__name__)


class PodManager:
    """Resolves pod names against a registry and runs administrative operations on them."""

    def __init__(self, registry: Registry, connector: NodeConnector, settings: Optional[Settings] = None):
        self.registry = registry
        self.connector = connector
        self.settings = settings or Settings()
        executor = QuorumExecutor(connector)
        self.operations = {
            op.name: op
            for op in (
                ResetOperation(executor),
                FailoverOperation(executor),
                RemoveOperation(executor),
                ValidateSentinelsOperation(executor),
            )
        }

    async def get_pod(self, name: str) -> PodConfig:
        return await self.registry.resolve_pod(name)

    async def list_pods(self) -> Dict[str, PodConfig]:
        return await self.registry.all_pods()

    async def run_operation(self, operation: str, name: str) -> QuorumResult:
        pod = await self.get_pod(name)
        logger.info(f"Running {operation} for pod '{name}' on {len(pod.known_sentinels)} sentinels")
        return await self.operations[operation].execute(pod)

    async def failover(self, name: str) -> QuorumResult:
        return await self.run_operation("failover", name)

    async def reset(self, name: str) -> QuorumResult:
        return await self.run_operation("reset", name)

    async def remove(self, name: str) -> QuorumResult:
        return await self.run_operation("remove", name)

    async def validate_sentinels(self, name: str) -> QuorumResult:
        return await self.run_operation("validate-sentinels", name)

    async def check_auth(self, name: str) -> Dict[str, bool]:
        return await check_auth(await self.get_pod(name), self.connector)

    def topology_depth(self, depth: Optional[int] = None, full: bool = False) -> Optional[int]:
        if full:
            return None
        return depth if depth is not None else self.settings.topology_depth

    async def walk_topology(self, name: str, depth: Optional[int] = None, full: bool = False) -> List[PodConfig]:
        max_depth = self.topology_depth(depth, full)
        pod = await self.get_pod(name)
        return await walk_topology(pod, self.registry, self.connector, max_depth=max_depth)

    async def rotate_credential(self, name: str, old: str, new: str) -> RotationReport:
        pod = await self.get_pod(name)
        return await rotate_credential(
            pod,
            old,
            new,
            self.registry,
            self.connector,
            verify_primary_write=self.settings.verify_primary_write,
        )
