import logging
from abc import ABC, abstractmethod
from typing import List

from podmanager.connector import NodeConnector, NodeSession
from podmanager.errors import QuorumError, SemanticMismatch
from podmanager.models.api import Address
from podmanager.models.domain import PodConfig, Policy, QuorumResult
from podmanager.services.quorum import QuorumExecutor

logger = logging.getLogger(__name__)


class PodOperation(ABC):
    """An administrative command fanned out to every sentinel of a pod."""

    name: str = ""
    policy: Policy = Policy.ALL

    def __init__(self, executor: QuorumExecutor):
        self.executor = executor

    def targets(self, pod: PodConfig) -> List[Address]:
        return list(pod.known_sentinels)

    @abstractmethod
    async def action(self, node: NodeSession, pod: PodConfig) -> bool: ...

    def failure_message(self, result: QuorumResult) -> str:
        return f"{self.name} failed on {result.total - result.successes} of {result.total} sentinels"

    async def execute(self, pod: PodConfig) -> QuorumResult:
        result = await self.executor.run(
            self.name,
            self.targets(pod),
            lambda node: self.action(node, pod),
            self.policy,
        )
        if not result.succeeded:
            raise QuorumError(self.failure_message(result), result)
        return result


class ResetOperation(PodOperation):
    name = "reset"
    policy = Policy.ALL

    async def action(self, node: NodeSession, pod: PodConfig) -> bool:
        await node.sentinel_reset(pod.name)
        return True

    def failure_message(self, result: QuorumResult) -> str:
        return f"Only {result.successes} of {result.total} sentinels were successfully reset"


class FailoverOperation(PodOperation):
    name = "failover"
    policy = Policy.FIRST

    async def action(self, node: NodeSession, pod: PodConfig) -> bool:
        return await node.sentinel_failover(pod.name)

    def failure_message(self, result: QuorumResult) -> str:
        return "No sentinels accepted the failover request"


class RemoveOperation(PodOperation):
    """
    Asks every known sentinel to forget the pod.

    A sentinel that is offline is not told, so the pod has to be removed by
    hand on that sentinel once it is back.
    """
    name = "remove"
    policy = Policy.ALL

    async def action(self, node: NodeSession, pod: PodConfig) -> bool:
        removed = await node.sentinel_remove(pod.name)
        if not removed:
            logger.warning(f"[{node.address}] Sentinel replied with unknown status. Manual verification recommended.")
        return removed

    def failure_message(self, result: QuorumResult) -> str:
        return (
            f"Not all sentinels had successful replies ({result.tally()} removed the pod). "
            f"Manual intervention required."
        )


class ValidateSentinelsOperation(PodOperation):
    """Checks that every known sentinel is reachable and monitors this pod."""
    name = "validate-sentinels"
    policy = Policy.ALL

    async def action(self, node: NodeSession, pod: PodConfig) -> bool:
        master = await node.sentinel_get_master(pod.name)
        if master.name != pod.name:
            raise SemanticMismatch(
                f"Requested master for pod '{pod.name}', got master for pod '{master.name}'"
            )
        return True

    def failure_message(self, result: QuorumResult) -> str:
        return f"{result.successes} of {result.total} sentinels were contacted and have this pod in their list"


async def reset(pod: PodConfig, connector: NodeConnector) -> QuorumResult:
    return await ResetOperation(QuorumExecutor(connector)).execute(pod)


async def failover(pod: PodConfig, connector: NodeConnector) -> QuorumResult:
    return await FailoverOperation(QuorumExecutor(connector)).execute(pod)


async def remove(pod: PodConfig, connector: NodeConnector) -> bool:
    await RemoveOperation(QuorumExecutor(connector)).execute(pod)
    return True


async def validate_sentinels(pod: PodConfig, connector: NodeConnector) -> bool:
    await ValidateSentinelsOperation(QuorumExecutor(connector)).execute(pod)
    return True
