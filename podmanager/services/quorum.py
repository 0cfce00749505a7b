import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from podmanager.connector import NodeConnector, NodeSession
from podmanager.models.api import Address
from podmanager.models.domain import Policy, QuorumResult

logger = logging.getLogger(__name__)

NodeAction = Callable[[NodeSession], Awaitable[bool]]


class QuorumExecutor:
    """
    Applies one remote command to a list of sentinels and tallies the outcome.

    Each target gets its own connection and a single attempt. An action
    returning False, or raising for any reason (unreachable node, rejected
    command, unexpected answer), counts as a failure for that target only.

    Policy.ALL contacts every target concurrently. Policy.FIRST contacts
    targets in order and stops at the first success, so no command is sent
    once one sentinel has accepted it.
    """

    def __init__(self, connector: NodeConnector):
        self.connector = connector

    async def _attempt(self, address: Address, action: NodeAction) -> bool:
        async with self.connector.session(address) as node:
            return await action(node)

    @staticmethod
    def _record_failure(result: QuorumResult, address: Address, reason) -> None:
        logger.error(f"[{address}] {result.operation} failed: {reason}")
        result.failures[str(address)] = str(reason)

    async def run(
        self,
        operation: str,
        targets: Sequence[Address],
        action: NodeAction,
        policy: Policy,
    ) -> QuorumResult:
        targets = list(targets)
        result = QuorumResult(operation=operation, policy=policy, total=len(targets))
        if not targets:
            logger.warning(f"{operation}: no sentinels known, nothing was contacted")
            return result

        if policy == Policy.FIRST:
            for address in targets:
                result.attempted += 1
                try:
                    accepted = await self._attempt(address, action)
                except Exception as e:
                    self._record_failure(result, address, e)
                    continue
                if accepted:
                    result.successes += 1
                    logger.info(f"[{address}] {operation} accepted")
                    break
                self._record_failure(result, address, "request not accepted")
            return result

        outcomes = await asyncio.gather(
            *[self._attempt(address, action) for address in targets],
            return_exceptions=True,
        )
        result.attempted = len(targets)
        for address, outcome in zip(targets, outcomes):
            if isinstance(outcome, Exception):
                self._record_failure(result, address, outcome)
            elif outcome:
                result.successes += 1
            else:
                self._record_failure(result, address, "request not acknowledged")

        logger.info(f"{operation}: {result.tally()} succeeded")
        return result
