"""
Credential rotation for a whole pod.

The password is changed in a fixed order: master, then replicas, then the
sentinels that monitor the pod. Only a failure to list the replicas right
after the master changed is rolled back; replica and sentinel failures are
counted and reported so an operator can fix the named nodes by hand.
"""

import asyncio
import logging
from typing import Iterable, List, Sequence

from podmanager.connector import NodeConnector, NodeSession
from podmanager.errors import (
    CredentialMismatch,
    PodManagerError,
    PrimaryUpdateError,
    RegistryError,
    RotationRolledBack,
)
from podmanager.models.api import Address
from podmanager.models.domain import PodConfig, RotationReport
from podmanager.registry import Registry

logger = logging.getLogger(__name__)

AUTH_PARAMETERS = ("masterauth", "requirepass")
SENTINEL_AUTH_KEY = "auth-pass"


async def _set_parameters(node: NodeSession, parameters: Iterable[str], value: str) -> List[str]:
    """Best-effort write of every parameter, returning the errors seen."""
    errors = []
    for parameter in parameters:
        try:
            await node.set_parameter(parameter, value)
        except PodManagerError as e:
            logger.error(f"[{node.address}] Unable to set {parameter}: {e}")
            errors.append(f"{parameter}: {e}")
    return errors


async def _update_primary(node: NodeSession, old: str, new: str, verify: bool) -> None:
    if not verify:
        # writes are not checked here; a failed write surfaces later as replicas/clients failing auth
        await _set_parameters(node, AUTH_PARAMETERS, new)
        return

    applied = []
    for parameter in AUTH_PARAMETERS:
        try:
            await node.set_parameter(parameter, new)
        except PodManagerError as e:
            await _set_parameters(node, applied, old)
            raise PrimaryUpdateError(str(node.address), f"{parameter}: {e}") from e
        applied.append(parameter)


async def _update_replica(address: Address, old: str, new: str, connector: NodeConnector) -> None:
    async with connector.session(address, old) as node:
        for parameter in AUTH_PARAMETERS:
            await node.set_parameter(parameter, new)


async def _update_sentinel(address: Address, pod_name: str, new: str, connector: NodeConnector) -> None:
    async with connector.session(address) as node:
        await node.sentinel_set_pod_parameter(pod_name, SENTINEL_AUTH_KEY, new)


async def _fan_out(kind: str, targets: Sequence[Address], calls) -> List[str]:
    """Runs the calls concurrently and returns the addresses that failed."""
    outcomes = await asyncio.gather(*calls, return_exceptions=True)
    failed = []
    for address, outcome in zip(targets, outcomes):
        if isinstance(outcome, Exception):
            logger.error(f"Unable to update password on {kind} {address}: {outcome}")
            failed.append(str(address))
    return failed


async def rotate_credential(
    pod: PodConfig,
    old: str,
    new: str,
    registry: Registry,
    connector: NodeConnector,
    verify_primary_write: bool = False,
) -> RotationReport:
    if old != pod.authpass:
        raise CredentialMismatch(pod.name)

    report = RotationReport(pod=pod.name)

    async with connector.session(pod.master_address, old) as master:
        await _update_primary(master, old, new, verify_primary_write)
        pod.authpass = new
        logger.info(f"Password changed on master {pod.master_address} of pod '{pod.name}'")

        try:
            replicas = list(await registry.replicas_of(pod))
        except Exception as e:
            logger.error(f"Unable to fetch replicas of pod '{pod.name}': {e}. Rolling back master password")
            revert_errors = await _set_parameters(master, AUTH_PARAMETERS, old)
            pod.authpass = old
            raise RotationRolledBack(pod.name, e, revert_errors) from e

    report.replicas_total = len(replicas)
    report.stale_replicas = await _fan_out(
        "replica", replicas, [_update_replica(address, old, new, connector) for address in replicas]
    )
    report.replicas_updated = report.replicas_total - len(report.stale_replicas)
    logger.info(f"{report.replicas_updated} of {report.replicas_total} replicas of pod '{pod.name}' updated")

    try:
        sentinels = list(await registry.watchdogs_of(pod))
    except RegistryError as e:
        raise RegistryError(
            f"Password changed on master and {report.replicas_updated} of {report.replicas_total} "
            f"replicas of pod '{pod.name}', but its sentinels could not be listed: {e}"
        ) from e

    report.sentinels_total = len(sentinels)
    report.stale_sentinels = await _fan_out(
        "sentinel", sentinels, [_update_sentinel(address, pod.name, new, connector) for address in sentinels]
    )
    report.sentinels_updated = report.sentinels_total - len(report.stale_sentinels)

    if report.complete:
        logger.info(f"Password rotation for pod '{pod.name}' complete: {report.summary()}")
    else:
        logger.warning(f"Password rotation for pod '{pod.name}' incomplete: {report.summary()}")
    return report
