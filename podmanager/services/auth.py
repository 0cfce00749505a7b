import asyncio
import logging
from typing import Dict, Optional

from podmanager.connector import NodeConnector
from podmanager.errors import AuthCheckError, AuthenticationFailed, PodManagerError
from podmanager.models.api import Address
from podmanager.models.domain import PodConfig

logger = logging.getLogger(__name__)


async def _probe_master(pod: PodConfig, connector: NodeConnector) -> bool:
    address = pod.master_address
    try:
        async with connector.session(address, pod.authpass) as node:
            try:
                await node.ping()
            except PodManagerError as e:
                logger.error(f"Master {address} of pod '{pod.name}' failed ping: {e}")
                return False
            return True
    except AuthenticationFailed as e:
        logger.warning(f"Master {address} of pod '{pod.name}' rejected the password: {e}")
        return False
    except PodManagerError as e:
        logger.error(f"Unable to connect to {address}. Error: {e}")
        return False


async def _probe_replica(pod: PodConfig, address: Address, connector: NodeConnector) -> Optional[bool]:
    """Returns None when the replica cannot be reached at all."""
    try:
        async with connector.session(address, pod.authpass) as node:
            try:
                await node.ping()
            except PodManagerError as e:
                logger.error(f"Replica {address} of pod '{pod.name}' failed ping: {e}")
                return False
            return True
    except AuthenticationFailed as e:
        logger.warning(f"Replica {address} of pod '{pod.name}' rejected the password: {e}")
        return False
    except PodManagerError as e:
        logger.info(f"Replica {address} of pod '{pod.name}' is unreachable, skipping: {e}")
        return None


async def check_auth(pod: PodConfig, connector: NodeConnector) -> Dict[str, bool]:
    """
    Confirm the pod password is accepted by the master and every reachable replica.

    Returns a mapping of ``"master"`` and replica addresses to the outcome.
    Replicas that cannot be reached are left out of the mapping. Raises
    AuthCheckError, carrying the mapping, if any tested node failed.
    """
    results: Dict[str, bool] = {"master": await _probe_master(pod, connector)}

    outcomes = await asyncio.gather(
        *[_probe_replica(pod, address, connector) for address in pod.known_slaves]
    )
    for address, outcome in zip(pod.known_slaves, outcomes):
        if outcome is not None:
            results[str(address)] = outcome

    if not all(results.values()):
        raise AuthCheckError(results)
    logger.info(f"Auth check passed for pod '{pod.name}' on {len(results)} nodes")
    return results
