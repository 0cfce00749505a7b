import logging
from typing import Iterable, List, Optional

from podmanager.connector import NodeConnector
from podmanager.errors import AuthCheckError
from podmanager.models.domain import PodConfig
from podmanager.registry import Registry
from podmanager.services.auth import check_auth

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 2


def overlaps(target: PodConfig, other: PodConfig) -> bool:
    """True if any master or replica address of ``target`` is also used by ``other``."""
    return not target.addresses().isdisjoint(other.addresses())


def find_entangled(target: PodConfig, pods: Iterable[PodConfig]) -> List[PodConfig]:
    """Pods sharing an address with ``target``, compared two at a time."""
    return [pod for pod in pods if pod.name != target.name and overlaps(target, pod)]


async def _probe_auth(pod: PodConfig, connector: NodeConnector) -> None:
    try:
        results = await check_auth(pod, connector)
        logger.info(f"Entangled pod '{pod.name}' auth check: {results}")
    except AuthCheckError as e:
        logger.warning(f"Entangled pod '{pod.name}' auth check: {e.results}")


async def walk_topology(
    pod: PodConfig,
    registry: Registry,
    connector: Optional[NodeConnector] = None,
    max_depth: Optional[int] = DEFAULT_DEPTH,
) -> List[PodConfig]:
    """
    Breadth-first walk over pods that share addresses, starting at ``pod``.

    ``max_depth`` bounds how many rounds of expansion are done: with the
    default of 2 the walk reaches neighbours and neighbours' neighbours.
    ``None`` walks to the full transitive closure. When a connector is given,
    every walked pod found entangled gets an auth probe whose result is only
    logged. The starting pod is never part of the returned list.
    """
    if max_depth is not None and max_depth < 1:
        raise ValueError("max_depth must be at least 1")

    pods = list((await registry.all_pods()).values())
    visited = {pod.name}
    entangled: List[PodConfig] = []
    frontier = [pod]
    depth = 0

    while frontier and (max_depth is None or depth < max_depth):
        depth += 1
        next_frontier = []
        for current in frontier:
            neighbours = find_entangled(current, pods)
            if not neighbours:
                continue
            if connector is not None:
                await _probe_auth(current, connector)
            for neighbour in neighbours:
                if neighbour.name in visited:
                    continue
                visited.add(neighbour.name)
                entangled.append(neighbour)
                next_frontier.append(neighbour)
        frontier = next_frontier

    if entangled:
        logger.warning(f"Pod '{pod.name}' is entangled with: {', '.join(p.name for p in entangled)}")
    else:
        logger.info(f"Pod '{pod.name}' is isolated")
    return entangled
