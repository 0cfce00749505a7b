"""
Pod registries.

A registry resolves pod names to ``PodConfig`` snapshots and reports the
current replica and sentinel membership of a pod. Three sources exist:

* ``StaticRegistry``: pods held in memory.
* ``SentinelConfigRegistry``: a sentinel configuration file on disk.
* ``HttpRegistry``: a remote registry service speaking JSON over HTTP.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Protocol

from pydantic import ValidationError

from podmanager.errors import PodNotFound, RegistryError
from podmanager.models.api import Address
from podmanager.models.config import Settings
from podmanager.models.domain import PodConfig
from podmanager.utils import async_request, pod_lookup_wrapper, registry_error_wrapper

logger = logging.getLogger(__name__)


class Registry(Protocol):
    async def resolve_pod(self, name: str) -> PodConfig: ...

    async def all_pods(self) -> Dict[str, PodConfig]: ...

    async def replicas_of(self, pod: PodConfig) -> List[Address]: ...

    async def watchdogs_of(self, pod: PodConfig) -> List[Address]: ...


class StaticRegistry:
    def __init__(self, pods: Iterable[PodConfig] = ()):
        self.pods: Dict[str, PodConfig] = {}
        for pod in pods:
            self.add_pod(pod)

    def add_pod(self, pod: PodConfig) -> None:
        if pod.name in self.pods:
            raise RegistryError(f"Pod '{pod.name}' is already registered")
        self.pods[pod.name] = pod

    def _get(self, name: str) -> PodConfig:
        try:
            return self.pods[name]
        except KeyError:
            raise PodNotFound(name) from None

    async def resolve_pod(self, name: str) -> PodConfig:
        return self._get(name).model_copy(deep=True)

    async def all_pods(self) -> Dict[str, PodConfig]:
        return {name: pod.model_copy(deep=True) for name, pod in self.pods.items()}

    async def replicas_of(self, pod: PodConfig) -> List[Address]:
        return list(self._get(pod.name).known_slaves)

    async def watchdogs_of(self, pod: PodConfig) -> List[Address]:
        return list(self._get(pod.name).known_sentinels)


def parse_sentinel_config(lines: Iterable[str]) -> Dict[str, PodConfig]:
    """Build pods from the ``sentinel ...`` directives of a sentinel config."""
    monitors: Dict[str, dict] = {}
    extras: Dict[str, dict] = defaultdict(lambda: {"authpass": "", "slaves": [], "sentinels": []})

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if parts[0].lower() != "sentinel" or len(parts) < 3:
            continue
        directive, name, args = parts[1].lower(), parts[2], parts[3:]
        try:
            if directive == "monitor":
                monitors[name] = {"master_ip": args[0], "master_port": int(args[1]), "quorum": int(args[2])}
            elif directive == "auth-pass":
                extras[name]["authpass"] = args[0]
            elif directive in ("known-slave", "known-replica"):
                extras[name]["slaves"].append(Address(host=args[0], port=int(args[1])))
            elif directive == "known-sentinel":
                extras[name]["sentinels"].append(Address(host=args[0], port=int(args[1])))
        except (IndexError, ValueError) as e:
            raise RegistryError(f"Malformed sentinel directive on line {lineno}: {line!r}") from e

    for name in set(extras) - set(monitors):
        logger.warning(f"Ignoring directives for pod '{name}' which has no monitor line")

    pods = {}
    for name, monitor in monitors.items():
        extra = extras[name]
        pods[name] = PodConfig(
            name=name,
            authpass=extra["authpass"],
            known_slaves=extra["slaves"],
            known_sentinels=extra["sentinels"],
            **monitor,
        )
    return pods


class SentinelConfigRegistry:
    """Registry backed by a sentinel config file, re-read on every call."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Dict[str, PodConfig]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return parse_sentinel_config(f)
        except OSError as e:
            logger.error(f"Unable to read sentinel config {self.path}: {e}")
            raise RegistryError(f"Unable to read sentinel config {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            logger.error(f"Sentinel config {self.path} is not valid UTF-8: {e}")
            raise RegistryError(f"Sentinel config {self.path} is not valid UTF-8: {e}") from e

    async def resolve_pod(self, name: str) -> PodConfig:
        pods = self.load()
        if name not in pods:
            raise PodNotFound(name)
        return pods[name]

    async def all_pods(self) -> Dict[str, PodConfig]:
        return self.load()

    async def replicas_of(self, pod: PodConfig) -> List[Address]:
        return (await self.resolve_pod(pod.name)).known_slaves

    async def watchdogs_of(self, pod: PodConfig) -> List[Address]:
        return (await self.resolve_pod(pod.name)).known_sentinels


class HttpRegistry:
    """
    Registry served by a remote pod registry service.

    ``GET {base_url}/api/pods`` returns a JSON list of pods and
    ``GET {base_url}/api/pod/{name}`` a single pod, both in ``PodConfig``
    shape.
    """

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @staticmethod
    def _build(data) -> PodConfig:
        try:
            return PodConfig.model_validate(data)
        except ValidationError as e:
            raise RegistryError(f"Registry returned an invalid pod: {e}") from e

    @registry_error_wrapper
    @pod_lookup_wrapper
    async def resolve_pod(self, name: str) -> PodConfig:
        data = await async_request("GET", f"{self.base_url}/api/pod/{name}", timeout=self.timeout)
        pod = self._build(data)
        if pod.name != name:
            raise RegistryError(f"Registry answered pod '{pod.name}' when asked for '{name}'")
        return pod

    @registry_error_wrapper
    async def all_pods(self) -> Dict[str, PodConfig]:
        data = await async_request("GET", f"{self.base_url}/api/pods", timeout=self.timeout)
        if not isinstance(data, list):
            raise RegistryError("Registry pod listing is not a list")
        pods = {}
        for item in data:
            pod = self._build(item)
            if pod.name in pods:
                raise RegistryError(f"Registry lists pod '{pod.name}' more than once")
            pods[pod.name] = pod
        return pods

    async def replicas_of(self, pod: PodConfig) -> List[Address]:
        return (await self.resolve_pod(pod.name)).known_slaves

    async def watchdogs_of(self, pod: PodConfig) -> List[Address]:
        return (await self.resolve_pod(pod.name)).known_sentinels


def registry_from_settings(settings: Settings) -> Registry:
    if settings.use_registry:
        logger.info(f"Using remote pod registry at {settings.registry_url}")
        return HttpRegistry(settings.registry_url, timeout=settings.registry_timeout)
    logger.info(f"Using sentinel config {settings.sentinel_config_file}")
    return SentinelConfigRegistry(settings.sentinel_config_file)
