"""In-memory stand-ins for masters, replicas, sentinels and registries."""

from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from podmanager.errors import AuthenticationFailed, ConnectivityError, ProtocolError, RegistryError
from podmanager.models.api import Address
from podmanager.models.domain import MasterInfo, PodConfig
from podmanager.registry import StaticRegistry


def addr(value: str) -> Address:
    return Address.parse(value)


class FakeNode:
    """A redis server or sentinel with just enough behaviour for the admin commands."""

    def __init__(self, password: str = "", reachable: bool = True):
        self.password = password
        self.reachable = reachable
        self.config: Dict[str, str] = {}
        self.fail_ping = False
        self.fail_parameters: set = set()
        self.fail_commands = False
        # sentinel side
        self.monitored: Dict[str, str] = {}
        self.accept_failover = True
        self.remove_reply = True
        self.pod_parameters: Dict[tuple, str] = {}


class FakeSession:
    def __init__(self, connector: "FakeConnector", address: Address, node: FakeNode):
        self.connector = connector
        self.address = address
        self.node = node

    def _record(self, command: str) -> None:
        self.connector.calls.append((str(self.address), command))
        if self.node.fail_commands:
            raise ProtocolError(str(self.address), f"ERR {command} failed")

    async def ping(self) -> None:
        self._record("ping")
        if self.node.fail_ping:
            raise ProtocolError(str(self.address), "NOAUTH Authentication required")

    async def set_parameter(self, name: str, value: str) -> None:
        self._record(f"config-set {name}")
        if name in self.node.fail_parameters:
            raise ProtocolError(str(self.address), f"ERR cannot set {name}")
        self.node.config[name] = value
        if name == "requirepass":
            self.node.password = value

    async def sentinel_reset(self, pod_name: str) -> None:
        self._record("sentinel-reset")

    async def sentinel_failover(self, pod_name: str) -> bool:
        self._record("sentinel-failover")
        return self.node.accept_failover

    async def sentinel_remove(self, pod_name: str) -> bool:
        self._record("sentinel-remove")
        self.node.monitored.pop(pod_name, None)
        return self.node.remove_reply

    async def sentinel_get_master(self, pod_name: str) -> MasterInfo:
        self._record("sentinel-get-master")
        if pod_name not in self.node.monitored:
            raise ProtocolError(str(self.address), "ERR No such master with that name")
        return MasterInfo(name=self.node.monitored[pod_name])

    async def sentinel_set_pod_parameter(self, pod_name: str, key: str, value: str) -> None:
        self._record(f"sentinel-set {key}")
        self.node.pod_parameters[(pod_name, key)] = value


class FakeConnector:
    def __init__(self):
        self.nodes: Dict[Address, FakeNode] = {}
        self.calls: List[tuple] = []

    def add(self, address: str, **kwargs) -> FakeNode:
        node = FakeNode(**kwargs)
        self.nodes[addr(address)] = node
        return node

    def node(self, address: str) -> FakeNode:
        return self.nodes[addr(address)]

    def connects(self) -> List[str]:
        return [address for address, command in self.calls if command == "connect"]

    @asynccontextmanager
    async def session(self, address: Address, password: Optional[str] = None):
        self.calls.append((str(address), "connect"))
        node = self.nodes.get(address)
        if node is None or not node.reachable:
            raise ConnectivityError(str(address), "connection refused")
        if node.password and password != node.password:
            raise AuthenticationFailed(str(address), "WRONGPASS invalid username-password pair")
        yield FakeSession(self, address, node)


class FailingRegistry(StaticRegistry):
    """Static registry whose membership lookups can be made to fail."""

    def __init__(self, pods=(), fail_replicas: bool = False, fail_watchdogs: bool = False):
        super().__init__(pods)
        self.fail_replicas = fail_replicas
        self.fail_watchdogs = fail_watchdogs

    async def replicas_of(self, pod):
        if self.fail_replicas:
            raise RegistryError("replica listing unavailable")
        return await super().replicas_of(pod)

    async def watchdogs_of(self, pod):
        if self.fail_watchdogs:
            raise RegistryError("sentinel listing unavailable")
        return await super().watchdogs_of(pod)


def make_pod(
    name: str,
    master: str,
    slaves=(),
    sentinels=(),
    authpass: str = "a",
) -> PodConfig:
    ip, port = master.rsplit(":", 1)
    return PodConfig(
        name=name,
        master_ip=ip,
        master_port=int(port),
        authpass=authpass,
        quorum=2,
        known_slaves=[addr(s) for s in slaves],
        known_sentinels=[addr(s) for s in sentinels],
    )


SENTINELS = ["10.0.0.1:26379", "10.0.0.2:26379", "10.0.0.3:26379"]
MASTER = "10.0.1.1:6379"
REPLICAS = ["10.0.1.2:6379", "10.0.1.3:6379"]

