import asyncio
import functools
import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import AuthenticationError, RedisError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from podmanager.errors import AuthenticationFailed, ConnectivityError, ProtocolError
from podmanager.models.api import Address
from podmanager.models.config import Settings
from podmanager.models.domain import MasterInfo

logger = logging.getLogger(__name__)


class NodeSession(Protocol):
    address: Address

    async def ping(self) -> None: ...

    async def set_parameter(self, name: str, value: str) -> None: ...

    async def sentinel_reset(self, pod_name: str) -> None: ...

    async def sentinel_failover(self, pod_name: str) -> bool: ...

    async def sentinel_remove(self, pod_name: str) -> bool: ...

    async def sentinel_get_master(self, pod_name: str) -> MasterInfo: ...

    async def sentinel_set_pod_parameter(self, pod_name: str, key: str, value: str) -> None: ...


class NodeConnector(Protocol):
    def session(self, address: Address, password: Optional[str] = None) -> AsyncContextManager[NodeSession]: ...


def node_call(func):
    """Decorator translating redis client errors into podmanager errors."""
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except AuthenticationError as e:
            raise AuthenticationFailed(str(self.address), str(e)) from e
        except (RedisConnectionError, RedisTimeoutError, asyncio.TimeoutError, OSError) as e:
            raise ConnectivityError(str(self.address), str(e) or type(e).__name__) from e
        except RedisError as e:
            raise ProtocolError(str(self.address), str(e)) from e
    return wrapper


def _is_ok(reply) -> bool:
    return reply is True or reply == "OK"


class RedisNodeSession:
    """One open connection to a master, replica or sentinel."""

    def __init__(self, address: Address, client: redis.Redis):
        self.address = address
        self._client = client

    @node_call
    async def open(self) -> None:
        # single_connection_client makes initialize() connect and AUTH right away
        await self._client.initialize()

    @node_call
    async def ping(self) -> None:
        await self._client.ping()

    @node_call
    async def set_parameter(self, name: str, value: str) -> None:
        reply = await self._client.config_set(name, value)
        if not _is_ok(reply):
            raise ProtocolError(str(self.address), f"CONFIG SET {name} replied {reply!r}")

    @node_call
    async def sentinel_reset(self, pod_name: str) -> None:
        await self._client.sentinel_reset(pod_name)

    @node_call
    async def sentinel_failover(self, pod_name: str) -> bool:
        return _is_ok(await self._client.sentinel_failover(pod_name))

    @node_call
    async def sentinel_remove(self, pod_name: str) -> bool:
        return _is_ok(await self._client.sentinel_remove(pod_name))

    @node_call
    async def sentinel_get_master(self, pod_name: str) -> MasterInfo:
        state = await self._client.sentinel_master(pod_name)
        if not isinstance(state, dict) or "name" not in state:
            raise ProtocolError(str(self.address), f"SENTINEL MASTER {pod_name} returned {state!r}")
        return MasterInfo(
            name=state["name"],
            ip=state.get("ip"),
            port=state.get("port"),
            flags=sorted(state.get("flags", ())),
        )

    @node_call
    async def sentinel_set_pod_parameter(self, pod_name: str, key: str, value: str) -> None:
        reply = await self._client.sentinel_set(pod_name, key, value)
        if not _is_ok(reply):
            raise ProtocolError(str(self.address), f"SENTINEL SET {pod_name} {key} replied {reply!r}")

    async def close(self) -> None:
        await self._client.aclose()


class RedisNodeConnector:
    def __init__(self, connect_timeout: float = 2.0, command_timeout: float = 5.0):
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisNodeConnector":
        return cls(connect_timeout=settings.connect_timeout, command_timeout=settings.command_timeout)

    @asynccontextmanager
    async def session(self, address: Address, password: Optional[str] = None) -> AsyncIterator[RedisNodeSession]:
        client = redis.Redis(
            host=address.host,
            port=address.port,
            password=password or None,
            socket_connect_timeout=self.connect_timeout,
            socket_timeout=self.command_timeout,
            decode_responses=True,
            single_connection_client=True,
        )
        node = RedisNodeSession(address, client)
        try:
            await node.open()
            logger.debug(f"Connected to {address}")
            yield node
        finally:
            await node.close()
