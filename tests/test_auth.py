import pytest

from fakes import MASTER, REPLICAS
from podmanager.errors import AuthCheckError
from podmanager.services.auth import check_auth


class TestCheckAuth:
    """Auth validation against master and reachable replicas."""

    @pytest.mark.asyncio
    async def test_every_node_accepts(self, connector, live_pod):
        results = await check_auth(live_pod, connector)

        assert results == {"master": True, REPLICAS[0]: True, REPLICAS[1]: True}

    @pytest.mark.asyncio
    async def test_unreachable_replica_is_left_out(self, connector, live_pod):
        connector.node(REPLICAS[0]).reachable = False

        results = await check_auth(live_pod, connector)

        assert REPLICAS[0] not in results
        assert results == {"master": True, REPLICAS[1]: True}

    @pytest.mark.asyncio
    async def test_replica_failing_ping(self, connector, live_pod):
        connector.node(REPLICAS[1]).fail_ping = True

        with pytest.raises(AuthCheckError) as excinfo:
            await check_auth(live_pod, connector)

        assert excinfo.value.results[REPLICAS[1]] is False
        assert excinfo.value.results["master"] is True

    @pytest.mark.asyncio
    async def test_replica_rejecting_password(self, connector, live_pod):
        connector.node(REPLICAS[0]).password = "other"

        with pytest.raises(AuthCheckError) as excinfo:
            await check_auth(live_pod, connector)

        assert excinfo.value.results[REPLICAS[0]] is False

    @pytest.mark.asyncio
    async def test_master_rejecting_password(self, connector, live_pod):
        connector.node(MASTER).password = "other"

        with pytest.raises(AuthCheckError) as excinfo:
            await check_auth(live_pod, connector)

        assert excinfo.value.results["master"] is False
        assert "master" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_master_unreachable(self, connector, live_pod):
        connector.node(MASTER).reachable = False

        with pytest.raises(AuthCheckError) as excinfo:
            await check_auth(live_pod, connector)

        assert excinfo.value.results == {"master": False, REPLICAS[0]: True, REPLICAS[1]: True}
