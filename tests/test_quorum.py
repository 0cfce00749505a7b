"""
Tests for the sentinel fan-out operations.

Covers the success policy of each operation (all sentinels vs first
sentinel), the partial-failure tallies and the first-success short-circuit
of failover.
"""

import pytest

from fakes import MASTER, SENTINELS, addr, make_pod
from podmanager.errors import QuorumError
from podmanager.models.domain import Policy
from podmanager.services import (
    PodOperation,
    QuorumExecutor,
    failover,
    remove,
    reset,
    validate_sentinels,
)


class TestReset:
    @pytest.mark.asyncio
    async def test_all_sentinels_reset(self, connector, live_pod):
        result = await reset(live_pod, connector)

        assert result.succeeded
        assert result.successes == result.total == 3
        assert sorted(a for a, c in connector.calls if c == "sentinel-reset") == sorted(SENTINELS)

    @pytest.mark.asyncio
    async def test_unreachable_sentinel_fails_with_tally(self, connector, live_pod):
        connector.node(SENTINELS[1]).reachable = False

        with pytest.raises(QuorumError) as excinfo:
            await reset(live_pod, connector)

        assert str(excinfo.value) == "Only 2 of 3 sentinels were successfully reset"
        assert excinfo.value.result.successes == 2
        assert list(excinfo.value.result.failures) == [SENTINELS[1]]

    @pytest.mark.asyncio
    async def test_rejected_command_counts_as_failure(self, connector, live_pod):
        connector.node(SENTINELS[0]).fail_commands = True

        with pytest.raises(QuorumError) as excinfo:
            await reset(live_pod, connector)

        assert "ERR sentinel-reset failed" in excinfo.value.result.failures[SENTINELS[0]]

    @pytest.mark.asyncio
    async def test_no_known_sentinels_is_vacuously_successful(self, connector):
        lonely = make_pod("lonely", MASTER)

        result = await reset(lonely, connector)

        assert result.succeeded
        assert result.total == 0
        assert connector.calls == []


class TestFailover:
    @pytest.mark.asyncio
    async def test_stops_after_first_success(self, connector, live_pod):
        """First sentinel fails, second accepts: the third is never contacted."""
        connector.node(SENTINELS[0]).reachable = False

        result = await failover(live_pod, connector)

        assert result.succeeded
        assert result.attempted == 2
        assert connector.connects() == SENTINELS[:2]
        assert SENTINELS[2] not in [address for address, _ in connector.calls]

    @pytest.mark.asyncio
    async def test_first_sentinel_accepting_is_enough(self, connector, live_pod):
        await failover(live_pod, connector)

        assert connector.connects() == SENTINELS[:1]

    @pytest.mark.asyncio
    async def test_refused_everywhere(self, connector, live_pod):
        for sentinel in SENTINELS:
            connector.node(sentinel).accept_failover = False

        with pytest.raises(QuorumError) as excinfo:
            await failover(live_pod, connector)

        assert str(excinfo.value) == "No sentinels accepted the failover request"
        assert excinfo.value.result.attempted == 3
        assert len(excinfo.value.result.failures) == 3

    @pytest.mark.asyncio
    async def test_no_sentinels_is_an_error(self, connector):
        with pytest.raises(QuorumError):
            await failover(make_pod("lonely", MASTER), connector)


class TestRemove:
    @pytest.mark.asyncio
    async def test_removed_everywhere(self, connector, live_pod):
        assert await remove(live_pod, connector) is True
        for sentinel in SENTINELS:
            assert live_pod.name not in connector.node(sentinel).monitored

    @pytest.mark.asyncio
    async def test_unknown_reply_requires_manual_cleanup(self, connector, live_pod):
        connector.node(SENTINELS[2]).remove_reply = False

        with pytest.raises(QuorumError) as excinfo:
            await remove(live_pod, connector)

        assert "Manual intervention required" in str(excinfo.value)
        assert "2 of 3 sentinels" in str(excinfo.value)


class TestValidateSentinels:
    @pytest.mark.asyncio
    async def test_all_sentinels_know_the_pod(self, connector, live_pod):
        assert await validate_sentinels(live_pod, connector) is True

    @pytest.mark.asyncio
    async def test_mismatched_pod_name_is_a_failure(self, connector, live_pod):
        connector.node(SENTINELS[0]).monitored[live_pod.name] = "other-pod"

        with pytest.raises(QuorumError) as excinfo:
            await validate_sentinels(live_pod, connector)

        result = excinfo.value.result
        assert str(excinfo.value) == "2 of 3 sentinels were contacted and have this pod in their list"
        assert "other-pod" in result.failures[SENTINELS[0]]

    @pytest.mark.asyncio
    async def test_sentinel_not_monitoring_pod(self, connector, live_pod):
        del connector.node(SENTINELS[2]).monitored[live_pod.name]

        with pytest.raises(QuorumError) as excinfo:
            await validate_sentinels(live_pod, connector)

        assert excinfo.value.result.successes == 2


class TestAllPolicy:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "outcomes",
        [
            [True, True, True],
            [True, False, True],
            [False, False, False],
            [True, "error", True],
            ["error", "error", True],
        ],
    )
    async def test_success_iff_every_target_succeeded(self, connector, outcomes):
        targets = []
        for i, outcome in enumerate(outcomes):
            address = f"10.9.0.{i}:26379"
            node = connector.add(address)
            node.fail_commands = outcome == "error"
            node.accept_failover = outcome is True
            targets.append(addr(address))

        result = await QuorumExecutor(connector).run(
            "probe", targets, lambda node: node.sentinel_failover("pod"), Policy.ALL
        )

        expected = sum(1 for outcome in outcomes if outcome is True)
        assert result.successes == expected
        assert result.succeeded == (expected == len(outcomes))
        assert len(result.failures) == len(outcomes) - expected


class TestPodOperation:
    def test_needs_an_action(self, connector):
        with pytest.raises(TypeError):
            PodOperation(QuorumExecutor(connector))
