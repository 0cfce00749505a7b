import pytest

from fakes import MASTER, REPLICAS, SENTINELS, FailingRegistry, FakeConnector, make_pod


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def pod():
    return make_pod("pod1", MASTER, REPLICAS, SENTINELS, authpass="a")


@pytest.fixture
def live_pod(connector, pod):
    """Pod whose master, replicas and sentinels all exist and answer."""
    connector.add(MASTER, password="a")
    for replica in REPLICAS:
        connector.add(replica, password="a")
    for sentinel in SENTINELS:
        node = connector.add(sentinel)
        node.monitored[pod.name] = pod.name
    return pod


@pytest.fixture
def registry(pod):
    return FailingRegistry([pod])
