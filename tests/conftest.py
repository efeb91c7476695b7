"""Shared fixtures for zkclient tests."""

import pytest

from zkclient import InMemoryStore, InMemoryTransport, ZooKeeper


class Recorder:
    """Collects completion handler and watcher calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)

    def process_result(self, *args):
        self.calls.append(args)

    def process(self, event):
        self.calls.append(event)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def transport(store):
    return InMemoryTransport(store=store)


@pytest.fixture
def zk(transport):
    client = ZooKeeper(transport=transport)
    yield client
    client.close()


@pytest.fixture
def recorder():
    return Recorder()
