"""Tests for session watchers and one-shot watches."""

import pytest

from zkclient import (
    EventDispatcher,
    EventType,
    FunctionWatcher,
    InMemoryTransport,
    KeeperState,
    SilentWatcher,
    WatchedEvent,
    ZooKeeper,
)
from zkclient.watchers import resolve_watcher


@pytest.fixture
def events():
    return []


@pytest.fixture
def watched(transport, events):
    client = ZooKeeper(transport=transport, watcher=events.append)
    transport.wait_idle()
    events.clear()
    yield client
    client.close()


def node_events(events):
    return [(event.type, event.path) for event in events if event.type != EventType.NONE]


class TestResolveWatcher:
    """Tests for resolve_watcher."""

    def test_variants(self):
        assert isinstance(resolve_watcher(None), SilentWatcher)
        assert isinstance(resolve_watcher("default"), EventDispatcher)
        assert isinstance(resolve_watcher(print), FunctionWatcher)

        class Custom:
            def process(self, event):
                pass

        custom = Custom()
        assert resolve_watcher(custom) is custom


class TestSessionEvents:
    """Tests for session state notifications."""

    def test_connected_event(self, transport):
        seen = []
        zk = ZooKeeper(transport=transport, watcher=seen.append)
        try:
            transport.wait_idle()
            assert seen == [WatchedEvent(type=EventType.NONE, state=KeeperState.CONNECTED)]
        finally:
            zk.close()

    def test_expired_event(self, watched, transport, events):
        transport.expire()
        transport.wait_idle()

        assert events[-1].type == EventType.NONE
        assert events[-1].state == KeeperState.EXPIRED_SESSION


class TestWatches:
    """Tests for data and child watches."""

    def test_data_watch_is_one_shot(self, watched, transport, events):
        watched.create("/a", b"0")
        watched.get("/a", watch=True)

        watched.set("/a", b"1")
        watched.set("/a", b"2")
        transport.wait_idle()

        assert node_events(events) == [(EventType.CHANGED, "/a")]

    def test_exists_watch_on_missing_node(self, watched, transport, events):
        assert watched.exists("/later", watch=True) is None

        watched.create("/later")
        transport.wait_idle()

        assert node_events(events) == [(EventType.CREATED, "/later")]

    def test_child_watch(self, watched, transport, events):
        watched.create("/dir", mode="persistent")
        watched.get_children("/dir", watch=True)

        watched.create("/dir/x")
        transport.wait_idle()

        assert node_events(events) == [(EventType.CHILD, "/dir")]

    def test_delete_fires_data_and_child_watches(self, watched, transport, events):
        watched.create("/dir", mode="persistent")
        watched.create("/dir/x")
        watched.exists("/dir/x", watch=True)
        watched.get_children("/dir", watch=True)

        watched.delete("/dir/x")
        transport.wait_idle()

        assert node_events(events) == [(EventType.DELETED, "/dir/x"), (EventType.CHILD, "/dir")]

    def test_no_watch_without_flag(self, watched, transport, events):
        watched.create("/a")
        watched.get("/a")
        watched.set("/a", b"x")
        transport.wait_idle()

        assert node_events(events) == []

    def test_watch_from_non_blocking_call(self, watched, transport, events):
        watched.create("/a")
        watched.get("/a", watch=True, callback=lambda *args: None)
        transport.wait_idle()

        watched.set("/a", b"x")
        transport.wait_idle()

        assert node_events(events) == [(EventType.CHANGED, "/a")]

    def test_change_by_other_session(self, store, watched, transport, events):
        watched.create("/shared", mode="persistent")
        watched.get("/shared", watch=True)

        other = ZooKeeper(transport=InMemoryTransport(store=store))
        try:
            other.set("/shared", b"from elsewhere")
        finally:
            other.close()
        transport.wait_idle()

        assert node_events(events) == [(EventType.CHANGED, "/shared")]


class TestEventDispatcher:
    """Tests for the default event-dispatching watcher."""

    def test_routes_by_path(self, transport):
        zk = ZooKeeper(transport=transport, watcher="default")
        try:
            changed = []
            zk.watcher.register("/config", changed.append)

            zk.create("/config", b"v1")
            zk.create("/other", b"x")
            zk.get("/config", watch=True)
            zk.get("/other", watch=True)
            zk.set("/config", b"v2")
            zk.set("/other", b"y")
            transport.wait_idle()

            assert [(e.type, e.path) for e in changed] == [(EventType.CHANGED, "/config")]
        finally:
            zk.close()

    def test_state_handlers(self, transport):
        zk = ZooKeeper(transport=transport, watcher="default")
        try:
            expired = []
            zk.watcher.register_state(KeeperState.EXPIRED_SESSION, expired.append)

            transport.expire()
            transport.wait_idle()

            assert len(expired) == 1
        finally:
            zk.close()

    def test_unregister(self):
        dispatcher = EventDispatcher()
        seen = []
        dispatcher.register("/a", seen.append)
        dispatcher.unregister("/a", seen.append)

        dispatcher.process(WatchedEvent(type=EventType.CHANGED, state=KeeperState.CONNECTED, path="/a"))
        assert seen == []

    def test_handler_errors_are_isolated(self):
        dispatcher = EventDispatcher()
        seen = []

        def broken(event):
            raise RuntimeError("bad handler")

        dispatcher.register("/a", broken)
        dispatcher.register("/a", seen.append)
        dispatcher.process(WatchedEvent(type=EventType.CHANGED, state=KeeperState.CONNECTED, path="/a"))

        assert len(seen) == 1
