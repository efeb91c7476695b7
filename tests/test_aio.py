"""Tests for the asyncio bridge."""

import asyncio

import pytest

from zkclient import (
    READ_ACL_UNSAFE,
    AsyncZooKeeper,
    BadVersionError,
    InvalidArgumentError,
    NoAuthError,
    NoNodeError,
    SessionExpiredError,
    ZooKeeper,
    make_digest_acl,
)


@pytest.fixture
def azk(zk):
    return AsyncZooKeeper(zk)


class TestAsyncZooKeeper:
    """Tests for awaitable operations."""

    @pytest.mark.asyncio
    async def test_create_get_set_delete(self, azk):
        path = await azk.create("/app", b"v1", mode="persistent")
        assert path == "/app"

        data, stat = await azk.get(path)
        assert data == b"v1"
        assert stat.version == 0

        stat = await azk.set(path, b"v2", version=0)
        assert stat.version == 1

        assert await azk.delete(path) is None
        assert await azk.exists(path) is None

    @pytest.mark.asyncio
    async def test_children_and_acls(self, azk):
        await azk.create("/dir", mode="persistent")
        await azk.create("/dir/a")
        await azk.create("/dir/b", acl=READ_ACL_UNSAFE)

        assert await azk.get_children("/dir") == ["a", "b"]

        acls, stat = await azk.get_acls("/dir/b")
        assert acls == READ_ACL_UNSAFE

        stat = await azk.set_acls("/dir/a", acl=READ_ACL_UNSAFE)
        assert stat.aversion == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls(self, azk):
        await azk.create("/dir", mode="persistent")
        paths = await asyncio.gather(*(azk.create(f"/dir/n{i}") for i in range(5)))

        assert paths == [f"/dir/n{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_failure_raises_named_error(self, azk):
        with pytest.raises(NoNodeError) as info:
            await azk.get("/missing")

        assert info.value.path == "/missing"
        assert info.value.call_site.function == "test_failure_raises_named_error"

    @pytest.mark.asyncio
    async def test_bad_version(self, azk):
        await azk.create("/a")
        with pytest.raises(BadVersionError):
            await azk.set("/a", b"x", version=4)

    @pytest.mark.asyncio
    async def test_failure_without_code_raises_original(self, azk, transport, monkeypatch):
        """Awaiting raises the same exception a blocking call would."""
        cause = RuntimeError("disk full")

        def fail(session, path, watch):
            raise cause

        monkeypatch.setattr(transport.store, "get_data", fail)
        with pytest.raises(RuntimeError) as info:
            await azk.get("/a")
        assert info.value is cause

        with pytest.raises(RuntimeError) as info:
            azk.client.get("/a")
        assert info.value is cause

    @pytest.mark.asyncio
    async def test_callback_is_rejected(self, azk):
        with pytest.raises(InvalidArgumentError):
            await azk.get("/", callback=print)
        with pytest.raises(InvalidArgumentError):
            await azk.exists("/", {"context": 1})

    @pytest.mark.asyncio
    async def test_closed_session(self, zk, azk):
        zk.close()
        with pytest.raises(SessionExpiredError):
            await azk.exists("/")

    @pytest.mark.asyncio
    async def test_add_auth(self, azk):
        await azk.create("/secret", b"s", acl=[make_digest_acl("alice", "pw", all=True)])
        with pytest.raises(NoAuthError):
            await azk.get("/secret")

        await azk.add_auth("alice:pw")
        data, _ = await azk.get("/secret")
        assert data == b"s"

    @pytest.mark.asyncio
    async def test_context_manager(self, transport):
        async with AsyncZooKeeper(ZooKeeper(transport=transport)) as azk:
            await azk.create("/a")
        assert azk.client.closed
