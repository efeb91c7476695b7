"""zkclient examples.

Run: python examples/simple.py            (in-process store)
     ZK_HOSTS=127.0.0.1:2181 python examples/simple.py
"""

import asyncio
import os
import threading

from zkclient import (
    AsyncZooKeeper,
    BadVersionError,
    Code,
    ZooKeeper,
    configure_logging,
    make_digest_acl,
)

HOSTS = os.environ.get("ZK_HOSTS", "")


def connect(**kwargs) -> ZooKeeper:
    if HOSTS:
        return ZooKeeper(HOSTS, **kwargs)
    return ZooKeeper(transport="memory", **kwargs)


def blocking_calls():
    """Example 1: Blocking calls."""
    print("\n" + "=" * 50)
    print("EXAMPLE 1: BLOCKING CALLS")
    print("=" * 50)

    with connect() as zk:
        zk.create("/config", b"v1", mode="persistent")
        data, stat = zk.get("/config")
        print(f"Read {data!r} at version {stat.version}")

        zk.set("/config", b"v2", version=stat.version)
        try:
            zk.set("/config", b"v3", version=stat.version)
        except BadVersionError as e:
            print(f"Stale write rejected: {e}")

        zk.delete("/config")


def work_queue():
    """Example 2: Sequential nodes as a work queue."""
    print("\n" + "=" * 50)
    print("EXAMPLE 2: WORK QUEUE")
    print("=" * 50)

    with connect() as zk:
        zk.create("/queue", mode="persistent")
        for job in ("resize", "thumbnail", "publish"):
            path = zk.create("/queue/job-", job, mode="persistent_sequential")
            print(f"Queued {job} as {path}")

        for name in sorted(zk.get_children("/queue")):
            data, _ = zk.get(f"/queue/{name}")
            print(f"Processing {data.decode()}")
            zk.delete(f"/queue/{name}")
        zk.delete("/queue")


def completion_handlers():
    """Example 3: Non-blocking calls with completion handlers."""
    print("\n" + "=" * 50)
    print("EXAMPLE 3: COMPLETION HANDLERS")
    print("=" * 50)

    done = threading.Event()

    def on_exists(code, path, context, stat):
        if code == Code.OK:
            print(f"[{context}] {path} exists: {stat is not None}")
        else:
            print(f"[{context}] {path} failed with code {code}")
        done.set()

    with connect() as zk:
        zk.exists("/", callback=on_exists, context="root-check")
        done.wait(timeout=5)


def protected_node():
    """Example 4: Digest ACLs."""
    print("\n" + "=" * 50)
    print("EXAMPLE 4: DIGEST ACL")
    print("=" * 50)

    with connect() as zk:
        zk.add_auth("admin:secret")
        zk.create("/vault", b"keys", acl=[make_digest_acl("admin", "secret", all=True)])
        data, _ = zk.get("/vault")
        print(f"Authorized read: {data!r}")


async def awaitable_calls():
    """Example 5: asyncio."""
    print("\n" + "=" * 50)
    print("EXAMPLE 5: ASYNCIO")
    print("=" * 50)

    async with AsyncZooKeeper(connect(watcher="default")) as zk:
        paths = await asyncio.gather(*(zk.create(f"/worker-{i}", b"up") for i in range(3)))
        print(f"Registered {paths}")
        print(f"Live workers: {sorted(await zk.get_children('/'))}")


if __name__ == "__main__":
    configure_logging("WARNING")
    blocking_calls()
    work_queue()
    completion_handlers()
    protected_node()
    asyncio.run(awaitable_calls())
