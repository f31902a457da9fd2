"""Broadcast hub tests — membership and fan-out, no network involved.

Pattern: FakeConnection subscribers record what they were sent, or raise
on every send to simulate a client that has gone away.
"""

import asyncio
import json

import pytest

from receipt.realtime.hub import BroadcastHub
from receipt.schemas.entry import EntryRead


def _entry(text="milk") -> EntryRead:
    return EntryRead(id="4f1c7c1e-0000-4000-8000-000000000001", text=text, created_at=1_700_000_000_000)


@pytest.mark.asyncio
async def test_subscribe_and_unsubscribe(hub, make_connection):
    a, b = make_connection(), make_connection()
    await hub.subscribe(a)
    await hub.subscribe(b)
    assert hub.subscriber_count == 2

    await hub.unsubscribe(a)
    assert hub.subscriber_count == 1


@pytest.mark.asyncio
async def test_unsubscribe_unknown_connection_is_noop(hub, make_connection):
    await hub.unsubscribe(make_connection())
    assert hub.subscriber_count == 0


@pytest.mark.asyncio
async def test_subscribe_same_connection_twice_counts_once(hub, make_connection):
    conn = make_connection()
    await hub.subscribe(conn)
    await hub.subscribe(conn)
    assert hub.subscriber_count == 1


@pytest.mark.asyncio
async def test_broadcast_reaches_every_subscriber(hub, make_connection):
    conns = [make_connection() for _ in range(3)]
    for c in conns:
        await hub.subscribe(c)

    delivered = await hub.broadcast(_entry())

    assert delivered == 3
    for c in conns:
        assert len(c.sent) == 1
        assert json.loads(c.sent[0]) == {
            "id": "4f1c7c1e-0000-4000-8000-000000000001",
            "text": "milk",
            "created_at": 1_700_000_000_000,
        }


@pytest.mark.asyncio
async def test_broadcast_with_no_subscribers(hub):
    assert await hub.broadcast(_entry()) == 0


@pytest.mark.asyncio
async def test_failing_subscriber_is_pruned_others_still_receive(hub, make_connection):
    """One dead connection among three must not block the other two."""
    ok1, dead, ok2 = make_connection(), make_connection(fail=True), make_connection()
    for c in (ok1, dead, ok2):
        await hub.subscribe(c)

    delivered = await hub.broadcast(_entry())

    assert delivered == 2
    assert len(ok1.sent) == 1
    assert len(ok2.sent) == 1
    assert hub.subscriber_count == 2

    # The pruned connection is not tried again
    dead.fail = False
    await hub.broadcast(_entry("eggs"))
    assert dead.sent == []
    assert len(ok1.sent) == 2


@pytest.mark.asyncio
async def test_late_subscriber_gets_no_replay(hub, make_connection):
    early = make_connection()
    await hub.subscribe(early)
    await hub.broadcast(_entry("first"))

    late = make_connection()
    await hub.subscribe(late)
    await hub.broadcast(_entry("second"))

    assert [json.loads(m)["text"] for m in early.sent] == ["first", "second"]
    assert [json.loads(m)["text"] for m in late.sent] == ["second"]


@pytest.mark.asyncio
async def test_concurrent_membership_changes_during_broadcast(make_connection):
    """Subscribing and unsubscribing while broadcasts are in flight stays consistent."""
    hub = BroadcastHub()
    stable = make_connection()
    await hub.subscribe(stable)
    churn = [make_connection() for _ in range(20)]

    async def churner(conn):
        await hub.subscribe(conn)
        await asyncio.sleep(0)
        await hub.unsubscribe(conn)

    await asyncio.gather(
        *(churner(c) for c in churn),
        *(hub.broadcast(_entry(str(i))) for i in range(10)),
    )

    assert hub.subscriber_count == 1
    assert len(stable.sent) == 10


@pytest.mark.asyncio
async def test_close_drops_all_subscribers(hub, make_connection):
    await hub.subscribe(make_connection())
    await hub.subscribe(make_connection())
    await hub.close()
    assert hub.subscriber_count == 0
