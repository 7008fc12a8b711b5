"""Tests for account_directory.py - snapshot refresh and ordering."""

import asyncio
from typing import Dict, List

import httpx
import pytest

from accounts import DirectorySnapshot, Identity, RemoteFetchError, TradingAccount
from account_directory import AccountDirectory, order_accounts

from conftest import make_account


class GatedStore:
    """Account store whose responses are released by the test, in any order."""

    def __init__(self):
        self.gates: List[asyncio.Future] = []

    async def list_accounts(self, owner_id: str) -> List[TradingAccount]:
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        return await gate

    async def create_account(self, payload: Dict):
        raise NotImplementedError

    async def delete_account(self, account_id: str) -> None:
        raise NotImplementedError


@pytest.mark.asyncio
async def test_refresh_loads_owner_accounts_newest_first(directory, service, alice):
    service.seed("alice", "111")
    service.seed("alice", "222")
    service.seed("bob", "333")

    snapshot = await directory.refresh(alice)

    assert [a.login for a in snapshot.accounts] == ["222", "111"]
    assert snapshot.owner_id == "alice"
    assert all(a.owner_id == "alice" for a in snapshot)
    assert service.requests[-1].url.params["user_id"] == "alice"


@pytest.mark.asyncio
async def test_refresh_without_identity_clears_and_does_not_call_remote(directory, service, alice):
    service.seed("alice", "111")
    await directory.refresh(alice)
    calls = len(service.requests)

    snapshot = await directory.refresh(None)

    assert snapshot.accounts == ()
    assert len(service.requests) == calls


@pytest.mark.asyncio
async def test_refresh_empty_list_is_valid(directory, alice):
    snapshot = await directory.refresh(alice)
    assert len(snapshot) == 0
    assert snapshot.version == 1


@pytest.mark.asyncio
async def test_failed_refresh_clears_and_surfaces_upstream_message(directory, service, alice):
    service.seed("alice", "111")
    await directory.refresh(alice)
    service.fail_next["GET /accounts"] = httpx.Response(500, json={"error": "database unavailable"})

    with pytest.raises(RemoteFetchError) as exc:
        await directory.refresh(alice)

    assert exc.value.message == "database unavailable"
    assert directory.snapshot.accounts == ()


@pytest.mark.asyncio
async def test_failed_refresh_without_message_uses_generic_text(directory, service, alice):
    service.fail_next["GET /accounts"] = httpx.Response(502, text="Bad Gateway")

    with pytest.raises(RemoteFetchError) as exc:
        await directory.refresh(alice)

    assert exc.value.message == "Failed to load trading accounts"


@pytest.mark.asyncio
async def test_transport_failure_clears_directory(directory, service, alice):
    service.seed("alice", "111")
    await directory.refresh(alice)
    service.offline = True

    with pytest.raises(RemoteFetchError):
        await directory.refresh(alice)
    assert len(directory.snapshot) == 0


@pytest.mark.asyncio
async def test_late_older_refresh_is_discarded(alice):
    store = GatedStore()
    directory = AccountDirectory(store)

    first = asyncio.create_task(directory.refresh(alice))
    await asyncio.sleep(0)
    second = asyncio.create_task(directory.refresh(alice))
    await asyncio.sleep(0)
    assert directory.is_loading

    # T2 completes before T1
    store.gates[1].set_result([make_account("fresh")])
    await second
    store.gates[0].set_result([make_account("stale")])
    await first

    assert directory.snapshot.ids() == ("fresh",)
    assert not directory.is_loading


@pytest.mark.asyncio
async def test_late_older_failure_does_not_clear_newer_snapshot(alice):
    store = GatedStore()
    directory = AccountDirectory(store)

    first = asyncio.create_task(directory.refresh(alice))
    await asyncio.sleep(0)
    second = asyncio.create_task(directory.refresh(alice))
    await asyncio.sleep(0)

    store.gates[1].set_result([make_account("fresh")])
    await second
    store.gates[0].set_exception(httpx.ConnectError("boom"))
    await first

    assert directory.snapshot.ids() == ("fresh",)


@pytest.mark.asyncio
async def test_sign_out_supersedes_refresh_in_flight(alice):
    store = GatedStore()
    directory = AccountDirectory(store)

    pending = asyncio.create_task(directory.refresh(alice))
    await asyncio.sleep(0)
    await directory.refresh(None)
    store.gates[0].set_result([make_account("late")])
    await pending

    assert directory.snapshot.accounts == ()


@pytest.mark.asyncio
async def test_listeners_see_every_commit(directory, service, alice):
    seen: List[DirectorySnapshot] = []
    directory.add_listener(seen.append)
    service.seed("alice", "111")

    await directory.refresh(alice)
    await directory.refresh(None)

    assert [len(s) for s in seen] == [1, 0]
    assert seen[0].version < seen[1].version


def test_order_accounts_drops_foreign_and_duplicate_rows():
    rows = [
        make_account("a", created=1),
        make_account("b", created=3),
        make_account("a", created=2),
        make_account("x", owner="mallory", created=4),
    ]

    ordered = order_accounts(rows, "alice")

    assert [a.id for a in ordered] == ["b", "a"]


def test_snapshot_is_immutable(directory):
    snapshot = directory.snapshot
    with pytest.raises(AttributeError):
        snapshot.accounts = (make_account("z"),)
    assert isinstance(snapshot.accounts, tuple)


@pytest.mark.asyncio
async def test_other_owner_rows_are_never_shown(directory, service):
    service.seed("alice", "111")
    bob = Identity(user_id="bob")

    snapshot = await directory.refresh(bob)

    assert snapshot.accounts == ()
