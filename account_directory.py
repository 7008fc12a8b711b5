"""
account_directory.py
Keeps the local list of trading accounts in line with the remote
account store, which is the ground truth.

Every refresh replaces the whole snapshot. Refreshes are numbered in the
order they are started, and only the most recently started one may
commit; a slow, older response is dropped when it finally arrives.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol, Sequence

import httpx

from accounts import (
    DirectorySnapshot,
    IAccountStore,
    Identity,
    RemoteFetchError,
    RemoteServiceError,
    TradingAccount,
)

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[DirectorySnapshot], None]

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class IAccountDirectory(Protocol):
    """Interface for the account directory."""

    @property
    def snapshot(self) -> DirectorySnapshot:
        """The committed, immutable snapshot."""
        ...

    async def refresh(self, identity: Optional[Identity]) -> DirectorySnapshot:
        """
        Re-reads the accounts of `identity` from the remote store and
        replaces the local snapshot with the result.

        Raises:
            RemoteFetchError: the read failed; the directory is now empty.
        """
        ...


def order_accounts(accounts: Sequence[TradingAccount], owner_id: str) -> List[TradingAccount]:
    """
    Drops rows of other owners and repeated ids, then sorts newest first.
    Rows without a timestamp go last.
    """
    seen = set()
    kept = []
    for account in accounts:
        if account.owner_id and account.owner_id != owner_id:
            logger.warning(f"Dropping account {account.id}: belongs to another owner")
            continue
        if account.id in seen:
            logger.warning(f"Dropping duplicate account id {account.id}")
            continue
        seen.add(account.id)
        kept.append(account)

    kept.sort(key=lambda a: a.created_at or _EPOCH, reverse=True)
    return kept


class AccountDirectory(IAccountDirectory):
    """Implementation of the account directory."""

    def __init__(self, store: IAccountStore):
        self._store = store
        self._snapshot = DirectorySnapshot()
        self._issued = 0            # last refresh token handed out
        self._pending = 0           # token of the refresh still in flight, 0 if none
        self._listeners: List[SnapshotListener] = []
        logger.info("AccountDirectory initialized.")

    @property
    def snapshot(self) -> DirectorySnapshot:
        return self._snapshot

    @property
    def is_loading(self) -> bool:
        """True while the most recently started refresh has not finished."""
        return self._pending == self._issued and self._issued > 0

    def add_listener(self, listener: SnapshotListener) -> None:
        """Registers a callback run synchronously after every commit."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self) -> DirectorySnapshot:
        """Empties the directory and supersedes any refresh in flight."""
        self._issued += 1
        self._commit(None, [])
        return self._snapshot

    async def refresh(self, identity: Optional[Identity]) -> DirectorySnapshot:
        self._issued += 1
        token = self._issued

        if identity is None:
            logger.info("No authenticated user. Clearing account directory.")
            self._commit(None, [])
            return self._snapshot

        self._pending = token
        logger.info(f"Refreshing accounts for {identity.user_id} (request #{token})...")

        try:
            fetched = await self._store.list_accounts(identity.user_id)
        except RemoteServiceError as e:
            self._fail(token, e.message, e)
            return self._snapshot
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error(f"Error loading accounts: {e}")
            self._fail(token, "Failed to load trading accounts", e)
            return self._snapshot

        if token != self._issued:
            logger.warning(f"Discarding stale refresh #{token}; #{self._issued} is newer.")
            return self._snapshot

        self._pending = 0
        self._commit(identity.user_id, order_accounts(fetched, identity.user_id))
        logger.info(f"Account directory refreshed. {len(self._snapshot)} account(s).")
        return self._snapshot

    def _fail(self, token: int, message: str, cause: Exception) -> None:
        """
        Clears the directory and raises, unless a newer refresh has started,
        in which case the failure is dropped like any stale result.
        """
        if token != self._issued:
            logger.warning(f"Discarding failed stale refresh #{token}: {message}")
            return
        self._pending = 0
        self._commit(None, [])
        logger.error(f"Failed to refresh accounts: {message}")
        raise RemoteFetchError(message) from cause

    def _commit(self, owner_id: Optional[str], accounts: Sequence[TradingAccount]) -> None:
        self._snapshot = DirectorySnapshot(
            version=self._snapshot.version + 1,
            owner_id=owner_id,
            accounts=tuple(accounts),
        )
        for listener in list(self._listeners):
            listener(self._snapshot)
