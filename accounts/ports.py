"""
Account Application Ports (Interfaces)
--------------------------------------

The abstract interfaces (Ports) the flows and the session talk to.
The flows only depend on these protocols, never on the HTTP adapters,
so tests can hand them an in-memory fake.
"""

from typing import Any, Dict, List, Optional, Protocol

from .domain import (
    BillingPeriod,
    Identity,
    Notification,
    PromoRedemption,
    SubscriptionReceipt,
    TradingAccount,
)


# --- Account Store Port ---

class IAccountStore(Protocol):
    """Interface for the remote account store."""

    async def list_accounts(self, owner_id: str) -> List[TradingAccount]:
        """Fetches every account belonging to `owner_id`."""
        ...

    async def create_account(self, payload: Dict[str, Any]) -> Optional[TradingAccount]:
        """
        Submits a new account. Returns the created record when the
        service echoes one, None for a bare acknowledgement.
        """
        ...

    async def delete_account(self, account_id: str) -> None:
        """Removes one account by id."""
        ...


# --- Billing Port ---

class IBillingService(Protocol):
    """Interface for the subscription and promo-code endpoints."""

    async def subscribe(self, user_id: str, period: BillingPeriod) -> SubscriptionReceipt:
        ...

    async def redeem(self, user_id: str, code: str) -> PromoRedemption:
        ...


# --- Collaborator Ports ---

class IIdentityProvider(Protocol):
    """Opaque "current user" capability supplied by the auth provider."""

    def current_identity(self) -> Optional[Identity]:
        ...


class INotifier(Protocol):
    """Receives one user-facing notification per completed operation."""

    def notify(self, notification: Notification) -> None:
        ...
