"""
session.py
Wires the account components together for one signed-in (or signed-out)
user and turns every outcome into a user-facing notification.

This is the seam a UI talks to: its methods never raise for remote or
validation failures, they report them through the notifier and return
a falsy result instead.
"""

import logging
from typing import Callable, List, Optional

import httpx

from accounts import (
    AccountServiceConnector,
    BillingPeriod,
    ConfigError,
    ConnectionStatus,
    DashboardStats,
    DirectorySnapshot,
    HttpAccountStore,
    HttpBillingService,
    Identity,
    IIdentityProvider,
    INotifier,
    Notification,
    PromoRedemption,
    RegistrationInput,
    RemoteFetchError,
    RemoteWriteError,
    SubscriptionReceipt,
    ValidationError,
)
from account_directory import AccountDirectory
from account_flows import Confirmation, DeletionFlow, RegistrationFlow
from billing import BillingFlow
from config import Config
from connectivity import ConnectivityProber
from dashboard import aggregate
from endpoint_config import EndpointConfigStore

logger = logging.getLogger(__name__)

DESTRUCTIVE = "destructive"


class LoggingNotifier(INotifier):
    """Default notifier: logs every notification and keeps the history."""

    def __init__(self):
        self.history: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.history.append(notification)
        level = logging.ERROR if notification.is_error else logging.INFO
        logger.log(level, f"[{notification.title}] {notification.description}")

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None


class ConfigIdentityProvider(IIdentityProvider):
    """Reads the current user from configuration (TRADER_USER_ID / TRADER_EMAIL)."""

    def __init__(self, cfg: Config):
        self._cfg = cfg

    def current_identity(self) -> Optional[Identity]:
        if not self._cfg.user_id:
            return None
        return Identity(user_id=self._cfg.user_id, email=self._cfg.email)


class AccountSession:
    """
    Owns the endpoint store, prober, directory and flows for the current
    identity. The directory is refreshed on identity change, on request,
    and after every successful registration or deletion.
    """

    def __init__(self,
                 connector: AccountServiceConnector,
                 endpoint_store: EndpointConfigStore,
                 prober: ConnectivityProber,
                 directory: AccountDirectory,
                 registration: RegistrationFlow,
                 deletion: DeletionFlow,
                 billing: BillingFlow,
                 notifier: INotifier,
                 identity: Optional[Identity] = None):
        self._connector = connector
        self.endpoint_store = endpoint_store
        self.prober = prober
        self.directory = directory
        self._registration = registration
        self._deletion = deletion
        self._billing = billing
        self._notifier = notifier
        self._identity = identity

    # ------------------------------------------------------------------ state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def snapshot(self) -> DirectorySnapshot:
        return self.directory.snapshot

    @property
    def stats(self) -> DashboardStats:
        return aggregate(self.directory.snapshot)

    @property
    def connection_status(self) -> ConnectionStatus:
        return self.prober.status

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self._notifier.notify(Notification(title=title, description=description, variant=variant))

    # ------------------------------------------------------------- identity

    async def set_identity(self, identity: Optional[Identity]) -> DirectorySnapshot:
        """Switches the current user and reloads their accounts."""
        changed = identity != self._identity
        self._identity = identity
        if changed:
            logger.info(f"Identity changed to {identity.user_id if identity else 'signed out'}")
        await self.refresh()
        return self.directory.snapshot

    # ----------------------------------------------------------- endpoint

    async def check_connection(self, url: Optional[str] = None) -> ConnectionStatus:
        target = url if url is not None else self.endpoint_store.get_endpoint()
        status = await self.prober.probe(target)
        if status is ConnectionStatus.ONLINE:
            self._notify("Connection Successful",
                         f"Connected to {self.prober.platform_label or 'trading'} server")
        else:
            self._notify("Connection Failed", self.prober.last_error or "Could not connect to server", DESTRUCTIVE)
        return status

    async def save_endpoint(self, url: str) -> bool:
        try:
            status = await self.endpoint_store.set_endpoint(url)
        except ConfigError as e:
            self._notify("Error", e.message, DESTRUCTIVE)
            return False

        if status is not ConnectionStatus.ONLINE:
            self._notify("Connection Failed", self.prober.last_error or "Could not connect to server", DESTRUCTIVE)
            return False
        self._notify("Configuration Saved", "API configuration updated successfully")
        return True

    # ----------------------------------------------------------- accounts

    async def refresh(self) -> bool:
        try:
            await self.directory.refresh(self._identity)
        except RemoteFetchError as e:
            self._notify("Error", e.message, DESTRUCTIVE)
            return False
        return True

    async def register_account(self, form: RegistrationInput) -> bool:
        try:
            await self._registration.register(form, self._identity)
        except ValidationError as e:
            self._notify("Error", e.message, DESTRUCTIVE)
            return False
        except RemoteWriteError as e:
            self._notify("Registration Failed", e.message, DESTRUCTIVE)
            return False

        self._notify("Account Registered", "Account registered successfully")
        await self.refresh()
        return True

    async def delete_account(self, account_id: str, confirm: Confirmation) -> bool:
        try:
            deleted = await self._deletion.delete_account(account_id, self._identity, confirm)
        except (ValidationError, RemoteWriteError) as e:
            self._notify("Deletion Failed", e.message, DESTRUCTIVE)
            return False
        except RemoteFetchError as e:
            # The delete itself went through; only the re-read failed.
            self._notify("Account Deleted", "Trading account has been successfully deleted")
            self._notify("Error", e.message, DESTRUCTIVE)
            return True

        if deleted:
            self._notify("Account Deleted", "Trading account has been successfully deleted")
        return deleted

    # ------------------------------------------------------------- billing

    def _billing_user(self) -> str:
        return self._identity.user_id if self._identity else ""

    async def subscribe(self, period: BillingPeriod) -> Optional[SubscriptionReceipt]:
        try:
            receipt = await self._billing.subscribe(self._billing_user(), period)
        except (ValidationError, RemoteWriteError) as e:
            self._notify("Subscription Failed", e.message, DESTRUCTIVE)
            return None
        self._notify("Subscription Successful!", f"Your {period.value} plan is active until {receipt.active_until}")
        return receipt

    async def redeem(self, code: str) -> Optional[PromoRedemption]:
        try:
            redemption = await self._billing.redeem(self._billing_user(), code)
        except (ValidationError, RemoteWriteError) as e:
            self._notify("Redemption Failed", e.message, DESTRUCTIVE)
            return None
        self._notify("Promo Code Redeemed!",
                     f"You received {redemption.discount_percent}% discount for {redemption.days} days")
        return redemption

    async def close(self) -> None:
        await self._connector.close()


def build_session(cfg: Config,
                  notifier: Optional[INotifier] = None,
                  transport: Optional[httpx.AsyncBaseTransport] = None,
                  on_snapshot: Optional[Callable[[DirectorySnapshot], None]] = None,
                  identity_provider: Optional[IIdentityProvider] = None) -> AccountSession:
    """
    Initializes all services and wires them together (Dependency Injection).
    `transport` lets tests swap the network for an in-process fake.
    """
    logger.info("Setting up account session...")

    connector = AccountServiceConnector(
        timeout=cfg.request_timeout_seconds,
        transport=transport,
    )
    prober = ConnectivityProber(connector)
    endpoint_store = EndpointConfigStore(prober, default_url=cfg.api_base_url)
    endpoint = endpoint_store.get_endpoint

    store = HttpAccountStore(connector, endpoint)
    directory = AccountDirectory(store)
    if on_snapshot is not None:
        directory.add_listener(on_snapshot)

    identity = (identity_provider or ConfigIdentityProvider(cfg)).current_identity()

    session = AccountSession(
        connector=connector,
        endpoint_store=endpoint_store,
        prober=prober,
        directory=directory,
        registration=RegistrationFlow(store),
        deletion=DeletionFlow(store, directory),
        billing=BillingFlow(HttpBillingService(connector, endpoint)),
        notifier=notifier or LoggingNotifier(),
        identity=identity,
    )
    logger.info("Account session initialized successfully.")
    return session
