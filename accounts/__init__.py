"""
Account Infrastructure Package
==============================

This package provides a clean, asynchronous adapter for the remote
account service that stores a trader's MetaTrader-style accounts, plus
the domain models the rest of the application speaks in.

It is structured using Ports & Adapters principles to keep the
synchronization logic independent of HTTP details.

Package Structure:
------------------
- domain.py:      Pure data classes and enumerations (domain models).
- errors.py:      The error kinds a caller can observe.
- ports.py:       Abstract interfaces (Ports) for the remote collaborators.
- connector.py:   Owns the shared HTTP client and its lifecycle.
- adapters.py:    httpx-backed implementations (Adapters) of the ports.
- utils.py:       Helpers for normalizing input and masking sensitive data.

Public API:
-----------
This __init__.py file acts as a Facade, re-exporting the key public
components, e.g. `from accounts import HttpAccountStore, TradingAccount`.
"""

import logging

# Set up a default null handler to avoid "No handler found" warnings
# if the consuming application doesn't configure logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Export Domain Models
from .domain import (
    BillingPeriod,
    ConnectionStatus,
    DashboardStats,
    DirectorySnapshot,
    Identity,
    Notification,
    Plan,
    Platform,
    PromoRedemption,
    RegistrationInput,
    SubscriptionReceipt,
    TradingAccount,
    DEFAULT_PLAN,
    PREMIUM_PLANS,
)

# Export Errors
from .errors import (
    AccountHubError,
    ConfigError,
    ValidationError,
    RemoteFetchError,
    RemoteWriteError,
    RemoteServiceError,
)

# Export Ports (Interfaces)
from .ports import (
    IAccountStore,
    IBillingService,
    IIdentityProvider,
    INotifier,
)

# Export Connection Manager
from .connector import AccountServiceConnector

# Export Adapters (Concrete Implementations)
from .adapters import (
    HEALTH_PATH,
    HttpAccountStore,
    HttpBillingService,
    account_from_record,
)

# Export Utilities
from .utils import (
    derive_nickname,
    mask_login,
    normalize_endpoint,
    truncate_secret,
)


__all__ = [
    # Domain
    "BillingPeriod",
    "ConnectionStatus",
    "DashboardStats",
    "DirectorySnapshot",
    "Identity",
    "Notification",
    "Plan",
    "Platform",
    "PromoRedemption",
    "RegistrationInput",
    "SubscriptionReceipt",
    "TradingAccount",
    "DEFAULT_PLAN",
    "PREMIUM_PLANS",

    # Errors
    "AccountHubError",
    "ConfigError",
    "ValidationError",
    "RemoteFetchError",
    "RemoteWriteError",
    "RemoteServiceError",

    # Ports
    "IAccountStore",
    "IBillingService",
    "IIdentityProvider",
    "INotifier",

    # Infrastructure
    "AccountServiceConnector",
    "HEALTH_PATH",
    "HttpAccountStore",
    "HttpBillingService",
    "account_from_record",

    # Utilities
    "derive_nickname",
    "mask_login",
    "normalize_endpoint",
    "truncate_secret",
]
