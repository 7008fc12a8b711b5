"""
Account Domain Models
---------------------

This file defines the pure data classes (dataclasses) and enumerations
that represent the core concepts of the account dashboard.

These models know nothing about HTTP or the remote service's wire format.
They are the "nouns" of the system. Everything a reader is handed is
frozen, so a snapshot can be shared without anyone mutating it underneath.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class ConnectionStatus(str, Enum):
    """Tri-state health signal of the remote account service."""
    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"


class Plan(str, Enum):
    """Subscription tier attached to a trading account."""
    BASIC = "Basic"
    PREMIUM = "Premium"
    PRO = "Pro"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["Plan"]:
        """Exact, case-sensitive lookup. Returns None for unrecognized values."""
        for member in cls:
            if member.value == raw:
                return member
        return None


DEFAULT_PLAN = Plan.BASIC
PREMIUM_PLANS = frozenset({Plan.PREMIUM.value, Plan.PRO.value})


class Platform(str, Enum):
    """
    Trading platforms and brokers offered by the registration form.
    OTHER is the explicit escape hatch; it must come with a custom name.
    """
    METATRADER_4 = "MetaTrader 4"
    METATRADER_5 = "MetaTrader 5"
    CTRADER = "cTrader"
    XM_GLOBAL = "XM Global"
    FXCM = "FXCM"
    IG_MARKETS = "IG Markets"
    PLUS500 = "Plus500"
    ETORO = "eToro"
    INTERACTIVE_BROKERS = "Interactive Brokers"
    TD_AMERITRADE = "TD Ameritrade"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["Platform"]:
        for member in cls:
            if member.value == raw:
                return member
        return None


class BillingPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Identity:
    """The authenticated owner, as handed to us by the auth provider."""
    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class TradingAccount:
    """
    A registered external trading-platform account, as stored remotely.
    The full secret is never held here; only a truncated prefix when the
    service echoes one back.
    """
    id: str
    owner_id: str
    platform: str
    login: str
    server: str
    plan: str
    nickname: Optional[str]
    created_at: Optional[datetime]
    secret_hint: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.nickname or f"{self.platform} Account"

    @property
    def short_server(self) -> str:
        """Server string abbreviated the way an account card shows it."""
        if len(self.server) > 15:
            return f"{self.server[:15]}..."
        return self.server

    @property
    def is_premium(self) -> bool:
        return self.plan in PREMIUM_PLANS


@dataclass(frozen=True)
class RegistrationInput:
    """
    Raw form input for a new account. Values are kept as typed by the
    user; validation and trimming happen in the registration flow.
    """
    login: str
    platform: str
    server: str
    secret: str
    plan: Optional[str] = None
    nickname: Optional[str] = None
    custom_platform: Optional[str] = None


@dataclass(frozen=True)
class DirectorySnapshot:
    """
    Immutable, versioned view of the account directory.
    `version` increases by one on every commit.
    """
    version: int = 0
    owner_id: Optional[str] = None
    accounts: Tuple[TradingAccount, ...] = ()

    def __len__(self) -> int:
        return len(self.accounts)

    def __iter__(self):
        return iter(self.accounts)

    def ids(self) -> Tuple[str, ...]:
        return tuple(a.id for a in self.accounts)


@dataclass(frozen=True)
class DashboardStats:
    """Figures shown in the dashboard's stat cards."""
    total_accounts: int
    distinct_platforms: int
    premium_count: int
    platform_family: str = "MetaTrader"


@dataclass(frozen=True)
class SubscriptionReceipt:
    user_id: str
    period: BillingPeriod
    active_until: Optional[str]


@dataclass(frozen=True)
class PromoRedemption:
    user_id: str
    code: str
    discount_percent: Optional[float]
    days: Optional[int]


@dataclass(frozen=True)
class Notification:
    """A user-facing toast: one per completed operation."""
    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"

