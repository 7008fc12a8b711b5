"""
dashboard.py
Derives the dashboard's stat cards from a directory snapshot.

`aggregate` is a pure function: no state, no side effects, same input
gives the same output.
"""

from typing import Iterable, List, Optional, Tuple

from accounts import DashboardStats, Identity, PREMIUM_PLANS, TradingAccount


def aggregate(snapshot: Iterable[TradingAccount]) -> DashboardStats:
    accounts = tuple(snapshot)
    return DashboardStats(
        total_accounts=len(accounts),
        distinct_platforms=len({a.platform for a in accounts}),
        premium_count=sum(1 for a in accounts if a.plan in PREMIUM_PLANS),
    )


def stat_cards(stats: DashboardStats) -> List[Tuple[str, str, str]]:
    """(title, value, description) rows, in display order."""
    return [
        ("Total Accounts", str(stats.total_accounts), "Registered trading accounts"),
        ("Active Platforms", str(stats.distinct_platforms), "Different trading platforms"),
        ("Premium Plans", str(stats.premium_count), "Active premium subscriptions"),
        ("Platform Type", stats.platform_family, "Supported trading platform"),
    ]


def account_status(identity: Optional[Identity]) -> Tuple[str, str]:
    if identity is None:
        return "Not Logged In", "Please sign in to continue"
    return "Authenticated", "Ready to manage accounts"
