"""
Account Service Adapters
------------------------

This file contains the concrete implementations (Adapters) of the
ports defined in `ports.py`.

These classes depend directly on `httpx` and the `AccountServiceConnector`.
They translate the application's requests (e.g., `list_accounts`) into
calls against the remote service and map its JSON back to the domain
models. Non-2xx responses become `RemoteServiceError`; transport errors
propagate untouched. Converting those into user-facing errors is the
flows' job, not ours.
"""

import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx

from .connector import AccountServiceConnector
from .domain import (
    DEFAULT_PLAN,
    BillingPeriod,
    PromoRedemption,
    SubscriptionReceipt,
    TradingAccount,
)
from .errors import RemoteServiceError
from .ports import IAccountStore, IBillingService
from .utils import extract_error_message, parse_timestamp, truncate_secret

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"
ACCOUNTS_PATH = "/accounts"
REGISTER_PATH = "/register"
SUBSCRIBE_PATH = "/subscribe"
REDEEM_PATH = "/redeem"


def _first(record: Dict[str, Any], *keys: str) -> Any:
    """Returns the first present, non-null value among several wire aliases."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def account_from_record(record: Dict[str, Any]) -> TradingAccount:
    """
    Maps one wire record to a TradingAccount.
    Accepts both the `login/trading_platform` and the
    `account_number/broker` spellings of the same fields.
    """
    account_id = _first(record, "id")
    if account_id is None:
        raise ValueError("Account record has no id")

    nickname = _first(record, "nickname")
    return TradingAccount(
        id=str(account_id),
        owner_id=str(_first(record, "user_id", "owner_id") or ""),
        platform=str(_first(record, "trading_platform", "platform", "broker") or ""),
        login=str(_first(record, "login", "account_number") or ""),
        server=str(_first(record, "server", "endpoint") or ""),
        plan=str(_first(record, "plan") or DEFAULT_PLAN.value),
        nickname=str(nickname) if nickname else None,
        created_at=parse_timestamp(_first(record, "created_at", "createdAt")),
        secret_hint=truncate_secret(_first(record, "password", "secret")),
    )


def _raise_for_status(response: httpx.Response, fallback: str) -> None:
    if response.is_success:
        return
    message = extract_error_message(response, fallback)
    raise RemoteServiceError(response.status_code, message)


def _json_body(response: httpx.Response) -> Any:
    """Empty bodies count as an empty object (a bare ack)."""
    if not response.content:
        return {}
    return response.json()


# --- Account Store Adapter ---

class HttpAccountStore(IAccountStore):
    """
    Concrete implementation backed by the service's `/accounts` and
    `/register` endpoints.
    """

    def __init__(self, connector: AccountServiceConnector, endpoint: Callable[[], str]):
        self._connector = connector
        self._endpoint = endpoint

    async def list_accounts(self, owner_id: str) -> List[TradingAccount]:
        response = await self._connector.request("GET", self._endpoint(), ACCOUNTS_PATH, params={"user_id": owner_id})
        _raise_for_status(response, "Failed to load trading accounts")

        data = _json_body(response)
        if isinstance(data, dict):
            rows = data.get("accounts", [])
        elif isinstance(data, list):
            rows = data
        else:
            raise ValueError(f"Unexpected accounts payload: {type(data).__name__}")
        if not isinstance(rows, list):
            raise ValueError("`accounts` is not a list")

        accounts = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning(f"Skipping non-object account row: {row!r}")
                continue
            try:
                accounts.append(account_from_record(row))
            except ValueError as e:
                logger.warning(f"Skipping malformed account row: {e}")
        return accounts

    async def create_account(self, payload: Dict[str, Any]) -> Optional[TradingAccount]:
        response = await self._connector.request("POST", self._endpoint(), REGISTER_PATH, json=payload)
        _raise_for_status(response, "Registration failed")

        data = _json_body(response)
        record = data.get("account", data) if isinstance(data, dict) else None
        if not isinstance(record, dict) or record.get("id") is None:
            logger.info("Registration acknowledged without a record.")
            return None
        return account_from_record(record)

    async def delete_account(self, account_id: str) -> None:
        response = await self._connector.request("DELETE", self._endpoint(), f"{ACCOUNTS_PATH}/{quote(account_id, safe='')}")
        _raise_for_status(response, "Failed to delete trading account")


# --- Billing Adapter ---

class HttpBillingService(IBillingService):
    """Concrete implementation of the `/subscribe` and `/redeem` endpoints."""

    def __init__(self, connector: AccountServiceConnector, endpoint: Callable[[], str]):
        self._connector = connector
        self._endpoint = endpoint

    async def subscribe(self, user_id: str, period: BillingPeriod) -> SubscriptionReceipt:
        response = await self._connector.request(
            "POST", self._endpoint(), SUBSCRIBE_PATH, json={"user_id": user_id, "plan": period.value}
        )
        _raise_for_status(response, "Subscription failed")
        data = _json_body(response)
        return SubscriptionReceipt(
            user_id=user_id,
            period=period,
            active_until=data.get("active_until") if isinstance(data, dict) else None,
        )

    async def redeem(self, user_id: str, code: str) -> PromoRedemption:
        response = await self._connector.request(
            "POST", self._endpoint(), REDEEM_PATH, json={"user_id": user_id, "code": code}
        )
        _raise_for_status(response, "Invalid promo code")
        data = _json_body(response)
        if not isinstance(data, dict):
            data = {}
        days = data.get("days")
        discount = data.get("discount_percent")
        try:
            discount = float(discount) if discount is not None else None
            days = int(days) if days is not None else None
        except (TypeError, ValueError) as e:
            raise ValueError(f"Unexpected redeem payload: {e}") from e
        return PromoRedemption(user_id=user_id, code=code, discount_percent=discount, days=days)
