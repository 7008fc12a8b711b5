"""Pytest configuration and fixtures."""

import itertools
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import pytest

from accounts import AccountServiceConnector, HttpAccountStore, HttpBillingService, Identity, TradingAccount
from account_directory import AccountDirectory
from config import Config
from session import LoggingNotifier, build_session

BASE_URL = "http://127.0.0.1:5000"


def make_account(account_id: str, owner: str = "alice", created: int = 1, platform: str = "MetaTrader 5",
                 plan: str = "Basic") -> TradingAccount:
    return TradingAccount(
        id=account_id,
        owner_id=owner,
        platform=platform,
        login="12345",
        server="mt5.broker.com",
        plan=plan,
        nickname=None,
        created_at=datetime(2024, 1, created, tzinfo=timezone.utc),
    )


class FakeAccountService:
    """
    In-process stand-in for the Flask account service.
    Stores records the way the real service does: it assigns `id` and
    `created_at` and echoes the created record back.
    """

    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.health_status = 200
        self.health_body: Optional[Dict[str, Any]] = {"platform": "MetaTrader 5"}
        self.fail_next: Dict[str, httpx.Response] = {}
        self.offline = False
        self.timeout = False
        self.echo_records = True
        self.promo_codes = {"WELCOME10": {"discount_percent": 10, "days": 30}}
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def seed(self, owner: str, login: str, platform: str = "MetaTrader 5", plan: str = "Basic",
             nickname: Optional[str] = None, server: str = "mt5.broker.com") -> Dict[str, Any]:
        return self._create({
            "user_id": owner, "login": login, "trading_platform": platform,
            "server": server, "plan": plan, "nickname": nickname,
        })

    def _create(self, body: Dict[str, Any]) -> Dict[str, Any]:
        account_id = f"acc-{next(self._ids)}"
        self._clock += timedelta(minutes=1)
        record = {
            "id": account_id,
            "user_id": body.get("user_id"),
            "trading_platform": body.get("trading_platform"),
            "login": body.get("login"),
            "server": body.get("server"),
            "plan": body.get("plan") or "Basic",
            "nickname": body.get("nickname"),
            "created_at": self._clock.isoformat().replace("+00:00", "Z"),
        }
        self.accounts[account_id] = record
        return record

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("Connection refused", request=request)
        if self.timeout:
            raise httpx.ReadTimeout("timed out", request=request)

        key = f"{request.method} {request.url.path}"
        if key in self.fail_next:
            return self.fail_next.pop(key)

        path = request.url.path
        if request.method == "GET" and path == "/health":
            if self.health_body is None:
                return httpx.Response(self.health_status)
            return httpx.Response(self.health_status, json=self.health_body)

        if request.method == "GET" and path == "/accounts":
            owner = request.url.params.get("user_id")
            rows = [r for r in self.accounts.values() if r["user_id"] == owner]
            return httpx.Response(200, json={"accounts": rows})

        if request.method == "POST" and path == "/register":
            body = json.loads(request.content)
            if not body.get("user_id") or not body.get("login"):
                return httpx.Response(400, json={"error": "Missing required fields"})
            record = self._create(body)
            return httpx.Response(201, json=record if self.echo_records else {})

        if request.method == "DELETE" and path.startswith("/accounts/"):
            account_id = path.rsplit("/", 1)[-1]
            if account_id not in self.accounts:
                return httpx.Response(404, json={"error": "Account not found"})
            del self.accounts[account_id]
            return httpx.Response(204)

        if request.method == "POST" and path == "/subscribe":
            body = json.loads(request.content)
            return httpx.Response(200, json={"active_until": "2024-02-01", "plan": body["plan"]})

        if request.method == "POST" and path == "/redeem":
            body = json.loads(request.content)
            promo = self.promo_codes.get(body.get("code"))
            if promo is None:
                return httpx.Response(400, json={"error": "Invalid promo code"})
            return httpx.Response(200, json=promo)

        return httpx.Response(404, json={"error": f"No route for {key}"})


@pytest.fixture
def service():
    return FakeAccountService()


@pytest.fixture
async def connector(service):
    conn = AccountServiceConnector(timeout=1.0, transport=service.transport())
    yield conn
    await conn.close()


@pytest.fixture
def store(connector):
    return HttpAccountStore(connector, lambda: BASE_URL)


@pytest.fixture
def billing_service(connector):
    return HttpBillingService(connector, lambda: BASE_URL)


@pytest.fixture
def directory(store):
    return AccountDirectory(store)


@pytest.fixture
def alice():
    return Identity(user_id="alice", email="alice@example.com")


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
async def session(service, notifier):
    cfg = Config(api_base_url=BASE_URL, request_timeout_seconds=1.0,
                 user_id="alice", email=None, log_level="INFO")
    s = build_session(cfg, notifier=notifier, transport=service.transport())
    yield s
    await s.close()
