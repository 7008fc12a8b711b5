"""
main_orchestrator.py
The main entry point for the trading account dashboard client.

This module is responsible for:
1. Loading configuration.
2. Setting up the account session (Dependency Injection).
3. Running one command against the remote account service.
4. Handling graceful shutdown.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from accounts import BillingPeriod, ConfigError, ConnectionStatus, Plan, Platform, RegistrationInput, mask_login
from config import ENDPOINT_PRESETS, load_config
from dashboard import account_status, stat_cards
from session import AccountSession, build_session

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage registered trading accounts.")
    parser.add_argument("--api-url", help="Override ACCOUNT_API_URL for this run")
    parser.add_argument("--user", help="Override TRADER_USER_ID for this run")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("health", help="Check the account service")
    endpoint = sub.add_parser("set-endpoint", help="Verify and switch to a new service URL")
    endpoint.add_argument("url", nargs="?", help="Leave out to list the presets")

    sub.add_parser("list", help="List your trading accounts")
    sub.add_parser("stats", help="Show dashboard statistics")

    register = sub.add_parser("register", help="Register a new trading account")
    register.add_argument("--login", required=True)
    register.add_argument("--platform", required=True, choices=[p.value for p in Platform])
    register.add_argument("--custom-platform", help="Platform name when --platform is Other")
    register.add_argument("--server", required=True)
    register.add_argument("--secret", required=True)
    register.add_argument("--plan", choices=[p.value for p in Plan])
    register.add_argument("--nickname")

    delete = sub.add_parser("delete", help="Delete a trading account")
    delete.add_argument("account_id")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    subscribe = sub.add_parser("subscribe", help="Start a subscription")
    subscribe.add_argument("period", choices=[p.value for p in BillingPeriod])

    redeem = sub.add_parser("redeem", help="Redeem a promo code")
    redeem.add_argument("code")
    return parser


def _confirm_prompt() -> bool:
    answer = input("Are you sure you want to delete this trading account? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _print_accounts(session: AccountSession) -> None:
    snapshot = session.snapshot
    if not snapshot.accounts:
        print("No Trading Accounts")
        return
    for account in snapshot.accounts:
        created = account.created_at.date().isoformat() if account.created_at else "-"
        print(f"{account.id}  {account.display_name:<28} {account.platform} • {account.short_server}  "
              f"login {mask_login(account.login)}  [{account.plan}]  created {created}")


def _print_stats(session: AccountSession) -> None:
    title, description = account_status(session.identity)
    print(f"Account Status: {title} ({description})")
    for card_title, value, description in stat_cards(session.stats):
        print(f"{card_title:<18} {value:>10}  {description}")


async def run_command(session: AccountSession, args: argparse.Namespace) -> bool:
    """Dispatches one parsed command. Returns True on success."""
    if args.command == "health":
        status = await session.check_connection()
        print(f"{session.endpoint_store.get_endpoint()}: {status.value}")
        return status is ConnectionStatus.ONLINE

    if args.command == "set-endpoint":
        if not args.url:
            for name, url, description in ENDPOINT_PRESETS:
                print(f"{name:<24} {url:<28} {description}")
            return True
        return await session.save_endpoint(args.url)

    if args.command in ("list", "stats"):
        ok = await session.refresh()
        if args.command == "list":
            _print_accounts(session)
        else:
            _print_stats(session)
        return ok

    if args.command == "register":
        form = RegistrationInput(
            login=args.login,
            platform=args.platform,
            server=args.server,
            secret=args.secret,
            plan=args.plan,
            nickname=args.nickname,
            custom_platform=args.custom_platform,
        )
        ok = await session.register_account(form)
        if ok:
            _print_accounts(session)
        return ok

    if args.command == "delete":
        confirm = (lambda: True) if args.yes else _confirm_prompt
        return await session.delete_account(args.account_id, confirm)

    if args.command == "subscribe":
        return await session.subscribe(BillingPeriod(args.period)) is not None

    if args.command == "redeem":
        return await session.redeem(args.code) is not None

    raise ValueError(f"Unknown command: {args.command}")


async def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    session: Optional[AccountSession] = None

    try:
        # 1. Load Config
        cfg = load_config()
        if args.user:
            cfg = replace(cfg, user_id=args.user)
        logging.getLogger().setLevel(cfg.log_level)

        # 2. Setup
        session = build_session(cfg)
        if args.api_url and not await session.save_endpoint(args.api_url):
            return 1

        # 3. Run
        ok = await run_command(session, args)
        return 0 if ok else 1

    except (ValueError, ConfigError) as e:
        logger.error(f"Configuration error: {e}")
        return 2
    finally:
        # 4. Graceful Shutdown
        if session:
            await session.close()
        logger.info("Application shut down.")


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")


if __name__ == "__main__":
    cli()
