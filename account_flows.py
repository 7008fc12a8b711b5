"""
account_flows.py
The write paths of the account directory: registering a new trading
account and deleting an existing one.

Both flows catch every remote failure at their boundary and turn it
into a RemoteWriteError, so nothing leaks out as a raw httpx exception.
Neither flow touches the directory snapshot directly; it is always
re-read from the remote store.
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from accounts import (
    DEFAULT_PLAN,
    IAccountStore,
    Identity,
    Plan,
    Platform,
    RegistrationInput,
    RemoteServiceError,
    RemoteWriteError,
    TradingAccount,
    ValidationError,
    derive_nickname,
    mask_login,
)
from accounts.utils import clean
from account_directory import IAccountDirectory

logger = logging.getLogger(__name__)

Confirmation = Callable[[], bool]

REQUIRED = "is required"


def validate_registration(form: RegistrationInput, identity: Optional[Identity]) -> Dict[str, Any]:
    """
    Checks every field and builds the wire payload.

    Raises:
        ValidationError: listing every failing field, not just the first.
    """
    errors: Dict[str, str] = {}

    if identity is None or not clean(identity.user_id):
        errors["user_id"] = "sign in to register an account"

    for name in ("login", "server", "secret"):
        if not clean(getattr(form, name)):
            errors[name] = REQUIRED

    platform_name = clean(form.platform)
    platform = Platform.parse(platform_name)
    if not platform_name:
        errors["platform"] = REQUIRED
    elif platform is None:
        errors["platform"] = f"'{platform_name}' is not a recognized platform"
    elif platform is Platform.OTHER:
        platform_name = clean(form.custom_platform)
        if not platform_name:
            errors["custom_platform"] = "name the platform when choosing Other"

    plan_name = clean(form.plan) or DEFAULT_PLAN.value
    if Plan.parse(plan_name) is None:
        errors["plan"] = f"'{plan_name}' is not a recognized plan"

    if errors:
        raise ValidationError(errors)

    # The derived label is sent, so the stored record keeps it.
    nickname = clean(form.nickname) or derive_nickname(platform_name)
    return {
        "user_id": identity.user_id,
        "login": clean(form.login),
        "trading_platform": platform_name,
        "server": clean(form.server),
        "password": clean(form.secret),
        "plan": plan_name,
        "nickname": nickname,
    }


class RegistrationFlow:
    """
    Validates and submits a new account. It does not splice the result
    into the directory: the caller refreshes the directory afterwards.
    """

    def __init__(self, store: IAccountStore):
        self._store = store

    async def register(self,
                       form: RegistrationInput,
                       identity: Optional[Identity]) -> Optional[TradingAccount]:
        """
        Returns the created account when the service echoes it, or None
        for a bare acknowledgement.

        Raises:
            ValidationError: local checks failed; nothing was sent.
            RemoteWriteError: the service rejected the request or was unreachable.
        """
        payload = validate_registration(form, identity)
        logger.info(f"Registering {payload['trading_platform']} account {mask_login(payload['login'])}...")

        try:
            created = await self._store.create_account(payload)
        except RemoteServiceError as e:
            logger.error(f"Registration rejected ({e.status_code}): {e.message}")
            raise RemoteWriteError(e.message) from e
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error(f"Registration failed: {e}")
            raise RemoteWriteError(f"Registration failed: {e}" if str(e) else "Registration failed") from e

        logger.info(f"Account {mask_login(payload['login'])} registered.")
        return created


class DeletionFlow:
    """
    Deletes one account, gated by a caller-supplied confirmation, then
    re-reads the whole directory.
    """

    def __init__(self, store: IAccountStore, directory: IAccountDirectory):
        self._store = store
        self._directory = directory

    async def delete_account(self,
                             account_id: str,
                             identity: Optional[Identity],
                             confirm: Confirmation) -> bool:
        """
        Returns False if the caller declined, True once the remote delete
        succeeded and the directory was refreshed.

        Raises:
            RemoteWriteError: the delete failed; `not_found` is set for a 404.
            ValidationError: `account_id` is blank. Nothing was sent.
            RemoteFetchError: the delete went through but the refresh did not.
        """
        if not clean(account_id):
            raise ValidationError({"account_id": "choose an account to delete"})
        account_id = clean(account_id)

        if not confirm():
            logger.info(f"Deletion of account {account_id} cancelled.")
            return False

        logger.info(f"Deleting account {account_id}...")
        try:
            await self._store.delete_account(account_id)
        except RemoteServiceError as e:
            if e.status_code == 404:
                logger.warning(f"Account {account_id} not found on the server.")
                raise RemoteWriteError(e.message, code=RemoteWriteError.NOT_FOUND) from e
            logger.error(f"Deletion rejected ({e.status_code}): {e.message}")
            raise RemoteWriteError(e.message) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Error deleting account: {e}")
            raise RemoteWriteError("Failed to delete trading account") from e

        logger.info(f"Account {account_id} deleted. Re-syncing directory.")
        await self._directory.refresh(identity)
        return True
