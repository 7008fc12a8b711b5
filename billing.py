"""
billing.py
Subscription and promo-code requests against the remote service.

Only the request/response contract matters here; pricing and plan
entitlements live on the server.
"""

import logging

import httpx

from accounts import (
    BillingPeriod,
    IBillingService,
    PromoRedemption,
    RemoteServiceError,
    RemoteWriteError,
    SubscriptionReceipt,
    ValidationError,
)
from accounts.utils import clean

logger = logging.getLogger(__name__)


class BillingFlow:

    def __init__(self, service: IBillingService):
        self._service = service

    async def subscribe(self, user_id: str, period: BillingPeriod) -> SubscriptionReceipt:
        """
        Raises:
            ValidationError: no user id.
            RemoteWriteError: the service rejected the subscription or was unreachable.
        """
        if not clean(user_id):
            raise ValidationError({"user_id": "sign in to subscribe"})

        logger.info(f"Subscribing {user_id} ({period.value})...")
        try:
            receipt = await self._service.subscribe(user_id, period)
        except RemoteServiceError as e:
            logger.error(f"Subscription rejected ({e.status_code}): {e.message}")
            raise RemoteWriteError(e.message) from e
        except (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError) as e:
            logger.error(f"Subscription failed: {e}")
            raise RemoteWriteError("Subscription failed") from e

        logger.info(f"Subscription active until {receipt.active_until}")
        return receipt

    async def redeem(self, user_id: str, code: str) -> PromoRedemption:
        """
        Raises:
            ValidationError: empty code or user id; nothing was sent.
            RemoteWriteError: carrying the server's message, e.g. "Invalid promo code".
        """
        errors = {}
        if not clean(user_id):
            errors["user_id"] = "sign in to redeem a code"
        if not clean(code):
            errors["code"] = "Please enter a promo code"
        if errors:
            raise ValidationError(errors)

        code = clean(code)
        logger.info(f"Redeeming promo code for {user_id}...")
        try:
            redemption = await self._service.redeem(user_id, code)
        except RemoteServiceError as e:
            logger.warning(f"Promo code rejected ({e.status_code}): {e.message}")
            raise RemoteWriteError(e.message) from e
        except (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError) as e:
            logger.error(f"Promo code redemption failed: {e}")
            raise RemoteWriteError("Redemption failed") from e

        logger.info(f"Promo code redeemed: {redemption.discount_percent}% for {redemption.days} days")
        return redemption
