"""Payment gateway collaborator (Razorpay orders and checkout signatures)."""

import asyncio
import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from acadvizen.core.ids import random_base36, timestamp_base36
from acadvizen.exceptions import DependencyFailure


logger = logging.getLogger(__name__)


class PaymentGateway(ABC):
    """Opaque order creation plus pass/fail signature checks."""

    key_id: str = ""

    @abstractmethod
    async def create_order(
        self,
        amount: float,
        currency: str,
        receipt: str,
        notes: Mapping[str, str] | None = None,
    ) -> str:
        """Create an order for `amount` (display units) and return its reference."""

    @abstractmethod
    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check the checkout callback signature for an order/payment pair."""


def checkout_signature(secret: str, order_id: str, payment_id: str) -> str:
    """Hex HMAC-SHA256 of `order_id|payment_id`, as Razorpay signs checkout callbacks."""
    message = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


class RazorpayGateway(PaymentGateway):
    """Razorpay orders when keys are configured, locally fabricated references otherwise."""

    def __init__(self, key_id: str = "", key_secret: str = "") -> None:
        self.key_id = key_id
        self._key_secret = key_secret

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self._key_secret)

    async def create_order(
        self,
        amount: float,
        currency: str,
        receipt: str,
        notes: Mapping[str, str] | None = None,
    ) -> str:
        if not self.configured:
            order_id = f"order_{timestamp_base36()}{random_base36(4)}"
            logger.info(f"Razorpay not configured, issued local order reference {order_id}")
            return order_id

        import razorpay

        client = razorpay.Client(auth=(self.key_id, self._key_secret))
        order_data = {
            "amount": round(amount * 100),  # Razorpay expects paise
            "currency": currency,
            "receipt": receipt,
            "notes": dict(notes or {}),
        }
        try:
            order = await asyncio.to_thread(client.order.create, data=order_data)
        except Exception as e:
            logger.exception(f"Razorpay order creation failed for receipt {receipt}")
            msg = "Failed to create payment order"
            raise DependencyFailure(msg) from e

        logger.info(f"Created Razorpay order {order['id']} for receipt {receipt}")
        return str(order["id"])

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self._key_secret:
            logger.error("RAZORPAY_KEY_SECRET is not set, rejecting payment signature")
            return False
        expected = checkout_signature(self._key_secret, order_id, payment_id)
        return hmac.compare_digest(expected, signature or "")
