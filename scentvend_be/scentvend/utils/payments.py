"""Payment gateway collaborator (Razorpay).

The kiosk only needs two things from the gateway: an order id to hand to the
checkout widget, and a yes/no on the signature the widget returns. With no
keys configured the gateway runs in test mode: order ids are simulated and
every payment is approved.
"""
from dataclasses import dataclass
from typing import Optional
import hashlib
import hmac
import logging
import uuid

import razorpay
from razorpay.errors import BadRequestError, GatewayError, ServerError

from scentvend.config import get_settings
from scentvend.errors import PaymentGatewayError

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    success: bool
    payment_id: Optional[str] = None
    reason: Optional[str] = None


class PaymentGateway:
    def __init__(self, key_id: str = "", key_secret: str = "", currency: str = "INR"):
        self.key_id = key_id
        self.key_secret = key_secret
        self.currency = currency
        self._client = None

    @property
    def enabled(self) -> bool:
        return bool(self.key_id and self.key_secret)

    @property
    def client(self) -> razorpay.Client:
        if self._client is None:
            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    def create_gateway_order(
        self, amount: int, receipt: str, currency: Optional[str] = None, notes: Optional[dict] = None
    ) -> dict:
        """Register an order with the gateway; amount is in minor units."""
        currency = currency or self.currency
        if not self.enabled:
            order = {
                "id": f"order_test_{uuid.uuid4().hex[:14]}",
                "amount": amount,
                "currency": currency,
                "receipt": receipt,
                "status": "created",
            }
            logger.info("Test gateway order %s simulated for %s", order["id"], receipt)
            return order

        data = {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes or {}}
        try:
            created = self.client.order.create(data=data)
        except (BadRequestError, GatewayError, ServerError) as exc:
            logger.error("Gateway rejected order for %s: %s", receipt, exc)
            raise PaymentGatewayError(f"Payment gateway error: {exc}")
        logger.info("Gateway order %s created for %s (%s %s)", created["id"], receipt, amount, currency)
        return {
            "id": created["id"],
            "amount": created.get("amount", amount),
            "currency": created.get("currency", currency),
            "receipt": created.get("receipt", receipt),
            "status": created.get("status", "created"),
        }

    def sign(self, gateway_order_id: str, payment_id: str) -> str:
        message = f"{gateway_order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_signature(self, gateway_order_id: str, payment_id: str, signature: str) -> VerificationResult:
        if not self.enabled:
            logger.info("Gateway in test mode: payment %s accepted without signature", payment_id)
            return VerificationResult(success=True, payment_id=payment_id)
        if not (gateway_order_id and payment_id and signature):
            return VerificationResult(success=False, payment_id=payment_id, reason="Missing payment fields")
        expected = self.sign(gateway_order_id, payment_id)
        if hmac.compare_digest(expected, signature):
            return VerificationResult(success=True, payment_id=payment_id)
        logger.warning("Signature mismatch for gateway order %s", gateway_order_id)
        return VerificationResult(success=False, payment_id=payment_id, reason="Signature mismatch")


def get_gateway() -> PaymentGateway:
    settings = get_settings()
    return PaymentGateway(
        key_id=settings.PAYMENT_KEY_ID,
        key_secret=settings.PAYMENT_KEY_SECRET,
        currency=settings.PAYMENT_CURRENCY,
    )
