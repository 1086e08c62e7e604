import pytest
from razorpay.errors import BadRequestError

from scentvend.errors import PaymentGatewayError
from scentvend.utils.payments import PaymentGateway


def test_test_mode_accepts_any_payment():
    gateway = PaymentGateway()
    assert gateway.enabled is False
    order = gateway.create_gateway_order(500, "receipt_1")
    assert order["id"].startswith("order_test_")
    assert order["currency"] == "INR"
    assert gateway.verify_signature(order["id"], "pay_1", "").success is True


def test_live_mode_creates_order_through_sdk(razorpay_client):
    gateway = PaymentGateway(key_id="rzp_live_x", key_secret="s3cret")
    order = gateway.create_gateway_order(5000, "receipt_1", notes={"orderId": "1"})

    assert razorpay_client.auth == ("rzp_live_x", "s3cret")
    assert razorpay_client.orders == [
        {"amount": 5000, "currency": "INR", "receipt": "receipt_1", "notes": {"orderId": "1"}}
    ]
    assert order["id"] == "order_live0001"
    assert order["amount"] == 5000
    assert order["receipt"] == "receipt_1"


def test_live_mode_sdk_error(razorpay_client, monkeypatch):
    def reject(data=None, **kwargs):
        raise BadRequestError("The amount must be at least INR 1.00")

    monkeypatch.setattr(razorpay_client, "create", reject)
    gateway = PaymentGateway(key_id="rzp_live_x", key_secret="s3cret")
    with pytest.raises(PaymentGatewayError) as exc:
        gateway.create_gateway_order(0, "receipt_2")
    assert exc.value.status_code == 502


def test_live_mode_checks_signature(razorpay_client):
    gateway = PaymentGateway(key_id="key_live", key_secret="s3cret", currency="USD")
    order = gateway.create_gateway_order(1200, "receipt_2")
    assert not order["id"].startswith("order_test_")
    assert order["currency"] == "USD"

    good = gateway.sign(order["id"], "pay_9")
    assert gateway.verify_signature(order["id"], "pay_9", good).success is True

    bad = gateway.verify_signature(order["id"], "pay_9", "0" * 64)
    assert bad.success is False
    assert bad.reason == "Signature mismatch"


def test_live_mode_requires_all_fields():
    gateway = PaymentGateway(key_id="key_live", key_secret="s3cret")
    result = gateway.verify_signature("order_x", None, None)
    assert result.success is False
    assert result.reason == "Missing payment fields"


def test_signature_is_bound_to_payment():
    gateway = PaymentGateway(key_id="k", key_secret="s")
    assert gateway.sign("order_a", "pay_1") != gateway.sign("order_a", "pay_2")
