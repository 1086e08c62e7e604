from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scentvend.models.base import get_db
from scentvend.routers.orders import payment_result
from scentvend.schemas.order import GatewayOrderCreate, GatewayVerify, PaymentResult
from scentvend.services import reconciliation
from scentvend.utils.payments import PaymentGateway, VerificationResult, get_gateway

router = APIRouter()


@router.get("/config")
def payment_config(gateway: PaymentGateway = Depends(get_gateway)):
    return {"enabled": gateway.enabled, "testMode": not gateway.enabled, "keyId": gateway.key_id}


@router.post("/order")
def create_gateway_order(
    payload: GatewayOrderCreate,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
):
    order = reconciliation.get_order(db, payload.orderId)
    gateway_order = gateway.create_gateway_order(
        order.amount, f"receipt_{order.id}", payload.currency, notes={"orderId": str(order.id)}
    )
    reconciliation.attach_gateway_order(db, order.id, gateway_order["id"])
    return gateway_order


@router.post("/verify", response_model=PaymentResult)
def verify_payment(
    payload: GatewayVerify,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
):
    order = reconciliation.get_order(db, payload.orderId)
    gateway_order_id = payload.gatewayOrderId or order.gateway_order_id
    if order.gateway_order_id and gateway_order_id != order.gateway_order_id:
        verification = VerificationResult(success=False, payment_id=payload.paymentId, reason="Gateway order mismatch")
    else:
        verification = gateway.verify_signature(gateway_order_id, payload.paymentId, payload.signature)
    order = reconciliation.confirm_payment(db, order.id, verification)
    return payment_result(order, verification)
