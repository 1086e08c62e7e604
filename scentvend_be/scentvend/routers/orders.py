from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from scentvend.errors import InvalidTransition, PaymentVerificationFailed
from scentvend.models.base import get_db
from scentvend.models.order import Order
from scentvend.schemas.order import (
    BottleOrderCreate,
    OrderItemOut,
    OrderOut,
    PaymentResult,
    SprayOrderCreate,
)
from scentvend.services import reconciliation
from scentvend.utils.payments import VerificationResult
from scentvend.utils.security import require_admin


router = APIRouter()
admin_router = APIRouter()


def map_order_to_out(order: Order) -> OrderOut:
    items = [
        OrderItemOut(
            id=i.id,
            productId=i.product_id,
            variant=i.variant,
            quantity=i.quantity,
            price=i.price,
            slotNumber=i.slot_number,
            decremented=bool(i.decremented),
        )
        for i in order.items
    ]
    return OrderOut(
        id=order.id,
        productId=order.product_id,
        orderType=order.order_type,
        paymentMethod=order.payment_method,
        amount=order.amount,
        status=order.status,  # type: ignore
        gatewayOrderId=order.gateway_order_id,
        items=items,
        createdAt=order.created_at.isoformat(),
        updatedAt=order.updated_at.isoformat(),
    )


def payment_result(order: Order, verification: VerificationResult) -> PaymentResult:
    if not verification.success:
        raise PaymentVerificationFailed(verification.reason or "Payment verification failed")
    return PaymentResult(success=True, order=map_order_to_out(order), message="Payment verified successfully")


# Create spray order
@router.post("/", response_model=OrderOut, status_code=201)
def create_spray_order(payload: SprayOrderCreate, db: Session = Depends(get_db)):
    order = reconciliation.create_spray_order(db, payload.productId, payload.paymentMethod, payload.amount)
    return map_order_to_out(order)


# Create multi-bottle order
@router.post("/bottles", response_model=OrderOut, status_code=201)
def create_bottle_order(payload: BottleOrderCreate, db: Session = Depends(get_db)):
    items = [(i.productId, i.bottleSize) for i in payload.items]
    order = reconciliation.create_bottle_order(db, items, payload.paymentMethod)
    return map_order_to_out(order)


@router.get("/{id}", response_model=OrderOut)
def get_order(id: int, db: Session = Depends(get_db)):
    return map_order_to_out(reconciliation.get_order(db, id))


# Non-gateway methods (cash drawer, card terminal) report success directly
@router.post("/{id}/payment", response_model=PaymentResult)
def process_payment(id: int, db: Session = Depends(get_db)):
    if reconciliation.get_order(db, id).gateway_order_id:
        raise InvalidTransition(f"Order {id} is paid through the payment gateway; verify it there")
    verification = VerificationResult(success=True)
    order = reconciliation.confirm_payment(db, id, verification)
    return payment_result(order, verification)


@router.post("/{id}/fail", response_model=OrderOut)
def fail_payment(id: int, db: Session = Depends(get_db)):
    return map_order_to_out(reconciliation.fail_payment(db, id))


@admin_router.get("/", response_model=List[OrderOut])
def list_orders(db: Session = Depends(get_db), _session=Depends(require_admin)):
    return [map_order_to_out(o) for o in reconciliation.list_orders(db)]
