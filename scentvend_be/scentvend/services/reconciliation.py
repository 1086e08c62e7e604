"""Order ledger and stock reconciliation.

Orders move ``pending -> completed`` or ``pending -> failed`` and never
leave a terminal state. Stock is only checked (not held) when an order is
created; the authoritative decrement happens once, after the payment is
confirmed. If the last unit was sold to someone else in between, the paid
order stays completed and the shortfall is logged for the operator.
"""
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional, Tuple, Union
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scentvend.errors import (
    InsufficientStock,
    InvalidOrder,
    InvalidTransition,
    NotFound,
    OutOfStock,
    ProductNotFound,
)
from scentvend.models.enums import BottleSize, OrderStatus, OrderType, SlotType, VariantKind
from scentvend.models.order import Order, OrderItem
from scentvend.services import inventory, sales, slots, usage
from scentvend.utils.payments import VerificationResult

logger = logging.getLogger(__name__)


def get_order(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise NotFound(f"Order {order_id} not found")
    return order


def list_orders(db: Session) -> List[Order]:
    return db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()


def create_spray_order(
    db: Session, product_id: int, payment_method: str, amount: Optional[int] = None
) -> Order:
    product = inventory.get_product(db, product_id)
    if not product.available or product.stock_of(VariantKind.SPRAY) < 1:
        raise OutOfStock(f"{product.name} is out of stock")
    price = product.price_of(VariantKind.SPRAY)
    if amount is not None and amount != price:
        raise InvalidOrder(f"Amount {amount} does not match the current price {price} of {product.name}")

    order = Order(
        product_id=product.id,
        order_type=OrderType.SPRAY.value,
        payment_method=payment_method,
        amount=price,
        status=OrderStatus.PENDING.value,
    )
    order.items.append(
        OrderItem(product_id=product.id, variant=VariantKind.SPRAY.value, quantity=1, price=price)
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Spray order %s created for product %s (%s)", order.id, product.id, price)
    return order


def create_bottle_order(
    db: Session, items: Iterable[Tuple[int, BottleSize]], payment_method: str
) -> Order:
    lines = [(int(product_id), BottleSize(size)) for product_id, size in items]
    if not lines:
        raise InvalidOrder("Order must contain at least one item")

    # Validate every line before writing anything
    demand = Counter(lines)
    products = {}
    for product_id, size in lines:
        if product_id not in products:
            products[product_id] = inventory.get_product(db, product_id)
        product = products[product_id]
        if not product.available or product.stock_of(size.variant) < demand[(product_id, size)]:
            raise OutOfStock(f"{product.name} {size.value} is out of stock")

    order = Order(
        product_id=lines[0][0],
        order_type=OrderType.BOTTLE.value,
        payment_method=payment_method,
        amount=0,
        status=OrderStatus.PENDING.value,
    )
    for product_id, size in lines:
        price = products[product_id].price_of(size.variant)
        order.items.append(OrderItem(product_id=product_id, variant=size.value, quantity=1, price=price))
        order.amount += price
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Bottle order %s created with %s items (%s)", order.id, len(lines), order.amount)
    return order


def attach_gateway_order(db: Session, order_id: int, gateway_order_id: str) -> Order:
    order = get_order(db, order_id)
    if order.status != OrderStatus.PENDING.value:
        raise InvalidTransition(f"Order {order_id} is {order.status}; payment cannot start")
    order.gateway_order_id = gateway_order_id
    db.commit()
    db.refresh(order)
    return order


def _transition(db: Session, order_id: int, target: OrderStatus) -> bool:
    """Move a pending order to ``target``; False when it already left pending."""
    moved = (
        db.query(Order)
        .filter(Order.id == order_id, Order.status == OrderStatus.PENDING.value)
        .update({Order.status: target.value, Order.updated_at: datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()
    return moved == 1


def _apply_decrements(db: Session, order: Order) -> None:
    for item in order.items:
        if item.decremented:
            continue
        variant = VariantKind(item.variant)
        try:
            product = inventory.decrement_stock(db, item.product_id, variant, item.quantity)
        except (InsufficientStock, ProductNotFound) as exc:
            # Payment is settled; the shortfall is an operator problem, not the customer's
            logger.warning("Decrement race on order %s item %s: %s", order.id, item.id, exc)
            continue
        slot_number, assignment = slots.pick_dispensing_slot(db, product, variant)
        slots.consume_reserved_unit(db, assignment)
        item.slot_number = slot_number
        item.decremented = True
        db.commit()

        if slot_number is None:
            logger.info("Product %s %s has no slot; usage not recorded", product.id, variant.value)
            continue
        slot_type = SlotType.SPRAY if variant is VariantKind.SPRAY else SlotType.BOTTLE
        try:
            usage.record_usage(db, slot_number, slot_type, product.id)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Usage not recorded for order %s slot %s", order.id, slot_number)


def _record_sale(db: Session, order: Order) -> None:
    try:
        sales.record_sale(db, order)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Sales rollup failed for order %s", order.id)


def confirm_payment(db: Session, order_id: int, verification: Union[VerificationResult, bool]) -> Order:
    """Apply the gateway's verdict to a pending order.

    Success completes the order and decrements each line once; a repeated
    or concurrent confirmation finds the order no longer pending and
    changes nothing. Failure marks the order failed with no stock effect.
    """
    order = get_order(db, order_id)
    success = verification.success if isinstance(verification, VerificationResult) else bool(verification)

    if not success:
        if _transition(db, order_id, OrderStatus.FAILED):
            logger.info("Order %s payment failed", order_id)
        db.refresh(order)
        return order

    if not _transition(db, order_id, OrderStatus.COMPLETED):
        db.refresh(order)
        if order.status == OrderStatus.FAILED.value:
            raise InvalidTransition(f"Order {order_id} has failed; start a new order")
        logger.info("Order %s already completed; confirmation ignored", order_id)
        return order

    db.refresh(order)
    logger.info("Order %s completed (%s)", order_id, order.amount)
    _apply_decrements(db, order)
    _record_sale(db, order)
    db.refresh(order)
    return order


def fail_payment(db: Session, order_id: int) -> Order:
    order = get_order(db, order_id)
    if not _transition(db, order_id, OrderStatus.FAILED):
        db.refresh(order)
        if order.status == OrderStatus.COMPLETED.value:
            raise InvalidTransition(f"Order {order_id} is already completed")
        return order
    db.refresh(order)
    logger.info("Order %s marked failed", order_id)
    return order
