"""Slot assignment table: which product variant sits in which physical slot.

A bottle slot assignment is a reservation of inventory: its slot_quantity is
claimed from the variant's stock when the admin assigns it, not when a
bottle is sold, so two slots can never be promised the same bottles.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from scentvend.errors import InsufficientAvailable, InvalidQuantity, InvalidSlot, NotFound
from scentvend.models.enums import SLOT_RANGES, BottleSize, SlotType, VariantKind
from scentvend.models.product import Product
from scentvend.models.slot import SlotAssignment
from scentvend.services.inventory import bottle_limit, get_product, reserved_units

logger = logging.getLogger(__name__)


def _check_slot(slot_type: SlotType, slot_number: int) -> None:
    bounds = SLOT_RANGES[slot_type]
    if slot_number not in bounds:
        raise InvalidSlot(
            f"{slot_type.value.capitalize()} slots must be between {bounds.start}-{bounds.stop - 1}"
        )


def _check_priority(priority: int) -> None:
    if priority is None or priority < 0:
        raise InvalidQuantity("Priority must be zero or more")


def assign_spray(db: Session, product_id: int, slot_number: int, priority: int = 0) -> SlotAssignment:
    _check_slot(SlotType.SPRAY, slot_number)
    _check_priority(priority)
    product = get_product(db, product_id)

    # A spray slot has a single nozzle: the new product replaces the occupant
    db.query(SlotAssignment).filter(
        SlotAssignment.slot_type == SlotType.SPRAY.value,
        SlotAssignment.slot_number == slot_number,
    ).delete(synchronize_session=False)
    db.query(Product).filter(
        Product.spray_slot == slot_number, Product.id != product_id
    ).update({Product.spray_slot: None}, synchronize_session=False)

    assignment = SlotAssignment(
        slot_number=slot_number,
        slot_type=SlotType.SPRAY.value,
        product_id=product_id,
        slot_quantity=1,
        priority=priority,
    )
    db.add(assignment)
    product.spray_slot = slot_number
    db.commit()
    db.refresh(assignment)
    logger.info("Spray slot %s assigned to product %s", slot_number, product_id)
    return assignment


def available_quantity(db: Session, product_id: int, bottle_size: BottleSize) -> int:
    bottle_size = BottleSize(bottle_size)
    product = get_product(db, product_id)
    stock = product.stock_of(bottle_size.variant)
    return max(0, stock - reserved_units(db, product_id, bottle_size))


def assign_bottle(
    db: Session,
    product_id: int,
    slot_number: int,
    bottle_size: BottleSize,
    priority: int = 0,
    slot_quantity: int = 1,
) -> SlotAssignment:
    bottle_size = BottleSize(bottle_size)
    _check_slot(SlotType.BOTTLE, slot_number)
    _check_priority(priority)
    if slot_quantity is None or not 1 <= slot_quantity <= bottle_limit():
        raise InvalidQuantity(f"Slot quantity must be between 1-{bottle_limit()}")
    product = get_product(db, product_id, lock=True)

    stock = product.stock_of(bottle_size.variant)
    # The row for this same slot/product/size is being replaced, so it does not count
    assigned_elsewhere = reserved_units(db, product_id, bottle_size, exclude_slot=slot_number)
    available = stock - assigned_elsewhere
    if slot_quantity > available:
        available = max(0, available)
        raise InsufficientAvailable(
            f"Cannot assign {slot_quantity} units. Only {available} units available for "
            f"{product.name} {bottle_size.value} (Total inventory: {stock}, "
            f"Currently assigned: {assigned_elsewhere})",
            available=available,
        )

    assignment = (
        db.query(SlotAssignment)
        .filter(
            SlotAssignment.slot_type == SlotType.BOTTLE.value,
            SlotAssignment.slot_number == slot_number,
            SlotAssignment.product_id == product_id,
            SlotAssignment.bottle_size == bottle_size.value,
        )
        .first()
    )
    if assignment:
        assignment.slot_quantity = slot_quantity
        assignment.priority = priority
    else:
        assignment = SlotAssignment(
            slot_number=slot_number,
            slot_type=SlotType.BOTTLE.value,
            product_id=product_id,
            bottle_size=bottle_size.value,
            slot_quantity=slot_quantity,
            priority=priority,
        )
        db.add(assignment)
    if product.bottle_slot is None:
        product.bottle_slot = slot_number
        product.bottle_size = bottle_size.value
    db.commit()
    db.refresh(assignment)
    logger.info(
        "Bottle slot %s assigned %s x %s of product %s",
        slot_number, slot_quantity, bottle_size.value, product_id,
    )
    return assignment


def clear_slot(db: Session, slot_number: int, slot_type: SlotType) -> int:
    slot_type = SlotType(slot_type)
    _check_slot(slot_type, slot_number)
    removed = db.query(SlotAssignment).filter(
        SlotAssignment.slot_type == slot_type.value,
        SlotAssignment.slot_number == slot_number,
    ).delete(synchronize_session=False)
    if slot_type is SlotType.SPRAY:
        db.query(Product).filter(Product.spray_slot == slot_number).update(
            {Product.spray_slot: None}, synchronize_session=False
        )
    else:
        db.query(Product).filter(Product.bottle_slot == slot_number).update(
            {Product.bottle_slot: None, Product.bottle_size: None}, synchronize_session=False
        )
    db.commit()
    logger.info("Cleared %s slot %s (%s assignments)", slot_type.value, slot_number, removed)
    return removed


def remove_assignment(
    db: Session,
    product_id: int,
    slot_number: int,
    slot_type: SlotType,
    bottle_size: Optional[BottleSize] = None,
) -> None:
    slot_type = SlotType(slot_type)
    _check_slot(slot_type, slot_number)
    query = db.query(SlotAssignment).filter(
        SlotAssignment.slot_type == slot_type.value,
        SlotAssignment.slot_number == slot_number,
        SlotAssignment.product_id == product_id,
    )
    if bottle_size is not None:
        query = query.filter(SlotAssignment.bottle_size == BottleSize(bottle_size).value)
    rows = query.all()
    if not rows:
        raise NotFound(f"Product {product_id} is not assigned to {slot_type.value} slot {slot_number}")
    if len(rows) > 1:
        raise InvalidSlot("Bottle size is required: the product holds several sizes in this slot")
    row = rows[0]
    db.delete(row)

    product = db.get(Product, product_id)
    if product:
        if slot_type is SlotType.SPRAY and product.spray_slot == slot_number:
            product.spray_slot = None
        elif (
            slot_type is SlotType.BOTTLE
            and product.bottle_slot == slot_number
            and product.bottle_size == row.bottle_size
        ):
            product.bottle_slot = None
            product.bottle_size = None
    db.commit()


def list_for_slot(db: Session, slot_number: int, slot_type: SlotType) -> List[SlotAssignment]:
    slot_type = SlotType(slot_type)
    _check_slot(slot_type, slot_number)
    return (
        db.query(SlotAssignment)
        .filter(
            SlotAssignment.slot_type == slot_type.value,
            SlotAssignment.slot_number == slot_number,
        )
        .order_by(SlotAssignment.priority.desc(), SlotAssignment.id.asc())
        .all()
    )


def list_for_product(db: Session, product_id: int) -> List[SlotAssignment]:
    get_product(db, product_id)
    return (
        db.query(SlotAssignment)
        .filter(SlotAssignment.product_id == product_id)
        .order_by(SlotAssignment.slot_type.asc(), SlotAssignment.slot_number.asc())
        .all()
    )


def slot_overview(db: Session) -> dict:
    rows = db.query(SlotAssignment).order_by(
        SlotAssignment.priority.desc(), SlotAssignment.id.asc()
    ).all()
    overview = {}
    for slot_type, bounds in SLOT_RANGES.items():
        overview[slot_type] = {n: [] for n in bounds}
    for row in rows:
        slots = overview[SlotType(row.slot_type)]
        if row.slot_number in slots:
            slots[row.slot_number].append(row)
    return overview


def pick_dispensing_slot(
    db: Session, product: Product, variant: VariantKind
) -> Tuple[Optional[int], Optional[SlotAssignment]]:
    """Slot a unit of this variant is dispensed from.

    Highest priority assignment first; falls back to the product's primary
    slot when the variant has no assignment rows.
    """
    variant = VariantKind(variant)
    query = db.query(SlotAssignment).filter(SlotAssignment.product_id == product.id)
    if variant is VariantKind.SPRAY:
        query = query.filter(SlotAssignment.slot_type == SlotType.SPRAY.value)
    else:
        query = query.filter(
            SlotAssignment.slot_type == SlotType.BOTTLE.value,
            SlotAssignment.bottle_size == variant.value,
            SlotAssignment.slot_quantity > 0,
        )
    assignment = query.order_by(
        SlotAssignment.priority.desc(), SlotAssignment.slot_number.asc()
    ).first()
    if assignment:
        return assignment.slot_number, assignment
    if variant is VariantKind.SPRAY:
        return product.spray_slot, None
    if product.bottle_size == variant.value:
        return product.bottle_slot, None
    return None, None


def consume_reserved_unit(db: Session, assignment: Optional[SlotAssignment]) -> None:
    """A bottle left its slot: release one reserved unit. Caller commits."""
    if assignment is None or assignment.slot_type != SlotType.BOTTLE.value:
        return
    assignment.slot_quantity -= 1
    if assignment.slot_quantity <= 0:
        db.delete(assignment)
