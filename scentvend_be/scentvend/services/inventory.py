"""Product/variant store.

Every write to a stock counter goes through ``set_stock`` or
``decrement_stock`` so the non-negative and bottle-ceiling rules live in one
place (``_check_stock_value``).
"""
import logging
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from scentvend.config import get_settings
from scentvend.errors import (
    InsufficientAvailable,
    InsufficientStock,
    InvalidQuantity,
    InvalidSlot,
    LimitExceeded,
    ProductNotFound,
)
from scentvend.models.enums import SLOT_RANGES, BottleSize, SlotType, VariantKind
from scentvend.models.product import Product, STOCK_COLUMNS
from scentvend.models.slot import SlotAssignment

logger = logging.getLogger(__name__)

DEFAULT_STOCK = {
    VariantKind.SPRAY: 100,
    VariantKind.ML30: 50,
    VariantKind.ML60: 30,
    VariantKind.ML100: 20,
}

UPDATABLE_FIELDS = {
    "name", "description", "image_url", "available",
    "price", "price_30ml", "price_60ml", "price_100ml",
}


def bottle_limit() -> int:
    return get_settings().BOTTLE_STOCK_LIMIT


def _check_stock_value(variant: VariantKind, quantity: int) -> None:
    if quantity is None or int(quantity) < 0:
        raise InvalidQuantity("Stock quantity must be zero or more")
    if variant.is_bottle and int(quantity) > bottle_limit():
        raise LimitExceeded(
            f"Bottle stock for {variant.value} cannot exceed {bottle_limit()} units"
        )


def get_product(db: Session, product_id: int, lock: bool = False) -> Product:
    """Load a product; ``lock`` takes its row lock until the caller commits.

    Stock edits and bottle reservations lock the product first, so checks on
    a variant's reserved units never interleave.
    """
    if lock:
        product = (
            db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
    else:
        product = db.get(Product, product_id)
    if not product:
        raise ProductNotFound(product_id)
    return product


def list_available(db: Session) -> List[Product]:
    return db.query(Product).filter(Product.available.is_(True)).order_by(Product.id.asc()).all()


def list_all(db: Session) -> List[Product]:
    return db.query(Product).order_by(Product.id.asc()).all()


def create_product(db: Session, fields: dict) -> Product:
    data = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
    if data.get("price") is None:
        raise InvalidQuantity("Spray price is required")
    for variant, column in STOCK_COLUMNS.items():
        value = fields.get(column)
        if value is None:
            # Defaults larger than the machine holds are trimmed to the ceiling
            value = DEFAULT_STOCK[variant]
            if variant.is_bottle:
                value = min(value, bottle_limit())
        _check_stock_value(variant, value)
        data[column] = int(value)
    product = Product(**data)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


def update_product(db: Session, product_id: int, fields: dict) -> Product:
    product = get_product(db, product_id, lock=True)
    # Stock fields get the same checks as the admin stock endpoints, all
    # before anything is written
    stock_changes = {
        variant: int(fields[column])
        for variant, column in STOCK_COLUMNS.items()
        if fields.get(column) is not None
    }
    for variant, quantity in stock_changes.items():
        _validate_stock_change(db, product, variant, quantity)
    for key, value in fields.items():
        if key in UPDATABLE_FIELDS and value is not None:
            setattr(product, key, value)
    for variant, quantity in stock_changes.items():
        setattr(product, STOCK_COLUMNS[variant], quantity)
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int) -> bool:
    product = db.get(Product, product_id)
    if not product:
        return False
    db.query(SlotAssignment).filter(SlotAssignment.product_id == product_id).delete(synchronize_session=False)
    db.delete(product)
    db.commit()
    logger.info("Deleted product %s and its slot assignments", product_id)
    return True


def reserved_units(db: Session, product_id: int, bottle_size: BottleSize, exclude_slot: Optional[int] = None) -> int:
    """Units of a bottle variant currently claimed by slot assignments."""
    query = db.query(func.coalesce(func.sum(SlotAssignment.slot_quantity), 0)).filter(
        SlotAssignment.slot_type == SlotType.BOTTLE.value,
        SlotAssignment.product_id == product_id,
        SlotAssignment.bottle_size == bottle_size.value,
    )
    if exclude_slot is not None:
        query = query.filter(SlotAssignment.slot_number != exclude_slot)
    return int(query.scalar() or 0)


def _validate_stock_change(db: Session, product: Product, variant: VariantKind, quantity: int) -> None:
    _check_stock_value(variant, quantity)
    if variant.is_bottle:
        reserved = reserved_units(db, product.id, BottleSize(variant.value))
        if int(quantity) < reserved:
            raise InsufficientAvailable(
                f"Cannot set {product.name} {variant.value} stock to {quantity}: "
                f"{reserved} units are assigned to bottle slots",
                available=reserved,
            )


def set_stock(db: Session, product_id: int, variant: VariantKind, quantity: int) -> Product:
    variant = VariantKind(variant)
    product = get_product(db, product_id, lock=True)
    _validate_stock_change(db, product, variant, quantity)
    setattr(product, STOCK_COLUMNS[variant], int(quantity))
    db.commit()
    db.refresh(product)
    logger.info("Stock set: product=%s variant=%s quantity=%s", product_id, variant.value, quantity)
    return product


def decrement_stock(db: Session, product_id: int, variant: VariantKind, amount: int = 1) -> Product:
    """Atomically lower one variant counter; fails closed when stock is short.

    The check and the write are a single conditional UPDATE, so two
    concurrent decrements of the same variant can never both pass on a stale
    value. The caller owns the transaction and commits.
    """
    variant = VariantKind(variant)
    if amount < 1:
        raise InvalidQuantity("Decrement amount must be positive")
    column = getattr(Product, STOCK_COLUMNS[variant])
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, column >= amount)
        .values({column: column - amount})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        product = get_product(db, product_id)
        raise InsufficientStock(
            f"Insufficient {variant.value} stock for product {product_id}: "
            f"{product.stock_of(variant)} left, {amount} requested"
        )
    return db.get(Product, product_id, populate_existing=True)


def set_primary_slot(
    db: Session,
    product_id: int,
    slot_type: SlotType,
    slot_number: int,
    bottle_size: Optional[BottleSize] = None,
) -> Product:
    slot_type = SlotType(slot_type)
    if slot_number not in SLOT_RANGES[slot_type]:
        bounds = SLOT_RANGES[slot_type]
        raise InvalidSlot(f"{slot_type.value.capitalize()} slots must be between {bounds.start}-{bounds.stop - 1}")
    product = get_product(db, product_id)
    if slot_type is SlotType.SPRAY:
        product.spray_slot = slot_number
        product.bottle_slot = None
        product.bottle_size = None
    else:
        if bottle_size is None:
            raise InvalidSlot("Bottle size is required for bottle slots")
        product.bottle_slot = slot_number
        product.bottle_size = BottleSize(bottle_size).value
        product.spray_slot = None
    db.commit()
    db.refresh(product)
    return product
