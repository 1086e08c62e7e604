"""Per-slot dispense counters feeding the admin heatmap."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from scentvend.errors import InvalidSlot
from scentvend.models.base import insert_missing
from scentvend.models.enums import SLOT_RANGES, SlotType, VariantKind
from scentvend.models.product import Product
from scentvend.models.slot import SlotAssignment, SlotUsage

HEAT_THRESHOLDS = ((25, "cold"), (50, "warm"), (75, "hot"))


def heat_level(score: float) -> str:
    for limit, level in HEAT_THRESHOLDS:
        if score < limit:
            return level
    return "very-hot"


def popularity_score(usage_count: int, max_usage: int) -> int:
    """Usage relative to the busiest slot, 0-100."""
    if not max_usage or not usage_count:
        return 0
    return min(100, round(100 * usage_count / max_usage))


def record_usage(db: Session, slot_number: int, slot_type: SlotType, product_id: Optional[int] = None) -> SlotUsage:
    """Count one dispense from a slot. Caller commits."""
    slot_type = SlotType(slot_type)
    if slot_number not in SLOT_RANGES[slot_type]:
        raise InvalidSlot(f"Unknown {slot_type.value} slot {slot_number}")
    insert_missing(
        db,
        SlotUsage,
        {"slot_number": slot_number, "slot_type": slot_type.value, "usage_count": 0},
        ["slot_type", "slot_number"],
    )
    values = {SlotUsage.usage_count: SlotUsage.usage_count + 1, SlotUsage.last_used_at: datetime.utcnow()}
    if product_id is not None:
        values[SlotUsage.product_id] = product_id
    query = db.query(SlotUsage).filter(
        SlotUsage.slot_type == slot_type.value, SlotUsage.slot_number == slot_number
    )
    query.update(values, synchronize_session=False)
    return query.populate_existing().one()


def list_usage(db: Session) -> List[SlotUsage]:
    return db.query(SlotUsage).order_by(SlotUsage.slot_type.asc(), SlotUsage.slot_number.asc()).all()


def snapshot(db: Session) -> dict:
    usage_rows = {(u.slot_type, u.slot_number): u for u in db.query(SlotUsage).all()}
    max_usage = max((u.usage_count for u in usage_rows.values()), default=0)
    products = {p.id: p for p in db.query(Product).all()}
    assignments = db.query(SlotAssignment).order_by(
        SlotAssignment.priority.desc(), SlotAssignment.id.asc()
    ).all()

    def slot_heat(slot_type: SlotType, number: int) -> dict:
        rows = [a for a in assignments if a.slot_type == slot_type.value and a.slot_number == number]
        stats = usage_rows.get((slot_type.value, number))
        count = stats.usage_count if stats else 0
        score = popularity_score(count, max_usage)
        occupant = products.get(rows[0].product_id) if rows else None
        if slot_type is SlotType.SPRAY:
            stock = occupant.stock_of(VariantKind.SPRAY) if occupant else 0
        else:
            stock = sum(a.slot_quantity for a in rows)
        return {
            "slotNumber": number,
            "productId": occupant.id if occupant else None,
            "productName": occupant.name if occupant else None,
            "bottleSize": rows[0].bottle_size if rows and slot_type is SlotType.BOTTLE else None,
            "stock": stock,
            "usageCount": count,
            "lastUsed": stats.last_used_at.isoformat() if stats and stats.last_used_at else None,
            "popularityScore": score,
            "heatLevel": heat_level(score),
        }

    return {
        "spraySlots": [slot_heat(SlotType.SPRAY, n) for n in SLOT_RANGES[SlotType.SPRAY]],
        "bottleSlots": [slot_heat(SlotType.BOTTLE, n) for n in SLOT_RANGES[SlotType.BOTTLE]],
    }
