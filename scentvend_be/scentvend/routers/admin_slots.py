from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from scentvend.models.base import get_db
from scentvend.models.enums import BottleSize, SlotType
from scentvend.models.product import Product
from scentvend.models.slot import SlotAssignment
from scentvend.schemas.slot import AssignmentOut, BottleAssign, SlotOut, SprayAssign
from scentvend.services import inventory, slots
from scentvend.utils.security import require_admin

router = APIRouter()


def to_assignment_out(a: SlotAssignment, db: Session) -> AssignmentOut:
    product = db.get(Product, a.product_id)
    return AssignmentOut(
        id=a.id,
        slotNumber=a.slot_number,
        slotType=a.slot_type,
        productId=a.product_id,
        productName=product.name if product else None,
        bottleSize=a.bottle_size,
        slotQuantity=a.slot_quantity,
        priority=a.priority,
    )


@router.get("/slots", response_model=List[SlotOut])
def list_slots(db: Session = Depends(get_db), _session=Depends(require_admin)):
    overview = slots.slot_overview(db)
    return [
        SlotOut(slotNumber=n, slotType=slot_type, assignments=[to_assignment_out(a, db) for a in rows])
        for slot_type, by_number in overview.items()
        for n, rows in by_number.items()
    ]


@router.get("/slots/{slot_type}/{slot_number}", response_model=SlotOut)
def get_slot(slot_type: SlotType, slot_number: int, db: Session = Depends(get_db), _session=Depends(require_admin)):
    rows = slots.list_for_slot(db, slot_number, slot_type)
    return SlotOut(slotNumber=slot_number, slotType=slot_type, assignments=[to_assignment_out(a, db) for a in rows])


@router.put("/slots/spray/{slot_number}", response_model=AssignmentOut)
def assign_spray_slot(slot_number: int, payload: SprayAssign, db: Session = Depends(get_db), _session=Depends(require_admin)):
    assignment = slots.assign_spray(db, payload.productId, slot_number, payload.priority)
    return to_assignment_out(assignment, db)


@router.put("/slots/bottle/{slot_number}", response_model=AssignmentOut)
def assign_bottle_slot(slot_number: int, payload: BottleAssign, db: Session = Depends(get_db), _session=Depends(require_admin)):
    assignment = slots.assign_bottle(
        db, payload.productId, slot_number, payload.bottleSize, payload.priority, payload.slotQuantity
    )
    return to_assignment_out(assignment, db)


@router.delete("/slots/{slot_type}/{slot_number}")
def clear_slot(slot_type: SlotType, slot_number: int, db: Session = Depends(get_db), _session=Depends(require_admin)):
    removed = slots.clear_slot(db, slot_number, slot_type)
    return {"success": True, "removed": removed}


@router.delete("/slots/{slot_type}/{slot_number}/products/{product_id}")
def remove_assignment(
    slot_type: SlotType,
    slot_number: int,
    product_id: int,
    bottleSize: Optional[BottleSize] = Query(None),
    db: Session = Depends(get_db),
    _session=Depends(require_admin),
):
    slots.remove_assignment(db, product_id, slot_number, slot_type, bottleSize)
    return {"success": True}


@router.get("/products/{id}/slots", response_model=List[AssignmentOut])
def product_slots(id: int, db: Session = Depends(get_db), _session=Depends(require_admin)):
    return [to_assignment_out(a, db) for a in slots.list_for_product(db, id)]


@router.get("/products/{id}/available/{bottle_size}")
def available_quantity(id: int, bottle_size: BottleSize, db: Session = Depends(get_db), _session=Depends(require_admin)):
    product = inventory.get_product(db, id)
    return {
        "productId": product.id,
        "bottleSize": bottle_size.value,
        "stock": product.stock_of(bottle_size.variant),
        "available": slots.available_quantity(db, id, bottle_size),
    }
