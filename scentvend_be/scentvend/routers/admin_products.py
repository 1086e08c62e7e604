from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from scentvend.errors import ProductNotFound
from scentvend.models.base import get_db
from scentvend.models.enums import VariantKind
from scentvend.routers.products import to_product_out
from scentvend.schemas.product import (
    BottleStockUpdate,
    PrimarySlotUpdate,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    SprayStockUpdate,
    to_columns,
)
from scentvend.services import inventory
from scentvend.utils.security import require_admin

router = APIRouter()


@router.get("/", response_model=List[ProductOut])
def list_all_products(db: Session = Depends(get_db), _session=Depends(require_admin)):
    """Every product, including ones hidden from the kiosk."""
    return [to_product_out(p) for p in inventory.list_all(db)]


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _session=Depends(require_admin)):
    return to_product_out(inventory.create_product(db, to_columns(payload)))


@router.put("/{id}", response_model=ProductOut)
def update_product(id: int, payload: ProductUpdate, db: Session = Depends(get_db), _session=Depends(require_admin)):
    return to_product_out(inventory.update_product(db, id, to_columns(payload)))


@router.delete("/{id}")
def delete_product(id: int, db: Session = Depends(get_db), _session=Depends(require_admin)):
    if not inventory.delete_product(db, id):
        raise ProductNotFound(id)
    return {"message": "Product deleted successfully"}


@router.put("/{id}/spray-stock", response_model=ProductOut)
def update_spray_stock(id: int, payload: SprayStockUpdate, db: Session = Depends(get_db), _session=Depends(require_admin)):
    return to_product_out(inventory.set_stock(db, id, VariantKind.SPRAY, payload.quantity))


@router.put("/{id}/bottle-stock", response_model=ProductOut)
def update_bottle_stock(id: int, payload: BottleStockUpdate, db: Session = Depends(get_db), _session=Depends(require_admin)):
    return to_product_out(inventory.set_stock(db, id, payload.bottleSize.variant, payload.quantity))


@router.put("/{id}/slot", response_model=ProductOut)
def update_primary_slot(id: int, payload: PrimarySlotUpdate, db: Session = Depends(get_db), _session=Depends(require_admin)):
    product = inventory.set_primary_slot(db, id, payload.slotType, payload.slotNumber, payload.bottleSize)
    return to_product_out(product)
