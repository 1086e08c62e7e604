from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from scentvend.models.base import get_db
from scentvend.models.product import Product
from scentvend.schemas.product import ProductOut
from scentvend.services import inventory

router = APIRouter()


def to_product_out(p: Product) -> ProductOut:
    return ProductOut(
        id=p.id,
        name=p.name,
        description=p.description or "",
        imageUrl=p.image_url or "",
        available=bool(p.available),
        price=p.price,
        price30ml=p.price_30ml,
        price60ml=p.price_60ml,
        price100ml=p.price_100ml,
        sprayStock=p.spray_stock,
        bottleStock30ml=p.bottle_stock_30ml,
        bottleStock60ml=p.bottle_stock_60ml,
        bottleStock100ml=p.bottle_stock_100ml,
        spraySlot=p.spray_slot,
        bottleSlot=p.bottle_slot,
        bottleSize=p.bottle_size,
    )


@router.get("/", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    """Products on sale at the kiosk (available only)."""
    return [to_product_out(p) for p in inventory.list_available(db)]


@router.get("/{id}", response_model=ProductOut)
def get_product(id: int, db: Session = Depends(get_db)):
    return to_product_out(inventory.get_product(db, id))
