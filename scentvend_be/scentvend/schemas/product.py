from pydantic import BaseModel, Field
from typing import Optional

from scentvend.models.enums import BottleSize, SlotType


class ProductBase(BaseModel):
    name: str
    description: str = ""
    imageUrl: str = ""
    available: bool = True
    price: int = Field(ge=0)
    price30ml: Optional[int] = Field(default=None, ge=0)
    price60ml: Optional[int] = Field(default=None, ge=0)
    price100ml: Optional[int] = Field(default=None, ge=0)


class ProductCreate(ProductBase):
    sprayStock: Optional[int] = None
    bottleStock30ml: Optional[int] = None
    bottleStock60ml: Optional[int] = None
    bottleStock100ml: Optional[int] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    available: Optional[bool] = None
    price: Optional[int] = Field(default=None, ge=0)
    price30ml: Optional[int] = Field(default=None, ge=0)
    price60ml: Optional[int] = Field(default=None, ge=0)
    price100ml: Optional[int] = Field(default=None, ge=0)
    sprayStock: Optional[int] = None
    bottleStock30ml: Optional[int] = None
    bottleStock60ml: Optional[int] = None
    bottleStock100ml: Optional[int] = None


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    imageUrl: str
    available: bool
    price: int
    price30ml: int
    price60ml: int
    price100ml: int
    sprayStock: int
    bottleStock30ml: int
    bottleStock60ml: int
    bottleStock100ml: int
    spraySlot: Optional[int] = None
    bottleSlot: Optional[int] = None
    bottleSize: Optional[str] = None


class SprayStockUpdate(BaseModel):
    quantity: int


class BottleStockUpdate(BaseModel):
    bottleSize: BottleSize
    quantity: int


class PrimarySlotUpdate(BaseModel):
    slotType: SlotType
    slotNumber: int
    bottleSize: Optional[BottleSize] = None


# camelCase wire name -> column name
FIELD_COLUMNS = {
    "name": "name",
    "description": "description",
    "imageUrl": "image_url",
    "available": "available",
    "price": "price",
    "price30ml": "price_30ml",
    "price60ml": "price_60ml",
    "price100ml": "price_100ml",
    "sprayStock": "spray_stock",
    "bottleStock30ml": "bottle_stock_30ml",
    "bottleStock60ml": "bottle_stock_60ml",
    "bottleStock100ml": "bottle_stock_100ml",
}


def to_columns(payload: BaseModel) -> dict:
    data = payload.model_dump(exclude_unset=True)
    return {FIELD_COLUMNS[k]: v for k, v in data.items() if k in FIELD_COLUMNS}
