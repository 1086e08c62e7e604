from pydantic import BaseModel, Field
from typing import List, Optional

from scentvend.models.enums import BottleSize, SlotType


class SprayAssign(BaseModel):
    productId: int
    priority: int = Field(default=0, ge=0)


class BottleAssign(BaseModel):
    productId: int
    bottleSize: BottleSize
    priority: int = Field(default=0, ge=0)
    slotQuantity: int = Field(default=1, ge=1)


class AssignmentOut(BaseModel):
    id: int
    slotNumber: int
    slotType: SlotType
    productId: int
    productName: Optional[str] = None
    bottleSize: Optional[BottleSize] = None
    slotQuantity: int
    priority: int


class SlotOut(BaseModel):
    slotNumber: int
    slotType: SlotType
    assignments: List[AssignmentOut]


class UsageRecord(BaseModel):
    slotNumber: int
    slotType: SlotType
    productId: Optional[int] = None


class UsageOut(BaseModel):
    slotNumber: int
    slotType: SlotType
    productId: Optional[int] = None
    usageCount: int
    lastUsed: Optional[str] = None
