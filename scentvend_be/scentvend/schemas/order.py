from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from scentvend.models.enums import BottleSize


class SprayOrderCreate(BaseModel):
    productId: int
    paymentMethod: str = "card"
    amount: Optional[int] = Field(default=None, ge=0)


class BottleOrderItemIn(BaseModel):
    productId: int
    bottleSize: BottleSize


class BottleOrderCreate(BaseModel):
    items: List[BottleOrderItemIn]
    paymentMethod: str = "card"


class GatewayOrderCreate(BaseModel):
    orderId: int
    currency: Optional[str] = None


class GatewayVerify(BaseModel):
    orderId: int
    gatewayOrderId: Optional[str] = None
    paymentId: Optional[str] = None
    signature: Optional[str] = None


OrderStatus = Literal["pending", "completed", "failed"]


class OrderItemOut(BaseModel):
    id: int
    productId: int
    variant: str
    quantity: int
    price: int
    slotNumber: Optional[int] = None
    decremented: bool


class OrderOut(BaseModel):
    id: int
    productId: int
    orderType: str
    paymentMethod: str
    amount: int
    status: OrderStatus
    gatewayOrderId: Optional[str] = None
    items: List[OrderItemOut]
    createdAt: str
    updatedAt: str


class PaymentResult(BaseModel):
    success: bool
    order: OrderOut
    message: str
