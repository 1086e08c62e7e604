from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from scentvend.models.base import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    # First line's product; kept for quick listing in the admin dashboard
    product_id = Column(Integer, nullable=False, index=True)
    order_type = Column(String(10), nullable=False, default="spray")  # spray, bottle
    payment_method = Column(String(50), nullable=False)
    amount = Column(Integer, nullable=False)  # minor units
    status = Column(String(20), nullable=False, default="pending")  # pending, completed, failed
    gateway_order_id = Column(String(100), index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    variant = Column(String(10), nullable=False)  # spray, 30ml, 60ml, 100ml
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Integer, nullable=False)  # unit price at time of order
    slot_number = Column(Integer)  # slot the unit was dispensed from
    decremented = Column(Boolean, nullable=False, default=False)

    order = relationship("Order", back_populates="items")
