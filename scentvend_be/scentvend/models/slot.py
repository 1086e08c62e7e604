from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime

from scentvend.models.base import Base


class SlotAssignment(Base):
    __tablename__ = "slot_assignments"
    __table_args__ = (
        UniqueConstraint("slot_type", "slot_number", "product_id", "bottle_size", name="uq_slot_product_size"),
    )

    id = Column(Integer, primary_key=True, index=True)
    slot_number = Column(Integer, nullable=False, index=True)
    slot_type = Column(String(10), nullable=False)  # spray (1-5), bottle (1-15)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    bottle_size = Column(String(10))  # bottle slots only
    slot_quantity = Column(Integer, nullable=False, default=1)  # units reserved in this slot
    priority = Column(Integer, nullable=False, default=0)  # higher dispenses first


class SlotUsage(Base):
    __tablename__ = "slot_usage_stats"
    __table_args__ = (
        UniqueConstraint("slot_type", "slot_number", name="uq_slot_usage"),
    )

    id = Column(Integer, primary_key=True, index=True)
    slot_number = Column(Integer, nullable=False)
    slot_type = Column(String(10), nullable=False)
    product_id = Column(Integer)
    usage_count = Column(Integer, nullable=False, default=0)
    last_used_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
