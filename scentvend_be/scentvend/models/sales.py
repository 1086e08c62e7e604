from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from datetime import datetime

from scentvend.models.base import Base


class SalesSummary(Base):
    __tablename__ = "sales_summary"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(String(10), unique=True, nullable=False, index=True)  # YYYY-MM-DD
    total_revenue = Column(Integer, nullable=False, default=0)
    total_orders = Column(Integer, nullable=False, default=0)
    spray_orders = Column(Integer, nullable=False, default=0)
    bottle_orders = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ProductSales(Base):
    __tablename__ = "product_sales"
    __table_args__ = (
        UniqueConstraint("product_id", "date", name="uq_product_sales_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)
    spray_quantity = Column(Integer, nullable=False, default=0)
    bottle_30ml_quantity = Column(Integer, nullable=False, default=0)
    bottle_60ml_quantity = Column(Integer, nullable=False, default=0)
    bottle_100ml_quantity = Column(Integer, nullable=False, default=0)
    total_revenue = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
