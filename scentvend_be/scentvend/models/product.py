from sqlalchemy import Column, Integer, String, Boolean

from scentvend.models.base import Base
from scentvend.models.enums import VariantKind


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=False, default="")
    image_url = Column(String(500), nullable=False, default="")
    available = Column(Boolean, nullable=False, default=True)

    spray_stock = Column(Integer, nullable=False, default=100)
    bottle_stock_30ml = Column(Integer, nullable=False, default=20)
    bottle_stock_60ml = Column(Integer, nullable=False, default=20)
    bottle_stock_100ml = Column(Integer, nullable=False, default=20)

    # Prices in minor currency units
    price = Column(Integer, nullable=False)  # spray
    price_30ml = Column(Integer, nullable=False, default=2500)
    price_60ml = Column(Integer, nullable=False, default=4500)
    price_100ml = Column(Integer, nullable=False, default=6500)

    # Default/primary slots only; slot_assignments is authoritative
    spray_slot = Column(Integer)
    bottle_slot = Column(Integer)
    bottle_size = Column(String(10))

    def stock_of(self, variant: VariantKind) -> int:
        return int(getattr(self, STOCK_COLUMNS[variant]) or 0)

    def price_of(self, variant: VariantKind) -> int:
        return int(getattr(self, PRICE_COLUMNS[variant]) or 0)


STOCK_COLUMNS = {
    VariantKind.SPRAY: "spray_stock",
    VariantKind.ML30: "bottle_stock_30ml",
    VariantKind.ML60: "bottle_stock_60ml",
    VariantKind.ML100: "bottle_stock_100ml",
}

PRICE_COLUMNS = {
    VariantKind.SPRAY: "price",
    VariantKind.ML30: "price_30ml",
    VariantKind.ML60: "price_60ml",
    VariantKind.ML100: "price_100ml",
}
