from enum import Enum


class VariantKind(str, Enum):
    """Unit of stock, pricing and slot assignment for a product."""
    SPRAY = "spray"
    ML30 = "30ml"
    ML60 = "60ml"
    ML100 = "100ml"

    @property
    def is_bottle(self) -> bool:
        return self is not VariantKind.SPRAY


class BottleSize(str, Enum):
    ML30 = "30ml"
    ML60 = "60ml"
    ML100 = "100ml"

    @property
    def variant(self) -> VariantKind:
        return VariantKind(self.value)


class SlotType(str, Enum):
    SPRAY = "spray"
    BOTTLE = "bottle"


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OrderType(str, Enum):
    SPRAY = "spray"
    BOTTLE = "bottle"


# Physical slot ranges of the machine
SLOT_RANGES = {
    SlotType.SPRAY: range(1, 6),
    SlotType.BOTTLE: range(1, 16),
}
