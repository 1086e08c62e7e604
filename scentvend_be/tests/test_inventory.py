"""Product/variant store: defaults, stock ceilings and the atomic decrement."""

import pytest

from scentvend.errors import (
    InsufficientAvailable,
    InsufficientStock,
    InvalidQuantity,
    InvalidSlot,
    LimitExceeded,
    ProductNotFound,
)
from scentvend.models.enums import BottleSize, SlotType, VariantKind
from scentvend.models.slot import SlotAssignment
from scentvend.services import inventory, slots


class TestCreateAndList:
    def test_defaults_are_trimmed_to_bottle_ceiling(self, make_product):
        p = make_product()
        assert p.spray_stock == 100
        assert p.bottle_stock_30ml == 20
        assert p.bottle_stock_60ml == 20
        assert p.bottle_stock_100ml == 20
        assert p.price_30ml == 2500
        assert p.available is True

    def test_explicit_stock_over_ceiling_rejected(self, db):
        with pytest.raises(LimitExceeded):
            inventory.create_product(db, {"name": "Oud", "price": 500, "bottle_stock_60ml": 25})

    def test_negative_stock_rejected(self, db):
        with pytest.raises(InvalidQuantity):
            inventory.create_product(db, {"name": "Oud", "price": 500, "spray_stock": -1})

    def test_list_available_hides_unavailable(self, db, make_product):
        shown = make_product()
        make_product(available=False)
        assert [p.id for p in inventory.list_available(db)] == [shown.id]
        assert len(inventory.list_all(db)) == 2

    def test_get_missing_product(self, db):
        with pytest.raises(ProductNotFound):
            inventory.get_product(db, 999)


class TestUpdateAndDelete:
    def test_shallow_merge(self, db, make_product):
        p = make_product(description="old")
        updated = inventory.update_product(db, p.id, {"name": "Amber Night", "price_60ml": 4000})
        assert updated.name == "Amber Night"
        assert updated.price_60ml == 4000
        assert updated.description == "old"

    def test_update_cannot_bypass_ceiling(self, db, make_product):
        p = make_product()
        with pytest.raises(LimitExceeded):
            inventory.update_product(db, p.id, {"name": "Changed", "bottle_stock_30ml": 21})
        db.expire_all()
        refreshed = inventory.get_product(db, p.id)
        assert refreshed.name != "Changed"
        assert refreshed.bottle_stock_30ml == 20

    def test_delete_drops_slot_assignments(self, db, make_product):
        p = make_product(bottle_stock_30ml=5)
        slots.assign_bottle(db, p.id, 3, BottleSize.ML30, slot_quantity=2)
        assert inventory.delete_product(db, p.id) is True
        assert db.query(SlotAssignment).count() == 0
        assert inventory.delete_product(db, p.id) is False


class TestSetStock:
    def test_bottle_ceiling(self, db, make_product):
        p = make_product()
        with pytest.raises(LimitExceeded):
            inventory.set_stock(db, p.id, VariantKind.ML60, 25)
        assert inventory.set_stock(db, p.id, VariantKind.ML60, 20).bottle_stock_60ml == 20

    def test_spray_has_no_ceiling(self, db, make_product):
        p = make_product()
        assert inventory.set_stock(db, p.id, VariantKind.SPRAY, 500).spray_stock == 500

    def test_negative_rejected(self, db, make_product):
        p = make_product()
        with pytest.raises(InvalidQuantity):
            inventory.set_stock(db, p.id, VariantKind.SPRAY, -3)

    def test_cannot_drop_below_reserved_units(self, db, make_product):
        p = make_product(bottle_stock_100ml=10)
        slots.assign_bottle(db, p.id, 1, BottleSize.ML100, slot_quantity=6)
        with pytest.raises(InsufficientAvailable):
            inventory.set_stock(db, p.id, VariantKind.ML100, 5)
        assert inventory.set_stock(db, p.id, VariantKind.ML100, 6).bottle_stock_100ml == 6

    def test_missing_product(self, db):
        with pytest.raises(ProductNotFound):
            inventory.set_stock(db, 42, VariantKind.SPRAY, 1)


class TestDecrement:
    def test_decrements_one_variant(self, db, make_product):
        p = make_product(spray_stock=10)
        updated = inventory.decrement_stock(db, p.id, VariantKind.SPRAY)
        db.commit()
        assert updated.spray_stock == 9
        assert updated.bottle_stock_30ml == 20

    def test_fails_closed_when_short(self, db, make_product):
        p = make_product(bottle_stock_30ml=1)
        inventory.decrement_stock(db, p.id, VariantKind.ML30)
        db.commit()
        with pytest.raises(InsufficientStock):
            inventory.decrement_stock(db, p.id, VariantKind.ML30)
        db.expire_all()
        assert inventory.get_product(db, p.id).bottle_stock_30ml == 0

    def test_amount_larger_than_stock(self, db, make_product):
        p = make_product(spray_stock=2)
        with pytest.raises(InsufficientStock):
            inventory.decrement_stock(db, p.id, VariantKind.SPRAY, 3)

    def test_missing_product(self, db):
        with pytest.raises(ProductNotFound):
            inventory.decrement_stock(db, 7, VariantKind.SPRAY)


class TestPrimarySlot:
    def test_spray_clears_bottle(self, db, make_product):
        p = make_product()
        inventory.set_primary_slot(db, p.id, SlotType.BOTTLE, 4, BottleSize.ML30)
        p = inventory.set_primary_slot(db, p.id, SlotType.SPRAY, 2)
        assert p.spray_slot == 2
        assert p.bottle_slot is None and p.bottle_size is None

    def test_range_checked(self, db, make_product):
        p = make_product()
        with pytest.raises(InvalidSlot):
            inventory.set_primary_slot(db, p.id, SlotType.SPRAY, 6)
        with pytest.raises(InvalidSlot):
            inventory.set_primary_slot(db, p.id, SlotType.BOTTLE, 3)
