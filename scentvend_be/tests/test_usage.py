import pytest

from scentvend.errors import InvalidSlot
from scentvend.models.enums import BottleSize, SlotType
from scentvend.models.slot import SlotUsage
from scentvend.services import slots, usage


@pytest.mark.parametrize(
    "score,level",
    [(0, "cold"), (24, "cold"), (25, "warm"), (49, "warm"), (50, "hot"), (74, "hot"), (75, "very-hot"), (100, "very-hot")],
)
def test_heat_level_bands(score, level):
    assert usage.heat_level(score) == level


def test_heat_level_never_cools_as_score_rises():
    order = ["cold", "warm", "hot", "very-hot"]
    ranks = [order.index(usage.heat_level(s)) for s in range(0, 101)]
    assert ranks == sorted(ranks)


def test_popularity_is_relative_to_busiest_slot():
    assert usage.popularity_score(0, 0) == 0
    assert usage.popularity_score(5, 10) == 50
    assert usage.popularity_score(10, 10) == 100
    assert usage.popularity_score(3, 0) == 0


def test_record_usage_accumulates(db, make_product):
    p = make_product()
    usage.record_usage(db, 4, SlotType.BOTTLE, p.id)
    row = usage.record_usage(db, 4, SlotType.BOTTLE)
    db.commit()
    assert row.usage_count == 2
    assert row.product_id == p.id
    assert row.last_used_at is not None


def test_record_usage_rejects_unknown_slot(db):
    with pytest.raises(InvalidSlot):
        usage.record_usage(db, 6, SlotType.SPRAY)


def test_snapshot_shape(db, make_product):
    p = make_product(name="Vetiver", spray_stock=42, bottle_stock_60ml=8)
    slots.assign_spray(db, p.id, 1)
    slots.assign_bottle(db, p.id, 2, BottleSize.ML60, slot_quantity=3)
    for _ in range(4):
        usage.record_usage(db, 1, SlotType.SPRAY, p.id)
    usage.record_usage(db, 2, SlotType.BOTTLE, p.id)
    db.commit()

    heat = usage.snapshot(db)

    assert len(heat["spraySlots"]) == 5
    assert len(heat["bottleSlots"]) == 15
    spray = heat["spraySlots"][0]
    assert spray["productName"] == "Vetiver"
    assert spray["stock"] == 42
    assert spray["usageCount"] == 4
    assert spray["popularityScore"] == 100
    assert spray["heatLevel"] == "very-hot"
    bottle = heat["bottleSlots"][1]
    assert bottle["bottleSize"] == "60ml"
    assert bottle["stock"] == 3
    assert bottle["popularityScore"] == 25
    assert bottle["heatLevel"] == "warm"
    empty = heat["bottleSlots"][14]
    assert empty["productId"] is None
    assert empty["heatLevel"] == "cold"
    assert empty["lastUsed"] is None


def test_record_usage_on_existing_row(db, make_product):
    p = make_product()
    db.add(SlotUsage(slot_number=3, slot_type="spray", usage_count=5))
    db.commit()

    row = usage.record_usage(db, 3, SlotType.SPRAY, p.id)
    db.commit()

    assert row.usage_count == 6
    assert db.query(SlotUsage).count() == 1
