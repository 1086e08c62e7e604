"""Daily sales rollups for the admin dashboard."""
from calendar import monthrange
from collections import defaultdict
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from scentvend.models.base import insert_missing
from scentvend.models.enums import OrderType, VariantKind
from scentvend.models.order import Order
from scentvend.models.product import Product
from scentvend.models.sales import ProductSales, SalesSummary

VARIANT_COLUMNS = {
    VariantKind.SPRAY: "spray_quantity",
    VariantKind.ML30: "bottle_30ml_quantity",
    VariantKind.ML60: "bottle_60ml_quantity",
    VariantKind.ML100: "bottle_100ml_quantity",
}


def today() -> str:
    return datetime.utcnow().date().isoformat()


def record_sale(db: Session, order: Order, day: Optional[str] = None) -> None:
    """Fold one completed order into the day's rollups. Caller commits.

    Rows are created with an insert-if-missing and bumped with
    ``col = col + n`` so concurrent confirmations never collide.
    """
    day = day or today()
    if order.order_type == OrderType.BOTTLE.value:
        order_column = SalesSummary.bottle_orders
    else:
        order_column = SalesSummary.spray_orders
    insert_missing(
        db,
        SalesSummary,
        {"date": day, "total_revenue": 0, "total_orders": 0, "spray_orders": 0, "bottle_orders": 0},
        ["date"],
    )
    db.query(SalesSummary).filter(SalesSummary.date == day).update(
        {
            SalesSummary.total_revenue: SalesSummary.total_revenue + order.amount,
            SalesSummary.total_orders: SalesSummary.total_orders + 1,
            order_column: order_column + 1,
            SalesSummary.updated_at: datetime.utcnow(),
        },
        synchronize_session=False,
    )

    per_product = defaultdict(lambda: defaultdict(int))
    for item in order.items:
        totals = per_product[item.product_id]
        totals[VARIANT_COLUMNS[VariantKind(item.variant)]] += item.quantity
        totals["total_revenue"] += item.price * item.quantity
    for product_id, totals in per_product.items():
        insert_missing(
            db,
            ProductSales,
            {
                "product_id": product_id,
                "date": day,
                "spray_quantity": 0,
                "bottle_30ml_quantity": 0,
                "bottle_60ml_quantity": 0,
                "bottle_100ml_quantity": 0,
                "total_revenue": 0,
            },
            ["product_id", "date"],
        )
        increments = {getattr(ProductSales, col): getattr(ProductSales, col) + n for col, n in totals.items()}
        increments[ProductSales.updated_at] = datetime.utcnow()
        db.query(ProductSales).filter(
            ProductSales.product_id == product_id, ProductSales.date == day
        ).update(increments, synchronize_session=False)


def daily_report(db: Session, day: str) -> Optional[SalesSummary]:
    return db.query(SalesSummary).filter(SalesSummary.date == day).first()


def range_report(db: Session, start: str, end: str) -> List[SalesSummary]:
    return (
        db.query(SalesSummary)
        .filter(SalesSummary.date >= start, SalesSummary.date <= end)
        .order_by(SalesSummary.date.asc())
        .all()
    )


def monthly_report(db: Session, year: int, month: int) -> List[SalesSummary]:
    last_day = monthrange(year, month)[1]
    return range_report(db, f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{last_day:02d}")


def product_report(db: Session, product_id: int, start: str, end: str) -> List[ProductSales]:
    return (
        db.query(ProductSales)
        .filter(
            ProductSales.product_id == product_id,
            ProductSales.date >= start,
            ProductSales.date <= end,
        )
        .order_by(ProductSales.date.asc())
        .all()
    )


def analytics(db: Session, day: Optional[str] = None, top: int = 5) -> dict:
    day = day or today()
    summary = daily_report(db, day)
    rows = (
        db.query(ProductSales)
        .filter(ProductSales.date == day)
        .order_by(ProductSales.total_revenue.desc())
        .limit(top)
        .all()
    )
    names = {p.id: p.name for p in db.query(Product).filter(Product.id.in_([r.product_id for r in rows])).all()}
    total_orders = summary.total_orders if summary else 0
    total_revenue = summary.total_revenue if summary else 0
    return {
        "date": day,
        "totalRevenue": total_revenue,
        "totalOrders": total_orders,
        "averageOrderValue": (total_revenue / total_orders) if total_orders else 0,
        "sprayOrders": summary.spray_orders if summary else 0,
        "bottleOrders": summary.bottle_orders if summary else 0,
        "topProducts": [
            {
                "productId": r.product_id,
                "productName": names.get(r.product_id),
                "sales": r.spray_quantity + r.bottle_30ml_quantity + r.bottle_60ml_quantity + r.bottle_100ml_quantity,
                "revenue": r.total_revenue,
            }
            for r in rows
        ],
    }
