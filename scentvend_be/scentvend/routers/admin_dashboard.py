from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional

from scentvend.models.base import get_db
from scentvend.models.enums import OrderStatus
from scentvend.models.order import Order
from scentvend.models.product import Product
from scentvend.models.sales import ProductSales, SalesSummary
from scentvend.schemas.slot import UsageOut, UsageRecord
from scentvend.services import inventory, sales, usage
from scentvend.utils.security import require_admin


router = APIRouter()


def _summary_out(s: SalesSummary) -> dict:
    return {
        "date": s.date,
        "totalRevenue": s.total_revenue,
        "totalOrders": s.total_orders,
        "sprayOrders": s.spray_orders,
        "bottleOrders": s.bottle_orders,
    }


def _product_sales_out(r: ProductSales) -> dict:
    return {
        "productId": r.product_id,
        "date": r.date,
        "sprayQuantity": r.spray_quantity,
        "bottle30mlQuantity": r.bottle_30ml_quantity,
        "bottle60mlQuantity": r.bottle_60ml_quantity,
        "bottle100mlQuantity": r.bottle_100ml_quantity,
        "totalRevenue": r.total_revenue,
    }


@router.get("/dashboard/overview")
def get_dashboard_overview(db: Session = Depends(get_db), _session=Depends(require_admin)):
    products = db.query(Product).count()
    orders = db.query(Order).count()
    completed = db.query(Order).filter(Order.status == OrderStatus.COMPLETED.value).count()
    revenue = db.query(func.coalesce(func.sum(Order.amount), 0)).filter(
        Order.status == OrderStatus.COMPLETED.value
    ).scalar()
    return {"products": products, "orders": orders, "completedOrders": completed, "revenue": int(revenue or 0)}


@router.get("/heatmap")
def get_heatmap(db: Session = Depends(get_db), _session=Depends(require_admin)):
    return usage.snapshot(db)


@router.get("/usage-stats", response_model=List[UsageOut])
def get_usage_stats(db: Session = Depends(get_db), _session=Depends(require_admin)):
    return [
        UsageOut(
            slotNumber=u.slot_number,
            slotType=u.slot_type,
            productId=u.product_id,
            usageCount=u.usage_count,
            lastUsed=u.last_used_at.isoformat() if u.last_used_at else None,
        )
        for u in usage.list_usage(db)
    ]


# Manual dispense events reported by the machine controller
@router.post("/record-usage")
def record_usage(payload: UsageRecord, db: Session = Depends(get_db), _session=Depends(require_admin)):
    usage.record_usage(db, payload.slotNumber, payload.slotType, payload.productId)
    db.commit()
    return {"success": True}


@router.get("/sales/daily")
def daily_sales(
    date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    db: Session = Depends(get_db),
    _session=Depends(require_admin),
):
    day = date or sales.today()
    summary = sales.daily_report(db, day)
    if not summary:
        return {"date": day, "totalRevenue": 0, "totalOrders": 0, "sprayOrders": 0, "bottleOrders": 0}
    return _summary_out(summary)


@router.get("/sales/range")
def range_sales(
    start: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    end: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    db: Session = Depends(get_db),
    _session=Depends(require_admin),
):
    return [_summary_out(s) for s in sales.range_report(db, start, end)]


@router.get("/sales/monthly")
def monthly_sales(
    year: int = Query(..., ge=2000),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
    _session=Depends(require_admin),
):
    return [_summary_out(s) for s in sales.monthly_report(db, year, month)]


@router.get("/sales/products/{id}")
def product_sales(
    id: int,
    start: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    end: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    db: Session = Depends(get_db),
    _session=Depends(require_admin),
):
    inventory.get_product(db, id)
    return [_product_sales_out(r) for r in sales.product_report(db, id, start, end)]


@router.get("/sales/analytics")
def sales_analytics(
    date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    db: Session = Depends(get_db),
    _session=Depends(require_admin),
):
    return sales.analytics(db, date)
