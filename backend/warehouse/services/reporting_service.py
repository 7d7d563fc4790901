# Overview: Service-layer operations for dashboard reporting; read-only aggregates over orders and stock.

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import Brand, Product, SalesOrder, SalesOrderItem
from . import inventory_service
from .sales_service import STATUS_FULFILLED
from warehouse.time_utils import coerce_datetime, to_utc_z

RECENT_ORDER_DAYS = 30


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _fulfilled_sales_total_cents(start: datetime, end: datetime) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(SalesOrder.total_cents), 0))
        .filter(
            SalesOrder.status == STATUS_FULFILLED,
            SalesOrder.order_date >= start,
            SalesOrder.order_date <= end,
        )
        .scalar()
    )
    return int(total or 0)


def _recent_order_count(start: datetime, end: datetime) -> int:
    return (
        db.session.query(func.count(SalesOrder.id))
        .filter(SalesOrder.order_date >= start, SalesOrder.order_date <= end)
        .scalar()
        or 0
    )


def _top_by_revenue(group_column, name_column, start: datetime, end: datetime, *, by_brand: bool = False) -> dict | None:
    """Highest line revenue this period for one grouping; ties go to the lowest name."""
    revenue = func.sum(SalesOrderItem.line_total_cents).label("revenue_cents")
    query = (
        db.session.query(group_column.label("id"), name_column.label("name"), revenue)
        .select_from(SalesOrderItem)
        .join(SalesOrder, SalesOrderItem.sales_order_id == SalesOrder.id)
        .join(Product, SalesOrderItem.product_id == Product.id)
        .filter(
            SalesOrder.status == STATUS_FULFILLED,
            SalesOrder.order_date >= start,
            SalesOrder.order_date <= end,
        )
    )
    if by_brand:
        query = query.join(Brand, Product.brand_id == Brand.id)

    row = (
        query.group_by(group_column, name_column)
        .order_by(revenue.desc(), name_column.asc())
        .first()
    )
    if row is None or not row.revenue_cents:
        return None
    return {"id": row.id, "name": row.name, "revenue_cents": int(row.revenue_cents)}


def get_dashboard_metrics(*, as_of: str | datetime | None = None) -> dict:
    """
    Headline numbers for the dashboard, all money in cents:

    - inventory_value_cents: on-hand stock at most recent purchase cost
    - ytd_revenue_cents: fulfilled order totals since Jan 1
    - recent_orders_count: orders placed in the last 30 days
    - best_seller / top_brand: highest line revenue since the 1st of the
      month, or None when nothing sold
    """
    try:
        now = coerce_datetime(as_of, default_now=True)
    except ValueError:
        raise ReportError("as_of must be an ISO-8601 date or datetime")

    start_of_year = datetime(now.year, 1, 1)
    start_of_month = datetime(now.year, now.month, 1)

    valuation = inventory_service.get_inventory_value()

    return {
        "as_of": to_utc_z(now),
        "inventory_value_cents": valuation["total_value_cents"],
        "ytd_revenue_cents": _fulfilled_sales_total_cents(start_of_year, now),
        "recent_orders_count": _recent_order_count(now - timedelta(days=RECENT_ORDER_DAYS), now),
        "best_seller": _top_by_revenue(Product.id, Product.name, start_of_month, now),
        "top_brand": _top_by_revenue(Brand.id, Brand.name, start_of_month, now, by_brand=True),
    }
