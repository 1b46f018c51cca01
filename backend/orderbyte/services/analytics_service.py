# Overview: Per-organization order analytics for a reporting period.

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timedelta

from ..extensions import db
from ..models import Order
from ..time_utils import start_of_utc_day, to_utc_z, utcnow
from .concurrency import serialized
from .order_service import VALID_STATUSES


PERIODS = ("today", "week", "month")
TOP_ITEMS_LIMIT = 5


def period_start(period: str, now: datetime) -> datetime:
    """
    today: since 00:00 UTC. week/month: rolling 7/30 days.
    Unknown periods fall back to today.
    """
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now - timedelta(days=30)
    return start_of_utc_day(now)


@serialized
def organization_summary(org_id: str, period: str = "today", *, now: datetime | None = None) -> dict:
    """
    Aggregate one organization's orders since the start of period.

    Cancelled orders count toward totalOrders and ordersByStatus but never
    toward revenue or top items.
    """
    if period not in PERIODS:
        period = "today"
    now = now or utcnow()
    since = period_start(period, now)

    orders = (
        db.session.query(Order)
        .filter(Order.organization_id == org_id, Order.created_at >= since)
        .all()
    )

    by_status = {status: 0 for status in VALID_STATUSES}
    revenue = 0
    billable = 0
    quantities: Counter[str] = Counter()
    item_revenue: dict[str, int] = defaultdict(int)
    item_names: dict[str, str] = {}

    for order in orders:
        by_status[order.status] = by_status.get(order.status, 0) + 1
        if order.status == "cancelled":
            continue
        billable += 1
        revenue += order.total_amount
        for line in order.lines:
            quantities[line.item_id] += line.quantity
            item_revenue[line.item_id] += line.line_total
            item_names.setdefault(line.item_id, line.name)

    top_items = [
        {
            "itemId": item_id,
            "name": item_names[item_id],
            "quantity": qty,
            "revenue": item_revenue[item_id],
        }
        for item_id, qty in sorted(quantities.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_ITEMS_LIMIT]
    ]

    return {
        "period": period,
        "since": to_utc_z(since),
        "totalOrders": len(orders),
        "totalRevenue": revenue,
        "avgOrderValue": round(revenue / billable) if billable else 0,
        "ordersByStatus": by_status,
        "topItems": top_items,
    }
