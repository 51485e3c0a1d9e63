"""
Dashboard statistics over the order history.
"""

from __future__ import annotations

import calendar
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Tuple

from .history import remaining_of
from .models import FinalizedOrder
from .values import parse_money


@dataclass(frozen=True)
class DashboardStats:
    total_orders: int = 0
    today_orders: int = 0
    unpaid_orders: int = 0
    total_revenue: int = 0
    month_revenue: int = 0
    remaining_amount: int = 0
    total_customers: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _day_range(now: datetime) -> Tuple[str, str]:
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(hour=23, minute=59, second=59, microsecond=999000)
    return _iso(start), _iso(end)


def _month_range(now: datetime) -> Tuple[str, str]:
    last_day = calendar.monthrange(now.year, now.month)[1]
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999000)
    return _iso(start), _iso(end)


def compute_stats(
    orders: Sequence[FinalizedOrder], now: Optional[datetime] = None
) -> DashboardStats:
    """Aggregate counts and amounts for the dashboard.

    Day and month windows are compared as ISO strings in UTC, which is how
    ``createdAt`` is stored.
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    day_start, day_end = _day_range(now)
    month_start, month_end = _month_range(now)

    today = unpaid = revenue = month_revenue = outstanding = 0
    customers = set()

    for order in orders:
        created = order.created_at or ""
        total = parse_money(order.total_amount)

        if day_start <= created <= day_end:
            today += 1
        revenue += total
        if month_start <= created <= month_end:
            month_revenue += total
        if order.customer.phone:
            customers.add(order.customer.phone)

        remaining = remaining_of(order)
        if remaining > 0:
            unpaid += 1
            outstanding += remaining

    return DashboardStats(
        total_orders=len(orders),
        today_orders=today,
        unpaid_orders=unpaid,
        total_revenue=revenue,
        month_revenue=month_revenue,
        remaining_amount=outstanding,
        total_customers=len(customers),
    )


def unpaid_orders_by_remaining(
    orders: Sequence[FinalizedOrder], limit: int = 5
) -> Tuple[FinalizedOrder, ...]:
    """Orders with an outstanding balance, largest balance first."""
    unpaid = [o for o in orders if remaining_of(o) > 0]
    unpaid.sort(key=remaining_of, reverse=True)
    return tuple(unpaid[:limit])
