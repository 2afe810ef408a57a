"""
Daily Sales Aggregation

Turns one calendar day's completed orders into:
- Summary statistics (revenue, order count, average, dine-in/takeaway split)
- Top-selling products by quantity
- Hourly breakdown (hours without orders are omitted)

aggregate_daily_sales() is a pure function of its inputs; SalesService
only loads the day's orders and hands them over.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from bistro.models import Order, OrderItem, OrderStatus, OrderType
from bistro.services.base import SessionService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")
# Windows are half-open: start <= created_at < end
ONE_DAY = timedelta(days=1)
ONE_HOUR = timedelta(hours=1)


@dataclass
class SalesStatistics:
    total_revenue: Decimal
    total_orders: int
    average_order_value: Decimal
    dine_in_orders: int
    takeaway_orders: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_revenue": float(self.total_revenue),
            "total_orders": self.total_orders,
            "average_order_value": float(self.average_order_value),
            "dine_in_orders": self.dine_in_orders,
            "takeaway_orders": self.takeaway_orders,
        }


@dataclass
class ProductSales:
    name: str
    quantity: int
    revenue: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity, "revenue": float(self.revenue)}


@dataclass
class HourlySales:
    hour: str
    orders: int
    revenue: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"hour": self.hour, "orders": self.orders, "revenue": float(self.revenue)}


@dataclass
class DailySalesReport:
    """
    Sales report for one day.

    Attributes:
        selected_date: The calendar day covered
        statistics: Summary figures
        top_products: Best sellers by quantity
        hourly_breakdown: Per-hour order counts and revenue
        orders: The day's completed orders, newest first
    """
    selected_date: date
    statistics: SalesStatistics
    top_products: list[ProductSales] = field(default_factory=list)
    hourly_breakdown: list[HourlySales] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain types for JSON serialization (Celery, Excel)."""
        return {
            "date": self.selected_date.isoformat(),
            "statistics": self.statistics.to_dict(),
            "top_products": [p.to_dict() for p in self.top_products],
            "hourly_breakdown": [h.to_dict() for h in self.hourly_breakdown],
            "orders": [
                {
                    "id": order.id,
                    "created_at": order.created_at.isoformat(),
                    "order_type": order.order_type.value,
                    "table_number": order.table_number,
                    "status": order.status.value,
                    "total": float(order.total),
                    "items": [
                        {
                            "product_name": item.product_name,
                            "quantity": item.quantity,
                            "price": float(item.price),
                        }
                        for item in order.items
                    ],
                }
                for order in self.orders
            ],
        }


# =============================================================================
# TIME WINDOWS
# =============================================================================

def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Start of a calendar day and start of the next one."""
    start = datetime.combine(day, time.min)
    return start, start + ONE_DAY


def hour_bounds(day: date, hour: int) -> tuple[datetime, datetime]:
    """Start of one hour of a calendar day and start of the next hour."""
    start = datetime.combine(day, time(hour=hour))
    return start, start + ONE_HOUR


# =============================================================================
# AGGREGATION
# =============================================================================

def select_completed_orders(orders: Iterable[Order], day: date) -> list[Order]:
    """Completed orders created within the day, newest first."""
    start, end = day_bounds(day)
    selected = [
        order for order in orders
        if order.status == OrderStatus.COMPLETED and start <= order.created_at < end
    ]
    return sorted(selected, key=lambda order: order.created_at, reverse=True)


def summarize(orders: list[Order]) -> SalesStatistics:
    total_revenue = sum((order.total for order in orders), ZERO)
    total_orders = len(orders)
    average = (total_revenue / total_orders).quantize(CENT, ROUND_HALF_UP) if total_orders else ZERO

    return SalesStatistics(
        total_revenue=total_revenue,
        total_orders=total_orders,
        average_order_value=average,
        dine_in_orders=sum(1 for order in orders if order.order_type == OrderType.DINE_IN),
        takeaway_orders=sum(1 for order in orders if order.order_type == OrderType.TAKEAWAY),
    )


def rank_products(orders: list[Order], limit: int = 5) -> list[ProductSales]:
    """
    Group order items by product name and rank by quantity sold.

    Orders are walked oldest first so products that tie on quantity keep
    the order in which they were first sold.
    """
    sales: dict[str, ProductSales] = {}
    for order in sorted(orders, key=lambda o: o.created_at):
        for item in order.items:
            name = item.product_name
            entry = sales.get(name)
            if entry is None:
                sales[name] = ProductSales(name=name, quantity=item.quantity, revenue=item.price * item.quantity)
            else:
                entry.quantity += item.quantity
                entry.revenue += item.price * item.quantity

    # sorted() is stable
    ranked = sorted(sales.values(), key=lambda p: p.quantity, reverse=True)
    return ranked[:limit]


def hourly_breakdown(orders: list[Order], day: date) -> list[HourlySales]:
    breakdown = []
    for hour in range(24):
        start, end = hour_bounds(day, hour)
        hour_orders = [order for order in orders if start <= order.created_at < end]
        if not hour_orders:
            continue
        breakdown.append(
            HourlySales(
                hour=f"{hour:02d}:00",
                orders=len(hour_orders),
                revenue=sum((order.total for order in hour_orders), ZERO),
            )
        )
    return breakdown


def aggregate_daily_sales(orders: Iterable[Order], day: date, top_limit: int = 5) -> DailySalesReport:
    """
    Build the sales report for one day.

    Args:
        orders: Candidate orders; anything not COMPLETED on `day` is ignored
        day: Local calendar date
        top_limit: How many products to keep in the ranking

    Returns:
        DailySalesReport
    """
    day_orders = select_completed_orders(orders, day)
    return DailySalesReport(
        selected_date=day,
        statistics=summarize(day_orders),
        top_products=rank_products(day_orders, top_limit),
        hourly_breakdown=hourly_breakdown(day_orders, day),
        orders=day_orders,
    )


class SalesService(SessionService):
    """Loads a day's completed orders and aggregates them."""

    async def load_completed_orders(self, day: date) -> list[Order]:
        start, end = day_bounds(day)
        result = await self.db.execute(
            select(Order)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.customer),
            )
            .where(
                Order.status == OrderStatus.COMPLETED,
                Order.created_at >= start,
                Order.created_at < end,
            )
            .order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())

    async def compute_daily_sales(self, day: date) -> DailySalesReport:
        orders = await self.load_completed_orders(day)
        report = aggregate_daily_sales(orders, day, self.settings.top_products_limit)
        logger.info(
            f"Sales for {day.isoformat()}: {report.statistics.total_orders} orders, "
            f"revenue={report.statistics.total_revenue}"
        )
        return report
