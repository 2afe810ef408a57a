"""
Order Lifecycle Service

Creates orders from a cart snapshot and moves them through the kitchen
workflow:

    PENDING -> IN_PROGRESS -> READY -> COMPLETED

and PENDING, IN_PROGRESS or READY -> CANCELLED.

COMPLETED and CANCELLED are terminal. When
Settings.enforce_status_transitions is off, any recognized status may be
set from any other one.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from bistro.core.exceptions import (
    InvalidStatusTransition,
    NotFoundError,
    ValidationError,
)
from bistro.models import Customer, Order, OrderItem, OrderStatus, Product
from bistro.schemas import OrderCreate
from bistro.services.base import SessionService

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Kitchen dashboard: the single "next step" button per status
FORWARD_TRANSITIONS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.IN_PROGRESS,
    OrderStatus.IN_PROGRESS: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.COMPLETED,
}


def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    """
    Convert a raw status value to OrderStatus.

    Raises:
        ValidationError: If the value is not exactly one of the five status names
    """
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        valid = [s.value for s in OrderStatus]
        raise ValidationError(f"Invalid status '{value}'. Options: {valid}")


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """Next forward status, or None for terminal statuses."""
    return FORWARD_TRANSITIONS.get(status)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Whether the workflow allows moving from current to target."""
    return target == current or target in ALLOWED_TRANSITIONS[current]


def _order_query():
    return select(Order).options(
        selectinload(Order.items).selectinload(OrderItem.product),
    )


class OrderService(SessionService):
    """
    Order operations bound to one database session.

    Every write is a single commit; on failure the session is rolled back
    and the error re-raised as StorageError.
    """

    async def create_order(self, order_data: OrderCreate) -> Order:
        """
        Persist a new PENDING order and its items.

        Args:
            order_data: Validated cart snapshot

        Returns:
            The stored order with items and products loaded

        Raises:
            NotFoundError: Unknown product or customer
            ValidationError: Supplied total does not match the items
            StorageError: The commit failed
        """
        computed_total = order_data.items_total
        total = order_data.total if order_data.total is not None else computed_total

        if self.settings.verify_order_totals and total != computed_total:
            raise ValidationError(
                "Order total does not match items",
                detail=f"expected {computed_total}, got {total}",
            )

        product_ids = {item.product_id for item in order_data.items}
        result = await self.db.execute(select(Product.id).where(Product.id.in_(product_ids)))
        missing = product_ids - set(result.scalars().all())
        if missing:
            raise NotFoundError(f"Product(s) not found: {sorted(missing)}")

        if order_data.customer_id is not None:
            customer = await self.db.get(Customer, order_data.customer_id)
            if customer is None:
                raise NotFoundError(f"Customer #{order_data.customer_id} not found")

        new_order = Order(
            order_type=order_data.order_type,
            table_number=order_data.table_number,
            status=OrderStatus.PENDING,
            total=total,
            customer_id=order_data.customer_id,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in order_data.items
            ],
        )

        self.db.add(new_order)
        await self._commit(f"creating {order_data.order_type.value} order")

        logger.info(
            f"Order #{new_order.id} created "
            f"({new_order.order_type.value}, {len(order_data.items)} lines, total={total})"
        )
        return await self.get_order(new_order.id)

    async def get_order(self, order_id: int) -> Order:
        """
        Load one order with its items.

        Raises:
            NotFoundError: If the order does not exist
        """
        result = await self.db.execute(
            _order_query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return order

    async def list_active_orders(self) -> list[Order]:
        """Orders not yet completed, oldest first (kitchen queue)."""
        result = await self.db.execute(
            _order_query()
            .where(Order.status != OrderStatus.COMPLETED)
            .order_by(Order.created_at.asc(), Order.id.asc())
        )
        return list(result.scalars().all())

    async def set_order_status(
        self,
        order_id: int,
        new_status: Union[str, OrderStatus],
    ) -> Order:
        """
        Move an order to another status.

        Raises:
            ValidationError: Unrecognized status value
            NotFoundError: Unknown order
            InvalidStatusTransition: Edge not allowed by the workflow
            StorageError: The commit failed
        """
        target = parse_status(new_status)
        order = await self.get_order(order_id)
        current = order.status

        if target == current:
            return order

        if self.settings.enforce_status_transitions and not can_transition(current, target):
            raise InvalidStatusTransition(
                f"Order #{order_id} cannot move from {current.value} to {target.value}"
            )

        order.status = target
        await self._commit(f"updating order #{order_id}")

        logger.info(f"Order #{order_id}: {current.value} → {target.value}")
        return order

    async def advance_order(self, order_id: int) -> Order:
        """
        Move an order one step forward in the workflow.

        Raises:
            NotFoundError: Unknown order
            InvalidStatusTransition: The order is COMPLETED or CANCELLED
        """
        order = await self.get_order(order_id)
        target = next_status(order.status)
        if target is None:
            raise InvalidStatusTransition(
                f"Order #{order_id} is {order.status.value} and cannot advance"
            )
        return await self.set_order_status(order_id, target)

