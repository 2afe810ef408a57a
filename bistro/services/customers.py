"""
Customer Directory Service

Customers are optional: orders can be placed anonymously. Deleting a
customer keeps their orders and detaches them.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from bistro.core.exceptions import ConflictError, NotFoundError
from bistro.models import Customer, Order
from bistro.schemas import (
    CustomerCreate,
    CustomerListResponse,
    CustomerSummary,
    CustomerUpdate,
    OrderSummary,
)
from bistro.services.base import SessionService

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5


class CustomerService(SessionService):
    """Customer operations bound to one database session."""

    async def list_customers(self) -> CustomerListResponse:
        """
        Newest customers first, each with order count and latest orders.

        Returns:
            CustomerListResponse with directory-wide totals
        """
        result = await self.db.execute(
            select(Customer)
            .options(selectinload(Customer.orders))
            .order_by(Customer.created_at.desc(), Customer.id.desc())
            .execution_options(populate_existing=True)
        )
        customers = result.scalars().all()

        total_orders = await self.db.scalar(select(func.count(Order.id))) or 0

        return CustomerListResponse(
            total_customers=len(customers),
            total_orders=total_orders,
            customers=[
                CustomerSummary(
                    id=customer.id,
                    email=customer.email,
                    name=customer.name,
                    phone=customer.phone,
                    created_at=customer.created_at,
                    order_count=len(customer.orders),
                    recent_orders=[
                        OrderSummary.model_validate(order)
                        for order in customer.orders[:RECENT_ORDERS_LIMIT]
                    ],
                )
                for customer in customers
            ],
        )

    async def get_customer(self, customer_id: int) -> Customer:
        customer = await self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError(f"Customer #{customer_id} not found")
        return customer

    async def create_customer(self, data: CustomerCreate) -> Customer:
        await self._ensure_email_free(data.email)

        customer = Customer(**data.model_dump())
        self.db.add(customer)
        await self._commit("creating customer")
        logger.info(f"Customer #{customer.id} created")
        return customer

    async def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = await self.get_customer(customer_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("email"):
            await self._ensure_email_free(changes["email"], exclude_id=customer_id)

        for key, value in changes.items():
            setattr(customer, key, value)

        await self._commit(f"updating customer #{customer_id}")
        logger.info(f"Customer #{customer_id} updated: {sorted(changes)}")
        return customer

    async def delete_customer(self, customer_id: int) -> None:
        result = await self.db.execute(
            select(Customer)
            .options(selectinload(Customer.orders))
            .where(Customer.id == customer_id)
            .execution_options(populate_existing=True)
        )
        customer = result.scalar_one_or_none()
        if customer is None:
            raise NotFoundError(f"Customer #{customer_id} not found")

        detached = len(customer.orders)
        for order in customer.orders:
            order.customer_id = None

        await self.db.delete(customer)
        await self._commit(f"deleting customer #{customer_id}")
        logger.info(f"Customer #{customer_id} deleted ({detached} order(s) kept as anonymous)")

    async def _ensure_email_free(self, email: Optional[str], exclude_id: Optional[int] = None) -> None:
        if not email:
            return
        query = select(Customer.id).where(Customer.email == email)
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        if await self.db.scalar(query) is not None:
            raise ConflictError(f"A customer with email {email} already exists")
