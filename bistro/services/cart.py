"""
Shopping Cart

In-progress selection of products before checkout. A Cart is a plain
value object owned by whoever builds the order (a session, a request,
a script); it is never persisted and never shared.

Usage:
    cart = Cart()
    cart.add(product)
    cart.add(product)          # same product -> quantity 2
    cart.remove(product.id)    # back to quantity 1
    payload = cart.to_order(OrderType.TAKEAWAY)

Author: Khalil Bannouri
Version: 1.0.0
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from bistro.models import OrderType
from bistro.schemas import OrderCreate, OrderItemCreate


@dataclass
class CartItem:
    """
    One product line in the cart.

    Attributes:
        product_id: Catalog id of the product
        name: Product name at the time it was added
        price: Unit price at the time it was added
        quantity: Number of units, always at least 1
        image: Optional image URL for display
    """
    product_id: int
    name: str
    price: Decimal
    quantity: int = 1
    image: Optional[str] = None

    def __post_init__(self) -> None:
        self.price = Decimal(str(self.price))
        if self.quantity < 1:
            raise ValueError("Cart item quantity must be at least 1")
        if self.price < 0:
            raise ValueError("Cart item price cannot be negative")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": float(self.price),
            "quantity": self.quantity,
            "image": self.image,
        }


class Cart:
    """Ordered collection of CartItems keyed by product id."""

    def __init__(self) -> None:
        self._items: dict[int, CartItem] = {}

    def add(self, product: Any) -> CartItem:
        """
        Add one unit of a product.

        Args:
            product: Anything exposing id, name, price and (optionally) image,
                e.g. a Product row or a ProductResponse

        Returns:
            The cart line for that product
        """
        item = self._items.get(product.id)
        if item is not None:
            item.quantity += 1
            return item

        item = CartItem(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image=getattr(product, "image", None),
        )
        self._items[product.id] = item
        return item

    def remove(self, product_id: int) -> Optional[CartItem]:
        """
        Remove one unit of a product.

        A line at quantity 1 is dropped entirely. Removing a product that
        is not in the cart does nothing.

        Returns:
            The remaining cart line, or None if the line is gone
        """
        item = self._items.get(product_id)
        if item is None:
            return None
        if item.quantity > 1:
            item.quantity -= 1
            return item
        del self._items[product_id]
        return None

    def quantity_of(self, product_id: int) -> int:
        item = self._items.get(product_id)
        return item.quantity if item is not None else 0

    def total(self) -> Decimal:
        """Sum of price x quantity over all lines."""
        return sum((item.line_total for item in self._items.values()), Decimal("0"))

    def item_count(self) -> int:
        """Sum of quantities over all lines."""
        return sum(item.quantity for item in self._items.values())

    @property
    def items(self) -> list[CartItem]:
        """Cart lines in the order they were first added."""
        return list(self._items.values())

    @property
    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items.clear()

    def to_order(
        self,
        order_type: OrderType,
        table_number: Optional[str] = None,
        customer_id: Optional[int] = None,
    ) -> OrderCreate:
        """
        Snapshot the cart into an order payload.

        Raises:
            pydantic.ValidationError: If the cart is empty or a dine-in
                order has no table number
        """
        return OrderCreate(
            order_type=order_type,
            table_number=table_number,
            customer_id=customer_id,
            total=self.total(),
            items=[
                OrderItemCreate(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in self._items.values()
            ],
        )

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._items

    def __repr__(self) -> str:
        return f"<Cart {self.item_count()} items - {self.total()}>"
