"""
SQLAlchemy Database Models

Relational layout of the ordering system:
- Menu catalog (categories and products)
- Customers (optional owner of orders)
- Orders with price-snapshot order items

Author: Khalil Bannouri
Version: 1.0.0
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from bistro.database import Base


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OrderType(str, enum.Enum):
    """Order type - eat in or take away."""
    DINE_IN = "DINE_IN"
    TAKEAWAY = "TAKEAWAY"


class Category(Base):
    """Menu section, e.g. Appetizers or Beverages."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    products = relationship(
        "Product",
        back_populates="category",
        order_by="Product.name",
    )

    def __repr__(self):
        return f"<Category #{self.id} - {self.name}>"


class Product(Base):
    """
    Menu item.

    The price here is the current list price; orders keep their own
    snapshot in OrderItem.price.
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=True)
    available = Column(Boolean, default=True, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, onupdate=datetime.now, nullable=True)

    category = relationship("Category", back_populates="products")

    def __repr__(self):
        return f"<Product #{self.id} - {self.name} - {self.price}>"


class Customer(Base):
    """Known customer. Orders may also be placed anonymously."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=True, unique=True)
    name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    orders = relationship(
        "Order",
        back_populates="customer",
        order_by="Order.created_at.desc()",
    )

    def __repr__(self):
        return f"<Customer #{self.id} - {self.name or self.email or 'anonymous'}>"


class Order(Base):
    """
    Customer order.

    Items and total are fixed at creation; only the status moves afterwards.
    """
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # =========================================================================
    # ORDER TYPE
    # =========================================================================
    order_type = Column(Enum(OrderType), nullable=False, index=True)
    table_number = Column(String(20), nullable=True)

    # =========================================================================
    # ORDER STATUS
    # =========================================================================
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )

    # =========================================================================
    # PRICING
    # =========================================================================
    total = Column(Numeric(10, 2), nullable=False)

    # =========================================================================
    # CUSTOMER
    # =========================================================================
    customer_id = Column(
        Integer,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # =========================================================================
    # TIMESTAMPS (local wall-clock time)
    # =========================================================================
    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = Column(DateTime, onupdate=datetime.now, nullable=True)

    customer = relationship("Customer", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - {self.order_type.value} - {self.status.value} - {self.total}>"


class OrderItem(Base):
    """One cart line of an order, with the unit price at order time."""
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
        CheckConstraint("price >= 0", name="ck_order_items_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # snapshot of price at order time

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    @property
    def product_name(self):
        return self.product.name if self.product is not None else None

    @property
    def line_total(self):
        return self.price * self.quantity

    def __repr__(self):
        return f"<OrderItem #{self.id} - {self.quantity} x product {self.product_id} @ {self.price}>"
