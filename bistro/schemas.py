"""
Pydantic Schemas for Request/Response Validation

Covers:
- Catalog administration (categories, products)
- Customers
- Order placement and status updates
- Daily sales reports

Author: Khalil Bannouri
Version: 1.0.0
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional
import re

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator

from bistro.models import OrderStatus, OrderType


# Decimals travel as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# =============================================================================
# CATALOG SCHEMAS
# =============================================================================

class CategoryCreate(BaseModel):
    """Request schema for creating a menu category."""
    name: str = Field(..., min_length=1, max_length=100, examples=["Appetizers"])
    description: Optional[str] = Field(None, max_length=500)


class CategoryUpdate(BaseModel):
    """Partial category update; only fields sent are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class ProductCreate(BaseModel):
    """Request schema for creating a product."""
    name: str = Field(..., min_length=1, max_length=100, examples=["Caesar Salad"])
    description: Optional[str] = Field(None, max_length=500)
    price: Money = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[12.99])
    image: Optional[str] = Field(None, max_length=500)
    available: bool = True
    category_id: int = Field(..., ge=1)


class ProductUpdate(BaseModel):
    """Partial product update; only fields sent are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    image: Optional[str] = Field(None, max_length=500)
    available: Optional[bool] = None
    category_id: Optional[int] = Field(None, ge=1)


class ProductResponse(BaseModel):
    """Response schema for a single product."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    price: Money
    image: Optional[str]
    available: bool
    category_id: int


class CategoryResponse(BaseModel):
    """Response schema for a category without its products."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]


class CategoryWithProducts(CategoryResponse):
    """Category with its (possibly filtered) products."""
    products: List[ProductResponse]


# =============================================================================
# CUSTOMER SCHEMAS
# =============================================================================

class CustomerCreate(BaseModel):
    """Request schema for registering a customer."""
    email: Optional[str] = Field(None, max_length=255, examples=["john@example.com"])
    name: Optional[str] = Field(None, max_length=100, examples=["John Doe"])
    phone: Optional[str] = Field(None, max_length=20, examples=["555-123-4567"])

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        # Basic email validation
        if not re.match(r'^[\w\.\+-]+@[\w\.-]+\.\w+$', v):
            raise ValueError('Invalid email format')
        return v.lower()


class CustomerUpdate(CustomerCreate):
    """Partial customer update; only fields sent are changed."""


class CustomerResponse(BaseModel):
    """Response schema for a single customer."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str]
    name: Optional[str]
    phone: Optional[str]
    created_at: datetime


class OrderSummary(BaseModel):
    """Compact order row used in customer listings."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_type: OrderType
    status: OrderStatus
    total: Money
    created_at: datetime


class CustomerSummary(CustomerResponse):
    """Customer with order count and most recent orders."""
    order_count: int
    recent_orders: List[OrderSummary]


class CustomerListResponse(BaseModel):
    """Response for the customer directory."""
    total_customers: int
    total_orders: int
    customers: List[CustomerSummary]


# =============================================================================
# ORDER SCHEMAS
# =============================================================================

class OrderItemCreate(BaseModel):
    """Single cart line submitted with an order."""
    product_id: int = Field(..., ge=1, examples=[1])
    quantity: int = Field(..., ge=1, examples=[2])
    price: Money = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[12.99])

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class OrderCreate(BaseModel):
    """
    Request schema for placing an order.

    A dine-in order needs a table number; a takeaway order never keeps one.
    The total is optional: when omitted it is computed from the items.
    """
    order_type: OrderType = Field(..., examples=["DINE_IN"])
    table_number: Optional[str] = Field(None, max_length=20, examples=["12"])
    items: List[OrderItemCreate] = Field(..., min_length=1)
    total: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    customer_id: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_table_number(self) -> "OrderCreate":
        if self.order_type == OrderType.DINE_IN:
            if self.table_number is None or not self.table_number.strip():
                raise ValueError("Table number is required for dine-in orders")
            self.table_number = self.table_number.strip()
        else:
            self.table_number = None
        return self

    @property
    def items_total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))


class OrderStatusUpdate(BaseModel):
    """Request to move an order to another status."""
    # Plain string so unknown values reach the workflow check
    status: str = Field(..., examples=["IN_PROGRESS"])


class OrderItemResponse(BaseModel):
    """Single item in an order response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: Optional[str]
    quantity: int
    price: Money


class OrderResponse(BaseModel):
    """Response schema for a single order."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_type: OrderType
    table_number: Optional[str]
    status: OrderStatus
    total: Money
    customer_id: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime]
    items: List[OrderItemResponse]


class OrderListResponse(BaseModel):
    """Response for listing multiple orders."""
    total: int
    orders: List[OrderResponse]


# =============================================================================
# SALES REPORT SCHEMAS
# =============================================================================

class SalesStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_revenue: Money
    total_orders: int
    average_order_value: Money
    dine_in_orders: int
    takeaway_orders: int


class ProductSalesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    quantity: int
    revenue: Money


class HourlySalesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hour: str
    orders: int
    revenue: Money


class DailySalesResponse(BaseModel):
    """Daily sales report."""
    model_config = ConfigDict(from_attributes=True)

    selected_date: date
    statistics: SalesStatisticsResponse
    top_products: List[ProductSalesResponse]
    hourly_breakdown: List[HourlySalesResponse]
    orders: List[OrderResponse]


class ExportQueuedResponse(BaseModel):
    """Response after queuing a report export."""
    success: bool
    message: str
    selected_date: date
    task_id: str


# =============================================================================
# GENERIC RESPONSES
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    timestamp: datetime
