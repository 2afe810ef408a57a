"""
                        Services Module

Business logic, one service class per concern. Session-bound services
take the request's AsyncSession; the cart and the sales aggregation are
plain in-memory code.

Services:
    - catalog: Categories, products and the customer-facing menu
    - customers: Customer directory
    - cart: Ephemeral product selection before checkout
    - orders: Order creation and the status workflow
    - sales: Daily sales aggregation
    - excel_manager: Thread-safe Excel report export
"""

from bistro.services.cart import Cart, CartItem
from bistro.services.catalog import CatalogService
from bistro.services.customers import CustomerService
from bistro.services.excel_manager import ExcelManager
from bistro.services.orders import OrderService
from bistro.services.sales import DailySalesReport, SalesService, aggregate_daily_sales

__all__ = [
    "Cart",
    "CartItem",
    "CatalogService",
    "CustomerService",
    "ExcelManager",
    "OrderService",
    "SalesService",
    "DailySalesReport",
    "aggregate_daily_sales",
]
