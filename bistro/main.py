"""
FastAPI Application Entry Point

Bistro Express - restaurant ordering and management API.

Endpoints:
    - GET /api/menu: Categories with available products
    - /api/categories, /api/products: Catalog administration
    - /api/customers: Customer directory
    - /api/orders: Order placement and kitchen workflow
    - /api/admin/sales: Daily sales report and Excel export
    - GET /health: System health check

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Optional

import redis
from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bistro.core.config import get_settings, setup_logging
from bistro.core.exceptions import BistroError
from bistro.database import engine, get_db, init_db
from bistro.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithProducts,
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
    DailySalesResponse,
    ErrorResponse,
    ExportQueuedResponse,
    HealthResponse,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from bistro.services.catalog import CatalogService
from bistro.services.customers import CustomerService
from bistro.services.excel_manager import ExcelManager
from bistro.services.orders import OrderService
from bistro.services.sales import SalesService
from bistro.tasks import export_sales_report_to_excel

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    logger.info(f"✅ Status workflow enforced: {settings.enforce_status_transitions}")
    logger.info(f"✅ Order totals verified: {settings.verify_order_totals}")

    if not settings.is_development:
        problems = settings.validate_production_config()
        if problems:
            logger.warning(f"⚠️ Configuration problems: {problems}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Restaurant ordering and management API: menu, orders, "
        "kitchen workflow and daily sales reports."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_customer_service(db: AsyncSession = Depends(get_db)) -> CustomerService:
    return CustomerService(db)


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_sales_service(db: AsyncSession = Depends(get_db)) -> SalesService:
    return SalesService(db)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍽️ Welcome to {settings.restaurant_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "menu": "/api/menu",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify the database and the Celery broker are reachable."""

    db_status = "healthy"
    try:
        await db.execute(select(1))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    redis_status = "healthy"
    try:
        r = redis.Redis.from_url(settings.redis_url, socket_timeout=2)
        r.ping()
        r.close()
    except Exception as e:
        redis_status = f"unhealthy: {str(e)}"
        logger.error(f"Redis health check failed: {e}")

    overall = "operational" if all(
        s == "healthy" for s in [db_status, redis_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# MENU & CATALOG ENDPOINTS
# =============================================================================

@app.get(
    "/api/menu",
    response_model=list[CategoryWithProducts],
    tags=["Menu"],
    summary="Menu (available products only)",
)
async def get_menu(
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CategoryWithProducts]:
    categories = await catalog.list_categories_with_available_products()
    return [CategoryWithProducts.model_validate(c) for c in categories]


@app.get(
    "/api/categories",
    response_model=list[CategoryWithProducts],
    tags=["Catalog"],
    summary="List Categories (all products)",
)
async def list_categories(
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CategoryWithProducts]:
    categories = await catalog.list_categories()
    return [CategoryWithProducts.model_validate(c) for c in categories]


@app.post(
    "/api/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def create_category(
    data: CategoryCreate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> CategoryResponse:
    category = await catalog.create_category(data)
    return CategoryResponse.model_validate(category)


@app.patch(
    "/api/categories/{category_id}",
    response_model=CategoryResponse,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> CategoryResponse:
    category = await catalog.update_category(category_id, data)
    return CategoryResponse.model_validate(category)


@app.delete(
    "/api/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def delete_category(
    category_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> Response:
    await catalog.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post(
    "/api/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def create_product(
    data: ProductCreate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductResponse:
    product = await catalog.create_product(data)
    return ProductResponse.model_validate(product)


@app.get(
    "/api/products/{product_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def get_product(
    product_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductResponse:
    product = await catalog.get_product(product_id)
    return ProductResponse.model_validate(product)


@app.patch(
    "/api/products/{product_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductResponse:
    product = await catalog.update_product(product_id, data)
    return ProductResponse.model_validate(product)


@app.post(
    "/api/products/{product_id}/toggle-availability",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def toggle_product_availability(
    product_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProductResponse:
    product = await catalog.toggle_product_availability(product_id)
    return ProductResponse.model_validate(product)


@app.delete(
    "/api/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["Catalog"],
)
async def delete_product(
    product_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> Response:
    await catalog.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# CUSTOMER ENDPOINTS
# =============================================================================

@app.get(
    "/api/customers",
    response_model=CustomerListResponse,
    tags=["Customers"],
)
async def list_customers(
    customers: CustomerService = Depends(get_customer_service),
) -> CustomerListResponse:
    return await customers.list_customers()


@app.post(
    "/api/customers",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Customers"],
)
async def create_customer(
    data: CustomerCreate,
    customers: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    customer = await customers.create_customer(data)
    return CustomerResponse.model_validate(customer)


@app.get(
    "/api/customers/{customer_id}",
    response_model=CustomerResponse,
    responses=ERROR_RESPONSES,
    tags=["Customers"],
)
async def get_customer(
    customer_id: int,
    customers: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    customer = await customers.get_customer(customer_id)
    return CustomerResponse.model_validate(customer)


@app.patch(
    "/api/customers/{customer_id}",
    response_model=CustomerResponse,
    responses=ERROR_RESPONSES,
    tags=["Customers"],
)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    customers: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    customer = await customers.update_customer(customer_id, data)
    return CustomerResponse.model_validate(customer)


@app.delete(
    "/api/customers/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["Customers"],
)
async def delete_customer(
    customer_id: int,
    customers: CustomerService = Depends(get_customer_service),
) -> Response:
    await customers.delete_customer(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# ORDER API ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Place Order",
)
async def create_order(
    order_data: OrderCreate,
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """
    Create a new PENDING order from a cart snapshot.

    The total is recomputed from the items; a mismatching total is rejected.
    """
    logger.info(
        f"Creating {order_data.order_type.value} order with {len(order_data.items)} line(s)"
    )
    order = await orders.create_order(order_data)
    return OrderResponse.model_validate(order)


@app.get(
    "/api/orders/active",
    response_model=OrderListResponse,
    tags=["Orders"],
    summary="Kitchen Queue",
)
async def list_active_orders(
    orders: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """Orders not yet completed, oldest first."""
    active = await orders.list_active_orders()
    return OrderListResponse(
        total=len(active),
        orders=[OrderResponse.model_validate(order) for order in active],
    )


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def get_order(
    order_id: int,
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Get a specific order by ID."""
    order = await orders.get_order(order_id)
    return OrderResponse.model_validate(order)


@app.patch(
    "/api/orders/{order_id}/status",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Set Order Status",
)
async def set_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await orders.set_order_status(order_id, update.status)
    return OrderResponse.model_validate(order)


@app.post(
    "/api/orders/{order_id}/advance",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Advance Order to Next Status",
)
async def advance_order(
    order_id: int,
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await orders.advance_order(order_id)
    return OrderResponse.model_validate(order)


# =============================================================================
# SALES REPORT ENDPOINTS
# =============================================================================

@app.get(
    "/api/admin/sales",
    response_model=DailySalesResponse,
    tags=["Sales"],
    summary="Daily Sales Report",
)
async def daily_sales(
    day: Optional[date] = Query(None, alias="date"),
    sales: SalesService = Depends(get_sales_service),
) -> DailySalesResponse:
    """Revenue, top products and hourly breakdown of a day's completed orders."""
    report = await sales.compute_daily_sales(day or date.today())
    return DailySalesResponse.model_validate(report)


@app.get(
    "/api/admin/sales/export",
    response_class=FileResponse,
    responses={503: {"model": ErrorResponse}},
    tags=["Sales"],
    summary="Download Daily Sales Report (Excel)",
)
async def download_sales_report(
    day: Optional[date] = Query(None, alias="date"),
    sales: SalesService = Depends(get_sales_service),
) -> Any:
    report = await sales.compute_daily_sales(day or date.today())
    result = await run_in_threadpool(ExcelManager.export_sales_report, report.to_dict())

    if not result["success"]:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ErrorResponse(error="Export Failed", detail=result["message"]).model_dump(),
        )

    return FileResponse(
        result["path"],
        media_type=XLSX_MEDIA_TYPE,
        filename=f"sales-report-{report.selected_date.isoformat()}.xlsx",
    )


@app.post(
    "/api/admin/sales/export",
    response_model=ExportQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    tags=["Sales"],
    summary="Queue Daily Sales Report Export",
)
async def queue_sales_report_export(
    day: Optional[date] = Query(None, alias="date"),
    sales: SalesService = Depends(get_sales_service),
) -> ExportQueuedResponse:
    report = await sales.compute_daily_sales(day or date.today())
    task = export_sales_report_to_excel.delay(report.to_dict())
    logger.info(f"Queued sales report export {report.selected_date} (task {task.id})")

    return ExportQueuedResponse(
        success=True,
        message="Sales report export queued",
        selected_date=report.selected_date,
        task_id=task.id,
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(BistroError)
async def domain_exception_handler(request: Request, exc: BistroError) -> JSONResponse:
    """Map domain errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )
