"""
Menu Catalog Service

Category and product administration plus the customer-facing menu.

Deletion policy: a category that still owns products, or a product that
appears on any order, cannot be deleted (ConflictError). Products can be
hidden from the menu with the availability flag instead.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from bistro.core.exceptions import ConflictError, NotFoundError
from bistro.models import Category, OrderItem, Product
from bistro.schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from bistro.services.base import SessionService

logger = logging.getLogger(__name__)


class CatalogService(SessionService):
    """Catalog operations bound to one database session."""

    # =========================================================================
    # MENU
    # =========================================================================

    async def list_categories_with_available_products(self) -> list[Category]:
        """Menu shown to customers: every category, available products only."""
        result = await self.db.execute(
            select(Category)
            .options(selectinload(Category.products.and_(Product.available.is_(True))))
            .order_by(Category.name.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_categories(self) -> list[Category]:
        """Admin view: every category with every product."""
        result = await self.db.execute(
            select(Category)
            .options(selectinload(Category.products))
            .order_by(Category.name.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    async def get_category(self, category_id: int) -> Category:
        category = await self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError(f"Category #{category_id} not found")
        return category

    async def create_category(self, data: CategoryCreate) -> Category:
        category = Category(name=data.name, description=data.description)
        self.db.add(category)
        await self._commit("creating category")
        logger.info(f"Category #{category.id} '{category.name}' created")
        return category

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Category:
        category = await self.get_category(category_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key == "name":
                continue
            setattr(category, key, value)
        await self._commit(f"updating category #{category_id}")
        logger.info(f"Category #{category_id} updated")
        return category

    async def delete_category(self, category_id: int) -> None:
        category = await self.get_category(category_id)

        product_count = await self.db.scalar(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        )
        if product_count:
            raise ConflictError(
                f"Category #{category_id} still has {product_count} product(s)",
                detail="move or delete them first",
            )

        await self.db.delete(category)
        await self._commit(f"deleting category #{category_id}")
        logger.info(f"Category #{category_id} deleted")

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    async def get_product(self, product_id: int) -> Product:
        product = await self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError(f"Product #{product_id} not found")
        return product

    async def create_product(self, data: ProductCreate) -> Product:
        await self.get_category(data.category_id)

        product = Product(**data.model_dump())
        self.db.add(product)
        await self._commit("creating product")
        logger.info(f"Product #{product.id} '{product.name}' created at {product.price}")
        return product

    async def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("category_id") is not None:
            await self.get_category(changes["category_id"])

        for key, value in changes.items():
            # Explicit nulls only clear optional columns
            if value is None and key in ("name", "price", "available", "category_id"):
                continue
            setattr(product, key, value)

        await self._commit(f"updating product #{product_id}")
        logger.info(f"Product #{product_id} updated: {sorted(changes)}")
        return product

    async def toggle_product_availability(self, product_id: int) -> Product:
        product = await self.get_product(product_id)
        product.available = not product.available
        await self._commit(f"toggling product #{product_id}")
        logger.info(f"Product #{product_id} available={product.available}")
        return product

    async def delete_product(self, product_id: int) -> None:
        product = await self.get_product(product_id)

        ordered = await self.db.scalar(
            select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
        )
        if ordered:
            raise ConflictError(
                f"Product #{product_id} appears on {ordered} order item(s)",
                detail="mark it unavailable instead",
            )

        await self.db.delete(product)
        await self._commit(f"deleting product #{product_id}")
        logger.info(f"Product #{product_id} deleted")

