from decimal import Decimal

import pytest

from bistro.core.exceptions import ConflictError, NotFoundError
from bistro.models import OrderType
from bistro.schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from bistro.services.cart import Cart
from bistro.services.catalog import CatalogService
from bistro.services.orders import OrderService


async def test_menu_hides_unavailable_products(db, menu):
    categories = await CatalogService(db).list_categories_with_available_products()

    assert [c.name for c in categories] == ["Desserts", "Main Courses"]
    assert [p.name for p in categories[1].products] == ["Ribeye Steak"]
    assert [p.name for p in categories[0].products] == ["Chocolate Cake"]


async def test_admin_listing_includes_unavailable_products(db, menu):
    categories = await CatalogService(db).list_categories()
    mains = next(c for c in categories if c.name == "Main Courses")
    assert [p.name for p in mains.products] == ["Grilled Salmon", "Ribeye Steak"]


async def test_empty_category_still_listed(db, menu):
    service = CatalogService(db)
    await service.create_category(CategoryCreate(name="Beverages"))

    categories = await service.list_categories_with_available_products()
    beverages = next(c for c in categories if c.name == "Beverages")
    assert beverages.products == []


async def test_create_product(db, menu):
    service = CatalogService(db)
    product = await service.create_product(
        ProductCreate(name="Tiramisu", price=Decimal("7.50"), category_id=menu["desserts"].id)
    )
    assert product.id is not None
    assert product.available is True

    categories = await service.list_categories_with_available_products()
    desserts = next(c for c in categories if c.name == "Desserts")
    assert [p.name for p in desserts.products] == ["Chocolate Cake", "Tiramisu"]


async def test_create_product_unknown_category(db):
    with pytest.raises(NotFoundError):
        await CatalogService(db).create_product(
            ProductCreate(name="Ghost", price=Decimal("1.00"), category_id=77)
        )


async def test_update_product_ignores_nulls_for_required_fields(db, menu):
    service = CatalogService(db)
    product = await service.update_product(
        menu["cake"].id,
        ProductUpdate(price=Decimal("9.49"), name=None, description="Rich and dark"),
    )
    assert product.name == "Chocolate Cake"
    assert product.price == Decimal("9.49")
    assert product.description == "Rich and dark"


async def test_update_product_moves_category(db, menu):
    service = CatalogService(db)
    product = await service.update_product(
        menu["cake"].id, ProductUpdate(category_id=menu["mains"].id)
    )
    assert product.category_id == menu["mains"].id

    with pytest.raises(NotFoundError):
        await service.update_product(menu["cake"].id, ProductUpdate(category_id=500))


async def test_toggle_availability(db, menu):
    service = CatalogService(db)

    product = await service.toggle_product_availability(menu["salmon"].id)
    assert product.available is True
    product = await service.toggle_product_availability(menu["salmon"].id)
    assert product.available is False


async def test_update_category(db, menu):
    category = await CatalogService(db).update_category(
        menu["desserts"].id, CategoryUpdate(description="Sweet things", name=None)
    )
    assert category.name == "Desserts"
    assert category.description == "Sweet things"


async def test_delete_category_with_products_conflicts(db, menu):
    with pytest.raises(ConflictError):
        await CatalogService(db).delete_category(menu["desserts"].id)


async def test_delete_empty_category(db):
    service = CatalogService(db)
    category = await service.create_category(CategoryCreate(name="Specials"))

    await service.delete_category(category.id)

    with pytest.raises(NotFoundError):
        await service.get_category(category.id)


async def test_delete_unordered_product(db, menu):
    service = CatalogService(db)
    await service.delete_product(menu["salmon"].id)

    with pytest.raises(NotFoundError):
        await service.get_product(menu["salmon"].id)


async def test_delete_ordered_product_conflicts(db, menu):
    cart = Cart()
    cart.add(menu["cake"])
    await OrderService(db).create_order(cart.to_order(OrderType.TAKEAWAY))

    with pytest.raises(ConflictError):
        await CatalogService(db).delete_product(menu["cake"].id)
