"""
Catalog Seed Script

Creates the tables and loads the starter menu (4 categories, 9 products).
Does nothing if the catalog already has categories.
Run from project root: python scripts/seed.py

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from bistro.core.config import get_settings, setup_logging
from bistro.database import async_session_maker, engine, init_db
from bistro.schemas import CategoryCreate, ProductCreate
from bistro.services.catalog import CatalogService

MENU = [
    {
        "name": "Appetizers",
        "description": "Start your meal with our delicious appetizers",
        "products": [
            ("Caesar Salad", "Fresh romaine lettuce with parmesan cheese and croutons", "12.99"),
            ("Buffalo Wings", "Spicy chicken wings served with blue cheese dip", "14.99"),
        ],
    },
    {
        "name": "Main Courses",
        "description": "Hearty main dishes to satisfy your hunger",
        "products": [
            ("Grilled Salmon", "Fresh Atlantic salmon with lemon herb seasoning", "24.99"),
            ("Ribeye Steak", "12oz prime ribeye steak cooked to perfection", "32.99"),
            ("Margherita Pizza", "Classic pizza with fresh mozzarella and basil", "18.99"),
        ],
    },
    {
        "name": "Desserts",
        "description": "Sweet treats to end your meal",
        "products": [
            ("Chocolate Cake", "Rich chocolate cake with vanilla ice cream", "8.99"),
            ("Tiramisu", "Classic Italian dessert with coffee and mascarpone", "9.99"),
        ],
    },
    {
        "name": "Beverages",
        "description": "Refreshing drinks and hot beverages",
        "products": [
            ("Coca Cola", "Classic soft drink", "3.99"),
            ("Coffee", "Freshly brewed coffee", "4.99"),
        ],
    },
]


async def seed() -> int:
    """
    Load the starter menu.

    Returns:
        Number of products created (0 if the catalog was not empty)
    """
    await init_db()
    created = 0

    async with async_session_maker() as session:
        catalog = CatalogService(session)

        if await catalog.list_categories():
            print("⚠️ Catalog already has categories, nothing to do")
            return 0

        for section in MENU:
            category = await catalog.create_category(
                CategoryCreate(name=section["name"], description=section["description"])
            )
            print(f"📁 {category.name}")

            for name, description, price in section["products"]:
                product = await catalog.create_product(
                    ProductCreate(
                        name=name,
                        description=description,
                        price=Decimal(price),
                        category_id=category.id,
                    )
                )
                print(f"   🍽️  {product.name} - ${product.price}")
                created += 1

    return created


async def main() -> None:
    settings = get_settings()
    print("=" * 60)
    print(f"🌱 SEEDING {settings.restaurant_name.upper()}")
    print("=" * 60)

    try:
        created = await seed()
    finally:
        await engine.dispose()

    print("=" * 60)
    print(f"✅ Database seeded successfully! ({created} products)")
    print("=" * 60)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
