"""
Lunch Rush Simulation Script

Fires a burst of concurrent orders at a running API, then drives them
through the kitchen workflow and prints the day's sales report.
Run from project root: python scripts/simulate.py

Author: Khalil Bannouri
Version: 1.0.0
"""

import argparse
import asyncio
import os
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from bistro.models import OrderType
from bistro.schemas import ProductResponse
from bistro.services.cart import Cart

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50
TABLES = [str(n) for n in range(1, 21)]


async def fetch_menu(client: httpx.AsyncClient) -> list[ProductResponse]:
    """Available products from the public menu."""
    response = await client.get(f"{API_BASE_URL}/api/menu")
    response.raise_for_status()
    return [
        ProductResponse.model_validate(product)
        for category in response.json()
        for product in category["products"]
    ]


def build_random_order(products: list[ProductResponse]) -> dict[str, Any]:
    """Fill a cart with 1-4 random products and snapshot it."""
    cart = Cart()
    for _ in range(random.randint(1, 4)):
        cart.add(random.choice(products))

    order_type = random.choice(list(OrderType))
    table_number = random.choice(TABLES) if order_type == OrderType.DINE_IN else None
    return cart.to_order(order_type, table_number=table_number).model_dump(mode="json")


async def send_order(
    client: httpx.AsyncClient,
    order_num: int,
    products: list[ProductResponse],
) -> dict[str, Any]:
    """Place one random order."""
    payload = build_random_order(products)
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 201:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data["id"],
                "total": data["total"],
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def work_kitchen(client: httpx.AsyncClient, order_ids: list[int]) -> dict[str, int]:
    """Advance most orders to COMPLETED, cancel a few, leave the rest open."""
    outcome = {"completed": 0, "cancelled": 0, "open": 0}

    for order_id in order_ids:
        roll = random.random()
        if roll < 0.1:
            await client.patch(
                f"{API_BASE_URL}/api/orders/{order_id}/status",
                json={"status": "CANCELLED"},
            )
            outcome["cancelled"] += 1
        elif roll < 0.85:
            for _ in range(3):
                await client.post(f"{API_BASE_URL}/api/orders/{order_id}/advance")
            outcome["completed"] += 1
        else:
            outcome["open"] += 1

    return outcome


async def run_simulation(num_orders: int = TOTAL_ORDERS, export: bool = False) -> dict[str, Any]:
    """
    Run the simulation.

    Args:
        num_orders: Number of orders to place concurrently
        export: Queue an Excel export of today's report at the end
    """
    print("=" * 70)
    print("🔥 LUNCH RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        products = await fetch_menu(client)
        if not products:
            print("\n❌ The menu has no available products. Run: python scripts/seed.py")
            return {"total": num_orders, "successful": 0, "failed": num_orders}

        print(f"\n🚀 Firing {num_orders} orders over {len(products)} products...\n")
        results = await asyncio.gather(
            *[send_order(client, i + 1, products) for i in range(num_orders)]
        )

        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]

        print("👨‍🍳 Working the kitchen queue...")
        kitchen = await work_kitchen(client, [r["order_id"] for r in successful])

        report = (await client.get(f"{API_BASE_URL}/api/admin/sales")).json()

        if export:
            queued = (await client.post(f"{API_BASE_URL}/api/admin/sales/export")).json()
            print(f"📤 Export queued: task {queued.get('task_id')}")

    total_time = round(time.time() - start_time, 2)

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")
    print(
        f"\n🍳 Kitchen: {kitchen['completed']} completed, "
        f"{kitchen['cancelled']} cancelled, {kitchen['open']} still open"
    )

    if successful:
        times = [r["time"] for r in successful]
        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {round(sum(times) / len(times), 3)}s")
        print(f"   Fastest: {min(times)}s")
        print(f"   Slowest: {max(times)}s")

    stats = report["statistics"]
    print(f"\n💰 Today's Sales ({report['selected_date']}):")
    print(f"   Revenue: ${stats['total_revenue']:.2f} over {stats['total_orders']} orders")
    print(f"   Average Order: ${stats['average_order_value']:.2f}")
    print(f"   Dine-in / Takeaway: {stats['dine_in_orders']} / {stats['takeaway_orders']}")
    for rank, product in enumerate(report["top_products"], start=1):
        print(f"   {rank}. {product['name']} x{product['quantity']}")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print("🔍 VERIFICATION STEPS")
    print("=" * 70)
    print("1. Check Celery terminal - the export task should complete")
    print("2. Run: python scripts/verify.py")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "kitchen": kitchen,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Lunch Rush Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--export", action="store_true", help="Queue an Excel export at the end")
    args = parser.parse_args()

    asyncio.run(run_simulation(num_orders=args.orders, export=args.export))
