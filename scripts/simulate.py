"""
Lunch Rush Simulation Script

Fires a burst of concurrent orders at a running OrderDesk server, moves
some of them through the kitchen and checks that every order got a
distinct, gap-free ID.
Run from project root: python scripts/simulate.py

Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any, Optional

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_ORDERS = 50

MENU_ITEMS = [
    {"name": "Bandeja Paisa", "price_local": 32000, "price_foreign": 8.0},
    {"name": "Ajiaco", "price_local": 26000, "price_foreign": 6.5},
    {"name": "Empanadas", "price_local": 9000, "price_foreign": 2.25},
    {"name": "Arepa con Queso", "price_local": 7000, "price_foreign": 1.75},
    {"name": "Lulo drink", "price_local": 6000, "price_foreign": 1.5},
    {"name": "Coffee drink", "price_local": 4000, "price_foreign": 1.0},
]
KITCHEN_STATUSES = ["ready", "delivered", "cancelled"]


def generate_random_items() -> list[dict]:
    """Generate random order lines."""
    items = []
    for _ in range(random.randint(1, 4)):
        item = random.choice(MENU_ITEMS).copy()
        item["quantity"] = random.randint(1, 3)
        items.append(item)
    return items


def generate_order_payload() -> dict[str, Any]:
    return {
        "table": str(random.randint(1, 20)),
        "items": generate_random_items(),
    }


async def send_order(client: httpx.AsyncClient, order_num: int) -> dict[str, Any]:
    """Submit one order and time the round trip."""
    start_time = time.time()

    try:
        response = await client.post("/order", json=generate_order_payload(), timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data["id"],
                "priority": data["priority"],
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except Exception as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def advance_order(
    client: httpx.AsyncClient,
    order_id: str,
    auth: Optional[tuple[str, str]] = None,
) -> bool:
    """Move an order to a random kitchen status."""
    response = await client.put(
        f"/order/{order_id}",
        json={"status": random.choice(KITCHEN_STATUSES)},
        auth=auth,
        timeout=30.0,
    )
    return response.status_code == 200


def find_id_problems(order_ids: list[str]) -> list[str]:
    """Duplicates and gaps in a batch of PED-NNN ids."""
    problems = []
    seen = set()
    for order_id in order_ids:
        if order_id in seen:
            problems.append(f"duplicate {order_id}")
        seen.add(order_id)

    numbers = sorted(int(order_id.split("-")[1]) for order_id in seen)
    if numbers:
        expected = set(range(numbers[0], numbers[-1] + 1))
        problems.extend(f"missing PED-{n:03d}" for n in sorted(expected - set(numbers)))
    return problems


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_rush(
    client: httpx.AsyncClient,
    num_orders: int = TOTAL_ORDERS,
    advance_ratio: float = 0.5,
    auth: Optional[tuple[str, str]] = None,
) -> dict[str, Any]:
    """
    Submit ``num_orders`` concurrently, then advance a share of them.

    Args:
        client: Client whose base_url points at the server
        num_orders: Number of orders to submit
        advance_ratio: Share of created orders to move to a kitchen status
        auth: Cook or admin credentials when status updates are protected
    """
    start_time = time.time()
    results = await asyncio.gather(*(send_order(client, i + 1) for i in range(num_orders)))

    successful = [r for r in results if r["success"]]
    to_advance = [r["order_id"] for r in successful[: int(len(successful) * advance_ratio)]]
    advanced = await asyncio.gather(*(advance_order(client, oid, auth) for oid in to_advance))

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(results) - len(successful),
        "advanced": sum(advanced),
        "low_priority": len([r for r in successful if r["priority"] == "low"]),
        "id_problems": find_id_problems([r["order_id"] for r in successful]),
        "total_time": round(time.time() - start_time, 2),
        "results": results,
    }


def print_summary(summary: dict[str, Any]) -> None:
    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Successful Orders: {summary['successful']}/{summary['total']}")
    print(f"❌ Failed Orders: {summary['failed']}/{summary['total']}")
    print(f"🍹 Low priority (drinks): {summary['low_priority']}")
    print(f"👩‍🍳 Status updates applied: {summary['advanced']}")
    print(f"⏱️  Total Time: {summary['total_time']}s")

    successful = [r for r in summary["results"] if r["success"]]
    if successful:
        times = [r["time"] for r in successful]
        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {round(sum(times) / len(times), 3)}s")
        print(f"   Fastest: {min(times)}s")
        print(f"   Slowest: {max(times)}s")

    if summary["id_problems"]:
        print(f"\n⚠️  ID problems: {', '.join(summary['id_problems'][:10])}")
    else:
        print("\n✅ Order IDs are unique and gap-free")

    failed = [r for r in summary["results"] if not r["success"]]
    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)


async def main(args: argparse.Namespace) -> int:
    print("=" * 70)
    print("🔥 LUNCH RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {args.orders}")
    print(f"🎯 Target: {args.url}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    auth = (args.user, args.password) if args.user else None
    async with httpx.AsyncClient(base_url=args.url) as client:
        health = await client.get("/health")
        if health.status_code != 200:
            print(f"\n❌ Health check failed: {health.text[:100]}")
            return 1
        print(f"\n💚 Server status: {health.json().get('status')}")

        summary = await run_rush(client, args.orders, args.advance, auth)

    print_summary(summary)
    return 0 if not summary["failed"] and not summary["id_problems"] else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Lunch Rush Simulation Script")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--advance", type=float, default=0.5, help="Share of orders to advance")
    parser.add_argument("--user", help="Cook or admin user for status updates")
    parser.add_argument("--password", help="Password for --user")
    sys.exit(asyncio.run(main(parser.parse_args())))
