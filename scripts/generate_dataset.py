"""
Sales Orders Dataset Generator
Generates a raw orders file (same envelope as `sales-reports extract`)
for running the report pipeline and dashboard locally.

Usage:
    python scripts/generate_dataset.py [--orders 5000] [--days 120] [--output PATH]
"""

import argparse
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np
from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.ingestion.batch_loader import save_raw_orders  # noqa: E402

fake = Faker("fr_FR")
random.seed(42)
np.random.seed(42)
Faker.seed(42)

STORES = ["Paris Store", "Lyon Store", "Marseille Store", "Bordeaux Store", "Lille Store"]
STORE_WEIGHTS = [0.35, 0.25, 0.20, 0.12, 0.08]
# Share of orders whose store could not be identified
UNIDENTIFIED_RATE = 0.05


# ==========================================
# PRODUCTS
# ==========================================
def generate_products(n=40):
    print(f"📊 Generating {n:,} products...")
    prices = np.round(np.random.uniform(5, 120, n), 2)
    return [
        {"product_id": 1000 + i, "name": f"{fake.word().title()} {fake.word().title()}", "price": float(prices[i])}
        for i in range(n)
    ]


# ==========================================
# ORDERS
# ==========================================
def generate_orders(products, n=5000, days=120):
    print(f"📊 Generating {n:,} orders over {days} days...")

    end = datetime.now(timezone.utc).replace(microsecond=0)
    offsets = np.random.randint(0, days * 24 * 3600, n)
    item_counts = np.random.randint(1, 5, n)
    stores = np.random.choice(STORES, size=n, p=STORE_WEIGHTS)
    unidentified = np.random.random(n) < UNIDENTIFIED_RATE
    # Popular products sell more often
    popularity = np.random.zipf(1.6, len(products)).astype(float)
    popularity /= popularity.sum()

    orders = []
    for i in range(n):
        created = end - timedelta(seconds=int(offsets[i]))
        picks = np.random.choice(len(products), size=int(item_counts[i]), replace=False, p=popularity)

        line_items = []
        for idx in picks:
            product = products[int(idx)]
            quantity = random.randint(1, 4)
            line_items.append({
                "product_id": product["product_id"],
                "name": product["name"],
                "quantity": quantity,
                "total": round(product["price"] * quantity, 2),
            })

        store = None if unidentified[i] else str(stores[i])
        city = store.replace(" Store", "") if store else fake.city()
        orders.append({
            "id": 10000 + i,
            "number": str(10000 + i),
            "status": "completed",
            "currency": "EUR",
            "total": round(sum(item["total"] for item in line_items), 2),
            "date_created": created.isoformat(),
            "line_items": line_items,
            "shipping": {"city": city, "state": "", "country": "FR"},
            "billing": {"city": city, "state": "", "country": "FR"},
            "store": store,
        })

    orders.sort(key=lambda o: o["date_created"])
    return orders


# ==========================================
# MAIN
# ==========================================
def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic raw orders file")
    parser.add_argument("--orders", type=int, default=5000, help="Number of orders")
    parser.add_argument("--days", type=int, default=120, help="Days of history")
    parser.add_argument("--products", type=int, default=40, help="Catalogue size")
    parser.add_argument("--output", default=None, help="Raw orders file (defaults to DATA_RAW_PATH)")
    args = parser.parse_args()

    print("=" * 60)
    print("🛒 Sales Orders Dataset Generator")
    print("=" * 60 + "\n")

    products = generate_products(args.products)
    orders = generate_orders(products, args.orders, args.days)
    path = save_raw_orders(orders, path=args.output, method="GENERATED")

    print("\n" + "=" * 60)
    print("✅ Dataset Generation Complete!")
    print("=" * 60)
    print(f"\n📁 Output: {path} ({len(orders):,} orders)\n")


if __name__ == "__main__":
    main()
