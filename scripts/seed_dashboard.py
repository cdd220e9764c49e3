"""
Dashboard Demo Data Seeder

Fills the configured database with categories, products, customers and
orders spread over the last 400 days, then prints an admin access token
for calling the dashboard endpoints. Intended for an empty database;
category slugs are unique, so a second run fails on the catalog step.

Usage:
    python scripts/seed_dashboard.py [--customers 200] [--orders 1500] [--seed 42]
"""

import argparse
import random
import sys
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from storefront.auth.models.user import ROLE_ADMIN, ROLE_CUSTOMER, User
from storefront.catalog.models import Category, Product
from storefront.core.security import create_access_token
from storefront.db.base import Base
from storefront.db.session import SessionLocal, engine
from storefront.orders.models import Order, OrderItem, OrderStatus

ADMIN_EMAIL = "dashboard-admin@example.com"

CATEGORIES = {
    "Electronics": ["Headphones", "Keyboard", "Monitor", "Webcam", "Charger"],
    "Home": ["Lamp", "Kettle", "Blanket", "Mug Set"],
    "Books": ["Cookbook", "Novel", "Atlas"],
}

# Weighted so the dashboard shows a realistic mix
STATUS_WEIGHTS = {
    OrderStatus.COMPLETED: 55,
    OrderStatus.SHIPPED: 15,
    OrderStatus.PROCESSING: 10,
    OrderStatus.PENDING: 12,
    OrderStatus.CANCELLED: 8,
}

HISTORY_DAYS = 400


def random_moment(rng: random.Random, now: datetime) -> datetime:
    return now - timedelta(seconds=rng.randint(0, HISTORY_DAYS * 24 * 3600))


def seed_catalog(db, rng: random.Random) -> list[Product]:
    products = []
    for category_name, product_names in CATEGORIES.items():
        category = Category(name=category_name, slug=category_name.lower())
        db.add(category)
        for product_name in product_names:
            products.append(
                Product(
                    category=category,
                    name=f"{category_name} {product_name}",
                    price=Decimal(rng.randint(500, 50000)) / 100,
                    discount_percent=Decimal(rng.choice([0, 0, 5, 10, 25])),
                    stock_quantity=rng.choice([0, rng.randint(1, 10), rng.randint(11, 300)]),
                    view_count=rng.randint(0, 5000),
                )
            )
    # One product without a category
    products.append(
        Product(name="Gift Card", price=Decimal("50.00"), stock_quantity=999, view_count=120)
    )
    db.add_all(products)
    return products


def seed_customers(db, rng: random.Random, count: int, now: datetime) -> list[User]:
    customers = [
        User(
            email=f"customer{i}-{uuid.uuid4().hex[:6]}@example.com",
            name=f"Customer {i}",
            role=ROLE_CUSTOMER,
            created_at=random_moment(rng, now),
        )
        for i in range(count)
    ]
    db.add_all(customers)
    return customers


def seed_orders(
    db,
    rng: random.Random,
    count: int,
    customers: list[User],
    products: list[Product],
    now: datetime,
) -> None:
    statuses = list(STATUS_WEIGHTS)
    weights = list(STATUS_WEIGHTS.values())
    for _ in range(count):
        lines = rng.sample(products, k=rng.randint(1, 3))
        items = [
            OrderItem(product=product, quantity=rng.randint(1, 4), price=product.price)
            for product in lines
        ]
        db.add(
            Order(
                # Roughly one in twenty orders is a guest checkout
                user=rng.choice(customers) if rng.random() > 0.05 else None,
                status=rng.choices(statuses, weights)[0],
                total_price=sum((item.price * item.quantity for item in items), Decimal("0")),
                created_at=random_moment(rng, now),
                items=items,
            )
        )


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed dashboard demo data")
    parser.add_argument("--customers", type=int, default=200)
    parser.add_argument("--orders", type=int, default=1500)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    rng = random.Random(args.seed)
    now = datetime.now(UTC)

    Base.metadata.create_all(engine)
    db = SessionLocal()
    try:
        admin = db.query(User).filter(User.email == ADMIN_EMAIL).first()
        if admin is None:
            admin = User(email=ADMIN_EMAIL, name="Dashboard Admin", role=ROLE_ADMIN)
            db.add(admin)

        products = seed_catalog(db, rng)
        customers = seed_customers(db, rng, args.customers, now)
        seed_orders(db, rng, args.orders, customers, products, now)
        db.commit()

        print(f"Seeded {len(products)} products, {len(customers)} customers, {args.orders} orders")
        print("Admin access token (send as the access_token cookie):")
        print(create_access_token({"sub": str(admin.id), "role": admin.role}, expires_minutes=720))
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
