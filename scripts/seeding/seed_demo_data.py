"""Seed demo accounts, shops and services for local development.

Usage:
    python scripts/seeding/seed_demo_data.py
    python scripts/seeding/seed_demo_data.py --password secret123

Safe to re-run: existing users (matched by email) and services (matched by
shop and name) are left alone.
"""

import argparse
import asyncio
import os
import sys
from decimal import Decimal

# Add backend root to path so we can import modules
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from libs.auth.security import hash_password
from libs.db.config import AsyncSessionLocal
from services.laundry_service.models import Service, Shop, User, UserRole
from sqlalchemy.future import select

CUSTOMERS = [
    {"email": "ada@example.com", "name": "Ada Customer", "phone": "+2348000000001"},
    {"email": "bayo@example.com", "name": "Bayo Customer", "phone": "+2348000000002"},
]

SHOPS = [
    {
        "owner": {"email": "fresh@example.com", "name": "Chidi Owner"},
        "shop": {
            "name": "Fresh Fold Laundry",
            "address": "12 Admiralty Way, Lekki",
            "phone": "+2348000000101",
            "email": "hello@freshfold.example.com",
            "description": "Same-day wash and fold.",
            "is_approved": True,
        },
        "services": [
            ("Wash & Fold (per kg)", "Machine wash, tumble dry, folded.", "2.50"),
            ("Dry Cleaning - Suit", "Two-piece suit, pressed.", "12.00"),
            ("Ironing (per item)", None, "1.25"),
        ],
    },
    {
        "owner": {"email": "sparkle@example.com", "name": "Dayo Owner"},
        "shop": {
            "name": "Sparkle Cleaners",
            "address": "4 Allen Avenue, Ikeja",
            "phone": "+2348000000102",
            "email": "info@sparkle.example.com",
            "description": "Awaiting approval.",
            "is_approved": False,
        },
        "services": [
            ("Duvet Cleaning", "King or queen size.", "18.00"),
        ],
    },
]

# Registered owner with no shop, so it shows up as available to admins
SPARE_OWNER = {"email": "spare@example.com", "name": "Efe Owner"}


async def get_or_create_user(session, email, name, role, password, phone=None):
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"   = User exists: {email}")
        return user

    print(f"   + Creating {role.value}: {email}")
    user = User(
        email=email,
        name=name,
        phone=phone,
        role=role,
        password_hash=hash_password(password),
    )
    session.add(user)
    await session.flush()
    return user


async def seed_demo_data(password: str):
    async with AsyncSessionLocal() as session:
        try:
            print("👤 Seeding customers...")
            for customer in CUSTOMERS:
                await get_or_create_user(
                    session,
                    customer["email"],
                    customer["name"],
                    UserRole.CUSTOMER,
                    password,
                    phone=customer["phone"],
                )

            print("🏪 Seeding shops...")
            for entry in SHOPS:
                owner = await get_or_create_user(
                    session,
                    entry["owner"]["email"],
                    entry["owner"]["name"],
                    UserRole.SHOP_OWNER,
                    password,
                )

                result = await session.execute(
                    select(Shop).where(Shop.owner_id == owner.id)
                )
                shop = result.scalar_one_or_none()
                if not shop:
                    print(f"   + Creating shop: {entry['shop']['name']}")
                    shop = Shop(owner_id=owner.id, **entry["shop"])
                    session.add(shop)
                    await session.flush()
                else:
                    print(f"   = Shop exists: {shop.name}")

                for name, description, price in entry["services"]:
                    result = await session.execute(
                        select(Service).where(
                            Service.shop_id == shop.id, Service.name == name
                        )
                    )
                    if result.scalar_one_or_none():
                        continue
                    print(f"      + Service: {name} @ {price}")
                    session.add(
                        Service(
                            shop_id=shop.id,
                            name=name,
                            description=description,
                            price=Decimal(price),
                        )
                    )

            await get_or_create_user(
                session,
                SPARE_OWNER["email"],
                SPARE_OWNER["name"],
                UserRole.SHOP_OWNER,
                password,
            )

            await session.commit()
            print("✅ Demo data seeded.")
        except Exception as e:
            await session.rollback()
            print(f"❌ Seeding failed: {e}")
            raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo marketplace data")
    parser.add_argument(
        "--password", default="password123", help="Password for every demo account"
    )
    args = parser.parse_args()

    asyncio.run(seed_demo_data(args.password))
