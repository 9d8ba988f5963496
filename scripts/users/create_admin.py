import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add backend root to path to import libs
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from dotenv import load_dotenv

# Load env file selected for the run (defaults to .env when ENV_FILE not set)
# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(project_root / env_file, override=True)

from sqlalchemy import select

from libs.auth.security import hash_password
from libs.common.config import get_settings
from libs.db.config import AsyncSessionLocal
from services.laundry_service.models import User, UserRole

settings = get_settings()


async def create_admin_user(email: str, password: str, name: str):
    print("🚀 Starting Admin User Creation Script")
    email = email.strip().lower()

    print("Connecting to database...")
    async with AsyncSessionLocal() as session:
        async with session.begin():
            result = await session.execute(select(User).where(User.email == email))
            existing_user = result.scalar_one_or_none()

            if existing_user:
                print(f"⚠️ User already exists for {email}.")
                if existing_user.role != UserRole.ADMIN:
                    print(
                        f"⚠️ Updating role from {existing_user.role.value} to admin"
                    )
                    existing_user.role = UserRole.ADMIN
                existing_user.password_hash = hash_password(password)
                print("✅ User updated.")
            else:
                print("Creating new admin user...")
                session.add(
                    User(
                        email=email,
                        password_hash=hash_password(password),
                        name=name,
                        role=UserRole.ADMIN,
                    )
                )
                print("✅ Admin user created.")

    print("\n🎉 Admin setup complete!")
    print(f"Email: {email}")
    print(f"Password: {password}")
    print("Change the password after the first login.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL)
    parser.add_argument("--password", default="admin1234")
    parser.add_argument("--name", default="Admin User")
    args = parser.parse_args()

    asyncio.run(create_admin_user(args.email, args.password, args.name))
