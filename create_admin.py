import asyncio
import argparse
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from datetime import datetime

from app.config import settings
from app.models.profile import Profile, UserRole, normalize_email
from app.api.routes.auth import get_password_hash


async def create_admin(email: str, password: str, name: str, role: UserRole):
    print("🚀 Connecting to MongoDB...")
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    database = client[settings.MONGODB_DB_NAME]

    await init_beanie(
        database=database,
        document_models=[Profile]
    )

    email = normalize_email(email)
    existing = await Profile.find_one(Profile.email == email)

    if existing:
        if existing.role != role:
            existing.role = role
            existing.updated_at = datetime.utcnow()
            await existing.save()
            print(f"🔁 '{email}' already exists, role set to {role.value}.")
        else:
            print(f"ℹ️ '{email}' already exists as {role.value}.")
    else:
        print(f"🆕 Creating {role.value} profile: {email}")
        profile = Profile(
            email=email,
            name=name,
            department="facilities",
            role=role,
            password_hash=get_password_hash(password),
        )
        await profile.insert()
        print("✅ Profile created successfully!")

    client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote an admin-suite profile")
    parser.add_argument("--email", default=settings.DEFAULT_ADMIN_EMAIL)
    parser.add_argument("--password", default=settings.DEFAULT_ADMIN_PASSWORD)
    parser.add_argument("--name", default=settings.DEFAULT_ADMIN_NAME)
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.ADMIN.value)
    args = parser.parse_args()

    asyncio.run(create_admin(args.email, args.password, args.name, UserRole(args.role)))
