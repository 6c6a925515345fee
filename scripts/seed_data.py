"""
Seed Database with Sample Data.
Creates a demo user with a couple of agents and prints a bearer token.
"""

import asyncio
import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.security import create_access_token
from app.db.database import init_db, close_db
from app.db.repositories import AgentRepository, UserRepository

DEMO_EMAIL = "demo@conversai.dev"

AGENTS = [
    {
        "name": "Alex",
        "company_name": "Amazon",
        "personality": "patient, upbeat and solution-oriented",
        "company_info": (
            "Amazon is an online retailer. Customers can track orders, request refunds "
            "within 30 days of delivery, and manage Prime subscriptions."
        ),
        "prompts": [
            "Confirm the order number before discussing details",
            "Offer a refund or replacement when an item arrives damaged"
        ]
    },
    {
        "name": "Sam",
        "company_name": "Netflix",
        "personality": "friendly and concise",
        "company_info": (
            "Netflix is a streaming service with Basic, Standard and Premium plans. "
            "Plans can be changed or cancelled at any time from the account page."
        ),
        "prompts": [
            "Explain plan differences in one or two sentences",
            "Never ask for full payment card numbers"
        ]
    }
]


async def seed_user():
    """Create the demo user if missing."""
    print("👤 Seeding demo user...")

    users = UserRepository()
    user = await users.get_by_email(DEMO_EMAIL)
    if user is None:
        user = await users.create({"name": "Demo User", "email": DEMO_EMAIL})
        print(f"   ✅ Created user {user.id}")
    else:
        print(f"   ↩️  User already exists: {user.id}")
    return user


async def seed_agents(user_id: str):
    """Create the sample agents for the demo user."""
    print("🤖 Seeding agents...")

    agents = AgentRepository()
    existing = {agent.name for agent in await agents.get_by_user(user_id)}

    created = 0
    for data in AGENTS:
        if data["name"] in existing:
            continue
        await agents.create({"user_id": user_id, **data})
        created += 1

    print(f"   ✅ Added {created} agents")


async def main():
    """Seed all data."""
    print("=" * 60)
    print("🌱 Seeding database")
    print("=" * 60)

    await init_db()
    try:
        user = await seed_user()
        await seed_agents(user.id)
    finally:
        await close_db()

    print("\n🔑 Bearer token for the demo user:")
    print(create_access_token(user.id))


if __name__ == "__main__":
    asyncio.run(main())
