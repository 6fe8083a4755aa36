"""
Seed script to populate subscription_plans from the pricing catalogue.
Run: python scripts/seed_plans.py
"""

import asyncio
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from carepay.database import get_db_context, init_db
from carepay.fsm.states import PRICING
from carepay.models.subscription import SubscriptionPlan


def plan_id(vertical, plan_type) -> str:
    """e.g. HAIR_LOSS + QUARTERLY -> plan-hair-loss-quarterly"""
    return f"plan-{vertical.value}-{plan_type.value}".lower().replace("_", "-")


async def seed_plans():
    """Insert missing plans; existing plans are left untouched."""
    await init_db()

    added = 0
    async with get_db_context() as db:
        for vertical, plans in PRICING.items():
            for plan_type, price in plans.items():
                pid = plan_id(vertical, plan_type)
                result = await db.execute(
                    select(SubscriptionPlan).where(SubscriptionPlan.id == pid)
                )
                if result.scalar_one_or_none():
                    print(f"  ⏭️ Exists: {pid}")
                    continue

                db.add(SubscriptionPlan(
                    id=pid,
                    vertical=vertical.value,
                    plan_type=plan_type.value,
                    name=f"{vertical.display_name} - {plan_type.value.title().replace('_', ' ')}",
                    price_in_paise=price,
                    duration_months=plan_type.duration_months,
                    is_active=True,
                ))
                added += 1
                print(f"  ✅ Added: {pid} ({price} paise)")

    print(f"\n🎉 Seeded {added} subscription plans")


if __name__ == "__main__":
    print("💳 Seeding subscription plans...\n")
    asyncio.run(seed_plans())
