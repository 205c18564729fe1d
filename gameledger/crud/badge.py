# gameledger/crud/badge.py
import logging
import uuid
from typing import List, Set

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from gameledger.models.badge import Badge, UserBadge

logger = logging.getLogger(__name__)

# Static badge catalog, seeded at startup
BADGE_CATALOG: List[dict] = [
    {"name": "First Step", "description": "Record your first transaction", "icon": "Footprints", "color": "#4ECDC4",
     "requirement_type": "transaction_count", "requirement_value": 1, "exp_reward": 50, "coin_reward": 10},
    {"name": "Bookkeeper", "description": "Record 10 transactions", "icon": "BookOpen", "color": "#45B7D1",
     "requirement_type": "transaction_count", "requirement_value": 10, "exp_reward": 100, "coin_reward": 20},
    {"name": "Ledger Master", "description": "Record 100 transactions", "icon": "Library", "color": "#7C3AED",
     "requirement_type": "transaction_count", "requirement_value": 100, "exp_reward": 500, "coin_reward": 100},
    {"name": "Warming Up", "description": "Keep a 3 day streak", "icon": "Flame", "color": "#FFA07A",
     "requirement_type": "streak", "requirement_value": 3, "exp_reward": 50, "coin_reward": 10},
    {"name": "On Fire", "description": "Keep a 7 day streak", "icon": "Flame", "color": "#FF6B6B",
     "requirement_type": "streak", "requirement_value": 7, "exp_reward": 150, "coin_reward": 30},
    {"name": "Legend", "description": "Keep a 30 day streak", "icon": "Crown", "color": "#FFD700",
     "requirement_type": "streak", "requirement_value": 30, "exp_reward": 1000, "coin_reward": 200},
    {"name": "Level 5", "description": "Reach level 5", "icon": "Star", "color": "#50C878",
     "requirement_type": "level", "requirement_value": 5, "exp_reward": 0, "coin_reward": 50},
    {"name": "Level 10", "description": "Reach level 10", "icon": "Trophy", "color": "#DAA520",
     "requirement_type": "level", "requirement_value": 10, "exp_reward": 0, "coin_reward": 100},
    {"name": "Exp Hunter", "description": "Collect 5,000 exp", "icon": "Zap", "color": "#8B5CF6",
     "requirement_type": "total_exp", "requirement_value": 5000, "exp_reward": 0, "coin_reward": 50},
]

async def seed_badges(db: AsyncSession) -> List[Badge]:
    """Insert catalog badges missing from the table (matched by name)."""
    result = await db.execute(select(Badge.name))
    existing_names = set(result.scalars().all())

    badges_to_create = [Badge(**entry) for entry in BADGE_CATALOG if entry["name"] not in existing_names]
    if badges_to_create:
        db.add_all(badges_to_create)
        await db.commit()
        logger.info(f"🏅 Seeded {len(badges_to_create)} badges")
    return badges_to_create

async def get_all_badges(db: AsyncSession) -> List[Badge]:
    result = await db.execute(select(Badge).order_by(Badge.requirement_type, Badge.requirement_value))
    return result.scalars().all()

async def get_user_badges(user_id: uuid.UUID, db: AsyncSession) -> List[UserBadge]:
    result = await db.execute(
        select(UserBadge).where(UserBadge.user_id == user_id).order_by(UserBadge.earned_at)
    )
    return result.scalars().all()

async def get_owned_badge_ids(user_id: uuid.UUID, db: AsyncSession) -> Set[uuid.UUID]:
    result = await db.execute(select(UserBadge.badge_id).where(UserBadge.user_id == user_id))
    return set(result.scalars().all())

def award_badge(user_id: uuid.UUID, badge: Badge, db: AsyncSession) -> UserBadge:
    """Stage a UserBadge row; the caller commits together with the rewards."""
    user_badge = UserBadge(user_id=user_id, badge_id=badge.id)
    db.add(user_badge)
    return user_badge
