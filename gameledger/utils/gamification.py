# gameledger/utils/gamification.py
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gameledger.crud.badge import award_badge, get_all_badges, get_owned_badge_ids
from gameledger.crud.transaction import count_transactions
from gameledger.models.badge import Badge
from gameledger.models.profile import Profile
from gameledger.schemas.profile import GameStats

logger = logging.getLogger(__name__)

EXP_PER_LEVEL = 1000
MIN_EXP_PER_TRANSACTION = 5
AMOUNT_PER_EXP = 1000
COINS_PER_TRANSACTION = 10


# ────────────────────────────────────────────────────────────────────────────────
# PURE RULES
# ────────────────────────────────────────────────────────────────────────────────
def calculate_exp(amount: float) -> int:
    """Exp for one transaction: one point per 1000 of amount, at least 5."""
    return max(MIN_EXP_PER_TRANSACTION, int(amount // AMOUNT_PER_EXP))

def level_for_exp(total_exp: int) -> int:
    return total_exp // EXP_PER_LEVEL + 1

def level_progress(total_exp: int) -> float:
    """Percent of the way through the current level, clamped to [0, 100]."""
    level = level_for_exp(total_exp)
    progress = (total_exp - (level - 1) * EXP_PER_LEVEL) / EXP_PER_LEVEL * 100
    return max(0.0, min(100.0, progress))

def exp_to_next_level(total_exp: int) -> int:
    return EXP_PER_LEVEL - total_exp % EXP_PER_LEVEL

def streak_tier(current_streak: int) -> str:
    if current_streak >= 30:
        return "legendary"
    if current_streak >= 7:
        return "hot"
    if current_streak >= 3:
        return "warming up"
    return "starting"

def next_streak(current_streak: int, last_activity: Optional[date], today: date) -> int:
    """Streak after recording activity on `today`."""
    if last_activity is None:
        return 1
    gap = (today - last_activity).days
    if gap == 0:
        return current_streak
    if gap == 1:
        return current_streak + 1
    return 1


# ────────────────────────────────────────────────────────────────────────────────
# PROFILE MUTATIONS (callers commit)
# ────────────────────────────────────────────────────────────────────────────────
def grant(profile: Profile, exp: int = 0, coins: int = 0) -> bool:
    """Credit exp and coins and recompute the level; returns True on level up."""
    old_level = profile.level or 1
    profile.total_exp = (profile.total_exp or 0) + exp
    profile.coins = (profile.coins or 0) + coins
    profile.level = level_for_exp(profile.total_exp)
    return profile.level > old_level

def register_activity(profile: Profile, today: date) -> None:
    profile.current_streak = next_streak(profile.current_streak or 0, profile.last_activity_date, today)
    profile.longest_streak = max(profile.longest_streak or 0, profile.current_streak)
    profile.last_activity_date = today

def badge_requirement_met(badge: Badge, profile: Profile, transaction_count: int) -> bool:
    if badge.requirement_type == "transaction_count":
        value = transaction_count
    elif badge.requirement_type == "streak":
        value = profile.current_streak or 0
    elif badge.requirement_type == "level":
        value = profile.level or 1
    elif badge.requirement_type == "total_exp":
        value = profile.total_exp or 0
    else:
        logger.warning(f"Unknown badge requirement type: {badge.requirement_type}")
        return False
    return value >= badge.requirement_value


@dataclass
class RewardOutcome:
    exp_gained: int
    coins_gained: int
    leveled_up: bool
    new_badges: List[Badge] = field(default_factory=list)


async def evaluate_badges(profile: Profile, db: AsyncSession) -> List[Badge]:
    """Award every catalog badge the profile qualifies for and does not own yet.

    Badge rewards can unlock further level/exp badges, so the catalog is
    re-scanned until nothing new is earned.
    """
    catalog = await get_all_badges(db)
    owned = await get_owned_badge_ids(profile.id, db)
    tx_count = await count_transactions(profile.id, db)

    earned: List[Badge] = []
    changed = True
    while changed:
        changed = False
        for badge in catalog:
            if badge.id in owned or not badge_requirement_met(badge, profile, tx_count):
                continue
            award_badge(profile.id, badge, db)
            owned.add(badge.id)
            grant(profile, exp=badge.exp_reward or 0, coins=badge.coin_reward or 0)
            earned.append(badge)
            changed = True
            logger.info(f"🏅 Badge '{badge.name}' awarded to {profile.id}")
    return earned

async def apply_transaction_rewards(
    profile: Profile,
    exp_gained: int,
    db: AsyncSession,
    today: Optional[date] = None,
) -> RewardOutcome:
    """Exp, coins, streak and badges for one newly recorded transaction.

    The transaction row must already be flushed so the badge count sees it.
    """
    today = today or date.today()
    starting_level = profile.level or 1
    grant(profile, exp=exp_gained, coins=COINS_PER_TRANSACTION)
    register_activity(profile, today)
    db.add(profile)

    new_badges = await evaluate_badges(profile, db)
    return RewardOutcome(
        exp_gained=exp_gained,
        coins_gained=COINS_PER_TRANSACTION,
        leveled_up=profile.level > starting_level,
        new_badges=new_badges,
    )

async def build_game_stats(profile: Profile, db: AsyncSession) -> GameStats:
    total_exp = profile.total_exp or 0
    return GameStats(
        level=profile.level,
        total_exp=total_exp,
        exp_into_level=total_exp % EXP_PER_LEVEL,
        exp_to_next_level=exp_to_next_level(total_exp),
        level_progress=level_progress(total_exp),
        coins=profile.coins,
        current_streak=profile.current_streak,
        longest_streak=profile.longest_streak,
        streak_tier=streak_tier(profile.current_streak or 0),
        transaction_count=await count_transactions(profile.id, db),
        badges_earned=len(await get_owned_badge_ids(profile.id, db)),
    )
