# gameledger/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from gameledger.models.category import Category, EntryType
from typing import List, Optional
import uuid
from gameledger.schemas.category import CategoryCreate, CategoryUpdate

async def get_categories_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    type: Optional[EntryType] = None,
) -> List[Category]:
    query = select(Category).where(Category.user_id == user_id)
    if type is not None:
        query = query.where(Category.type == type)
    result = await db.execute(query.order_by(Category.type, Category.name))
    return result.scalars().all()

async def get_category_by_id(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_category_for_user(
    user_id: uuid.UUID,
    cat_in: CategoryCreate,
    db: AsyncSession,
    is_default: bool = False,
) -> Category:
    new_cat = Category(**cat_in.model_dump(), user_id=user_id, is_default=is_default)
    db.add(new_cat)
    await db.commit()
    await db.refresh(new_cat)
    return new_cat

async def update_category(category: Category, cat_in: CategoryUpdate, db: AsyncSession) -> Category:
    for field, value in cat_in.model_dump(exclude_unset=True).items():
        setattr(category, field, value)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category

async def delete_category(category: Category, db: AsyncSession) -> None:
    await db.delete(category)
    await db.commit()


async def get_category_by_name_for_user(name: str, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    """Case-insensitive lookup of a category by name for a given user."""
    result = await db.execute(
        select(Category).where(
            Category.user_id == user_id,
            func.lower(Category.name) == func.lower(name),
        )
    )
    return result.scalars().first()


# Default categories to be created for every new user
DEFAULT_CATEGORIES: List[dict] = [
    {"name": "Food", "color": "#FF6B6B", "icon": "Utensils", "type": EntryType.expense},
    {"name": "Transport", "color": "#4ECDC4", "icon": "Car", "type": EntryType.expense},
    {"name": "Shopping", "color": "#45B7D1", "icon": "ShoppingBag", "type": EntryType.expense},
    {"name": "Housing", "color": "#96CEB4", "icon": "Home", "type": EntryType.expense},
    {"name": "Health", "color": "#FFEAA7", "icon": "HeartPulse", "type": EntryType.expense},
    {"name": "Entertainment", "color": "#DDA0DD", "icon": "Gamepad2", "type": EntryType.expense},
    {"name": "Other", "color": "#B0B0B0", "icon": "MoreHorizontal", "type": EntryType.expense},
    {"name": "Salary", "color": "#50C878", "icon": "Wallet", "type": EntryType.income},
    {"name": "Bonus", "color": "#FFD700", "icon": "Gift", "type": EntryType.income},
    {"name": "Other Income", "color": "#98D8C8", "icon": "PlusCircle", "type": EntryType.income},
]

# Offered by the onboarding category step; added as regular (deletable) categories
RECOMMENDED_CATEGORIES: List[dict] = [
    {"name": "Cafe", "color": "#8B4513", "icon": "Coffee", "type": EntryType.expense},
    {"name": "Online Shopping", "color": "#FF6B6B", "icon": "ShoppingCart", "type": EntryType.expense},
    {"name": "Fitness", "color": "#4ECDC4", "icon": "Dumbbell", "type": EntryType.expense},
    {"name": "Culture", "color": "#45B7D1", "icon": "Film", "type": EntryType.expense},
    {"name": "Pets", "color": "#FFA07A", "icon": "Heart", "type": EntryType.expense},
    {"name": "Side Income", "color": "#98D8C8", "icon": "Briefcase", "type": EntryType.income},
    {"name": "Investment Returns", "color": "#50C878", "icon": "TrendingUp", "type": EntryType.income},
]

def get_recommended_category(name: str) -> Optional[dict]:
    for cat in RECOMMENDED_CATEGORIES:
        if cat["name"].lower() == name.lower():
            return cat
    return None

async def seed_default_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    """Ensure the user has the default categories; create missing ones.

    Returns the list of categories that were created (empty if none were needed).
    """
    # Fetch existing (name, type) pairs for the user, case-insensitive
    result = await db.execute(select(Category.name, Category.type).where(Category.user_id == user_id))
    existing = {(row[0].lower(), row[1]) for row in result.all()}

    categories_to_create: List[Category] = []
    for cat in DEFAULT_CATEGORIES:
        if (cat["name"].lower(), cat["type"]) not in existing:
            categories_to_create.append(
                Category(
                    user_id=user_id,
                    name=cat["name"],
                    color=cat["color"],
                    icon=cat["icon"],
                    type=cat["type"],
                    is_default=True,
                )
            )

    if categories_to_create:
        db.add_all(categories_to_create)
        await db.commit()
        for c in categories_to_create:
            await db.refresh(c)

    return categories_to_create
