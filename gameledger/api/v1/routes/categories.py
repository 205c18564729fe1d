# gameledger/api/v1/routes/categories.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from gameledger.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from gameledger.crud.category import (
    create_category_for_user,
    get_categories_for_user,
    get_category_by_id,
    get_category_by_name_for_user,
    update_category,
    delete_category,
)
from gameledger.core.database import get_async_session
from gameledger.core.auth import User
from gameledger.models.category import EntryType
from gameledger.api.deps import get_current_user

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("", response_model=List[CategoryRead])
async def read_categories(
    type: Optional[EntryType] = Query(None, description="Only income or only expense categories"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_categories_for_user(user_id, db, type=type)

@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    cat_in: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    existing = await get_category_by_name_for_user(cat_in.name, user_id, db)
    if existing and existing.type == cat_in.type:
        raise HTTPException(status.HTTP_409_CONFLICT, detail="Category already exists")
    return await create_category_for_user(user_id, cat_in, db)

@router.get("/{category_id}", response_model=CategoryRead)
async def read_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    category = await get_category_by_id(category_id, user_id, db)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category

@router.patch("/{category_id}", response_model=CategoryRead)
async def update_category_endpoint(
    category_id: uuid.UUID,
    cat_in: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    category = await get_category_by_id(category_id, user_id, db)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    return await update_category(category, cat_in, db)

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category_endpoint(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    category = await get_category_by_id(category_id, user_id, db)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    if category.is_default:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Default categories cannot be deleted")
    await delete_category(category, db)
    return None
