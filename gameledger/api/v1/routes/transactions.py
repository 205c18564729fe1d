# gameledger/api/v1/routes/transactions.py
import logging
import math
import re
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import uuid

from gameledger.schemas.transaction import (
    TransactionCreate,
    TransactionCreated,
    TransactionPage,
    TransactionRead,
    TransactionUpdate,
)
from gameledger.crud.transaction import (
    DEFAULT_PAGE_SIZE,
    get_recent_transactions,
    get_transaction_by_id,
    list_transactions,
    update_transaction,
    delete_transaction,
)
from gameledger.core.database import get_async_session
from gameledger.core.auth import User
from gameledger.models.category import EntryType
from gameledger.models.profile import Profile
from gameledger.api.deps import get_current_user, get_current_profile
from gameledger.utils.transactions import ensure_category_matches, record_transaction
from gameledger.utils.gamification import calculate_exp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

@router.get("", response_model=TransactionPage)
async def read_transactions(
    search: Optional[str] = Query(None, description="Case-insensitive match on the description"),
    category_id: Optional[uuid.UUID] = Query(None),
    type: Optional[EntryType] = Query(None),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    if month and not MONTH_PATTERN.match(month):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="month must be in YYYY-MM format")

    user_id = uuid.UUID(str(user.id))
    items, total = await list_transactions(
        user_id,
        db,
        search=search,
        category_id=category_id,
        type=type,
        month=month,
        page=page,
        per_page=per_page,
    )
    return TransactionPage(
        items=[TransactionRead.model_validate(t) for t in items],
        total=total,
        page=page,
        per_page=per_page,
        pages=math.ceil(total / per_page) if total else 0,
    )

@router.get("/recent", response_model=List[TransactionRead])
async def read_recent_transactions(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    return await get_recent_transactions(db, user_id, limit=limit)

@router.post("", response_model=TransactionCreated, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    tx_in: TransactionCreate,
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    try:
        return await record_transaction(profile, tx_in, db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Failed to record transaction for {profile.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while saving the transaction"
        )

@router.get("/{transaction_id}", response_model=TransactionRead)
async def read_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    tx = await get_transaction_by_id(transaction_id, user_id, db)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return tx

@router.patch("/{transaction_id}", response_model=TransactionRead)
async def update_transaction_endpoint(
    transaction_id: uuid.UUID,
    tx_in: TransactionUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    tx = await get_transaction_by_id(transaction_id, user_id, db)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")

    changes = tx_in.model_dump(exclude_unset=True)
    category_id = changes.get("category_id", tx.category_id)
    entry_type = changes.get("type", tx.type)
    if "category_id" in changes or "type" in changes:
        await ensure_category_matches(user_id, category_id, entry_type, db)
    if "amount" in changes:
        tx.exp_gained = calculate_exp(changes["amount"])
    return await update_transaction(tx, tx_in, db)

@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction_endpoint(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    tx = await get_transaction_by_id(transaction_id, user_id, db)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    await delete_transaction(tx, db)
    return None
