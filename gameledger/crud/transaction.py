# gameledger/crud/transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from gameledger.models.category import EntryType
from gameledger.models.transaction import Transaction
from typing import List, Optional, Tuple
from datetime import date
import uuid
from gameledger.schemas.transaction import TransactionCreate, TransactionUpdate

DEFAULT_PAGE_SIZE = 20

def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of a `YYYY-MM` month."""
    year_str, month_str = month.split("-")
    year, month_num = int(year_str), int(month_str)
    if not 1 <= month_num <= 12:
        raise ValueError(f"Invalid month: {month}")
    start = date(year, month_num, 1)
    if month_num == 12:
        next_start = date(year + 1, 1, 1)
    else:
        next_start = date(year, month_num + 1, 1)
    return start, date.fromordinal(next_start.toordinal() - 1)

async def get_transactions_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Transaction]:
    result = await db.execute(select(Transaction).where(Transaction.user_id == user_id))
    return result.scalars().all()

async def get_transactions_between(
    user_id: uuid.UUID,
    start: date,
    end: date,
    db: AsyncSession,
    type: Optional[EntryType] = None,
    category_id: Optional[uuid.UUID] = None,
) -> List[Transaction]:
    """Transactions dated within [start, end], both inclusive."""
    query = select(Transaction).where(
        Transaction.user_id == user_id,
        Transaction.date >= start,
        Transaction.date <= end,
    )
    if type is not None:
        query = query.where(Transaction.type == type)
    if category_id is not None:
        query = query.where(Transaction.category_id == category_id)
    result = await db.execute(query.order_by(Transaction.date))
    return result.scalars().all()

async def sum_amount_between(
    user_id: uuid.UUID,
    start: date,
    end: date,
    type: EntryType,
    db: AsyncSession,
    category_id: Optional[uuid.UUID] = None,
) -> float:
    query = select(func.coalesce(func.sum(Transaction.amount), 0.0)).where(
        Transaction.user_id == user_id,
        Transaction.type == type,
        Transaction.date >= start,
        Transaction.date <= end,
    )
    if category_id is not None:
        query = query.where(Transaction.category_id == category_id)
    result = await db.execute(query)
    return float(result.scalar_one() or 0)

async def get_recent_transactions(db: AsyncSession, user_id: uuid.UUID, limit: int = 10) -> List[Transaction]:
    """Get the most recently recorded transactions for a user"""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(desc(Transaction.created_at))
        .limit(limit)
    )
    return result.scalars().all()

async def count_transactions(user_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(Transaction).where(Transaction.user_id == user_id)
    )
    return result.scalar_one() or 0

async def list_transactions(
    user_id: uuid.UUID,
    db: AsyncSession,
    search: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    type: Optional[EntryType] = None,
    month: Optional[str] = None,
    page: int = 1,
    per_page: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Transaction], int]:
    """Filtered, paginated transactions plus the exact total matching the filters."""
    filters = [Transaction.user_id == user_id]
    if search:
        filters.append(Transaction.description.ilike(f"%{search}%"))
    if category_id is not None:
        filters.append(Transaction.category_id == category_id)
    if type is not None:
        filters.append(Transaction.type == type)
    if month:
        start, end = month_bounds(month)
        filters.append(Transaction.date >= start)
        filters.append(Transaction.date <= end)

    count_result = await db.execute(
        select(func.count()).select_from(Transaction).where(*filters)
    )
    total = count_result.scalar_one() or 0

    result = await db.execute(
        select(Transaction)
        .where(*filters)
        .order_by(desc(Transaction.date), desc(Transaction.created_at))
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return result.scalars().all(), total

async def get_transaction_by_id(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Transaction]:
    result = await db.execute(
        select(Transaction).where(Transaction.id == transaction_id, Transaction.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_transaction_for_user(
    user_id: uuid.UUID,
    tx_in: TransactionCreate,
    exp_gained: int,
    db: AsyncSession,
    commit: bool = True,
) -> Transaction:
    new_tx = Transaction(**tx_in.model_dump(), user_id=user_id, exp_gained=exp_gained)
    db.add(new_tx)
    if commit:
        await db.commit()
        await db.refresh(new_tx)
    else:
        await db.flush()
    return new_tx

async def update_transaction(tx: Transaction, tx_in: TransactionUpdate, db: AsyncSession) -> Transaction:
    for field, value in tx_in.model_dump(exclude_unset=True).items():
        setattr(tx, field, value)
    db.add(tx)
    await db.commit()
    await db.refresh(tx)
    return tx

async def delete_transaction(tx: Transaction, db: AsyncSession) -> None:
    await db.delete(tx)
    await db.commit()
