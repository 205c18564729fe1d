# gameledger/api/v1/routes/trends.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gameledger.core.database import get_async_session
from gameledger.api.deps import get_current_profile
from gameledger.crud.transaction import get_transactions_between
from gameledger.models.category import EntryType
from gameledger.models.profile import Profile
from gameledger.schemas.stats import CategoryTrend, MonthlyTrend, SpendingPatterns, TrendData, YearlyComparison
from gameledger.utils.statistics import (
    category_trends,
    monthly_trends,
    pattern_window,
    spending_patterns,
    yearly_comparison,
)

router = APIRouter(prefix="/trends", tags=["trends"])

COMPARED_YEARS = 3

def _year_bounds(year: int):
    return date(year, 1, 1), date(year, 12, 31)

async def _year_transactions(profile: Profile, year: int, db: AsyncSession, type: Optional[EntryType] = None):
    start, end = _year_bounds(year)
    return await get_transactions_between(profile.id, start, end, db, type=type)

async def _yearly_comparison(profile: Profile, db: AsyncSession) -> YearlyComparison:
    current_year = date.today().year
    by_year = {}
    for year in range(current_year - COMPARED_YEARS + 1, current_year + 1):
        by_year[year] = await _year_transactions(profile, year, db)
    return yearly_comparison(by_year)

async def _spending_patterns(profile: Profile, db: AsyncSession) -> SpendingPatterns:
    start, end = pattern_window(date.today())
    transactions = await get_transactions_between(profile.id, start, end, db, type=EntryType.expense)
    return spending_patterns(transactions)

@router.get("", response_model=TrendData)
async def get_trends(
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Defaults to the current year"),
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    """Monthly and category trends for a year, the three-year comparison and recent spending patterns"""
    year = year or date.today().year
    transactions = await _year_transactions(profile, year, db)
    return TrendData(
        year=year,
        monthly=monthly_trends(transactions),
        categories=category_trends(transactions),
        yearly_comparison=await _yearly_comparison(profile, db),
        patterns=await _spending_patterns(profile, db),
    )

@router.get("/monthly", response_model=List[MonthlyTrend])
async def get_monthly_trends(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    year = year or date.today().year
    return monthly_trends(await _year_transactions(profile, year, db))

@router.get("/categories", response_model=List[CategoryTrend])
async def get_category_trends(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    year = year or date.today().year
    return category_trends(await _year_transactions(profile, year, db, type=EntryType.expense))

@router.get("/yearly", response_model=YearlyComparison)
async def get_yearly_comparison(
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    return await _yearly_comparison(profile, db)

@router.get("/patterns", response_model=SpendingPatterns)
async def get_spending_patterns(
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    return await _spending_patterns(profile, db)
