from fastapi import APIRouter

from gameledger.api.v1.routes import (
    profile,
    categories,
    transactions,
    budgets,
    alerts,
    dashboard,
    trends,
    onboarding,
)

# Business routes mounted under /api/v1; the fastapi-users routers are added in main
api_router = APIRouter()

api_router.include_router(profile.router)
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(budgets.router)
api_router.include_router(alerts.router)
api_router.include_router(dashboard.router)
api_router.include_router(trends.router)
api_router.include_router(onboarding.router)
