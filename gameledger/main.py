# gameledger/main.py
import uvicorn
import os
import logging
from pathlib import Path
from fastapi import FastAPI, HTTPException, Form, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from gameledger.core.config import settings
from gameledger.core.database import engine, create_db_and_tables, AsyncSessionLocal
from gameledger.core.route_guard import RouteGuardMiddleware
from gameledger.core.oauth import configured_oauth_clients, oauth_redirect_url
from gameledger.core.auth import (
    fastapi_users,
    auth_backend,
    cookie_backend,
    get_user_manager,
    UserManager,
    UserRead,
    UserCreate,
)
from gameledger.api.v1.api import api_router
from gameledger.api.v1.routes import auth
from gameledger.crud.badge import seed_badges

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_tags=[
        {"name": "Authentication", "description": "Login, logout and registration"},
        {"name": "OAuth", "description": "Google and GitHub sign-in"},
        {"name": "Profile", "description": "Profile, game stats, badges and avatar"},
        {"name": "onboarding", "description": "First-run wizard"},
        {"name": "Budget Alerts", "description": "Budget threshold alerts"},
    ],
)

# CORS Configuration
origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",  # Local development
    "http://localhost:3001",  # Backup local port
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Page redirects for the browser-facing paths
app.add_middleware(RouteGuardMiddleware)

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for better error responses"""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

# ------------------------------------------------------------
# AUTHENTICATION ROUTES
# ------------------------------------------------------------

# Custom logout registered BEFORE the fastapi-users routers so it handles the path
app.include_router(
    auth.router,
    prefix="/api/v1/auth",
    tags=["Authentication"],
)

# JWT (bearer) login
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/api/v1/auth/jwt",
    tags=["Authentication"],
)

# Cookie login for browser sessions; the route guard reads this cookie
app.include_router(
    fastapi_users.get_auth_router(cookie_backend),
    prefix="/api/v1/auth/cookie",
    tags=["Authentication"],
)

# Registration
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/api/v1/auth",
    tags=["Authentication"],
)

# Email verification and password reset routes
app.include_router(
    fastapi_users.get_verify_router(UserRead),
    prefix="/api/v1/auth",
    tags=["Email Verification"],
)

app.include_router(
    fastapi_users.get_reset_password_router(),
    prefix="/api/v1/auth",
    tags=["Password Reset"],
)

# Google / GitHub sign-in; logs in through the cookie backend and creates the
# profile and default categories on first sign-in like a normal registration
for oauth_client in configured_oauth_clients():
    app.include_router(
        fastapi_users.get_oauth_router(
            oauth_client,
            cookie_backend,
            settings.SECRET_KEY,
            redirect_url=oauth_redirect_url(oauth_client.name),
            associate_by_email=True,
            is_verified_by_default=True,
        ),
        prefix=f"/api/v1/auth/{oauth_client.name}",
        tags=["OAuth"],
    )
    logger.info(f"✅ OAuth sign-in enabled: {oauth_client.name}")

@app.post("/api/v1/auth/verify-email", tags=["Email Verification"])
async def verify_email_custom(
    token: str = Form(...),
    user_manager: UserManager = Depends(get_user_manager)
):
    """Email verification endpoint that accepts the token as form data (link target of the email)"""
    try:
        await user_manager.verify(token)
        return {"message": "Email verified successfully"}
    except Exception as e:
        logger.error(f"Email verification failed: {str(e)}")
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

# ------------------------------------------------------------
# ROOT ENDPOINT
# ------------------------------------------------------------
@app.get("/api", tags=["Root"])
async def root():
    """API information"""
    return {
        "message": f"{settings.APP_NAME} is running!",
        "version": settings.VERSION
    }

# ------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ------------------------------------------------------------
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint, including database connectivity"""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"❌ Health check failed: {str(e)}")
        raise HTTPException(status_code=503, detail="Service unhealthy: database unreachable")
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }

# ------------------------------------------------------------
# BUSINESS LOGIC ROUTES
# ------------------------------------------------------------
app.include_router(api_router, prefix="/api/v1")

# ------------------------------------------------------------
# FILES
# ------------------------------------------------------------
# Public buckets (avatars) served straight from MEDIA_ROOT
Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT), name="media")

# Built frontend, mounted last so every API route takes precedence
if settings.FRONTEND_DIST_DIR and Path(settings.FRONTEND_DIST_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.FRONTEND_DIST_DIR, html=True), name="frontend")
    logger.info(f"✅ Serving frontend from {settings.FRONTEND_DIST_DIR}")

# ------------------------------------------------------------
# STARTUP EVENT
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    """Create database tables and seed the badge catalog"""
    await create_db_and_tables()
    async with AsyncSessionLocal() as session:
        await seed_badges(session)
    logger.info("✅ Database tables ready")
    logger.info(f"✅ Frontend URL: {settings.FRONTEND_URL}")
    logger.info(f"✅ Backend URL: {settings.BACKEND_BASE_URL}")
    if not settings.SENDGRID_API_KEY:
        logger.warning("⚠️ SendGrid API key not configured - verification and reset emails will be skipped")

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("gameledger.main:app", host="0.0.0.0", port=port, reload=False)
