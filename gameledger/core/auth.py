# gameledger/core/auth.py

import uuid
import logging
import asyncio
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    CookieTransport,
    JWTStrategy,
)
from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase
from fastapi_users import schemas
from fastapi_users_db_sqlalchemy.generics import GUID

from sqlalchemy import Column, String, Boolean, Integer, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.ext.asyncio import AsyncSession

import sendgrid
from sendgrid.helpers.mail import Mail

from .database import Base, get_async_session
from .config import settings

logger = logging.getLogger(__name__)

JWT_AUDIENCE = ["fastapi-users:auth"]
SESSION_COOKIE_NAME = "access_token"

# 1. User DB model. Gamification and budget state lives on Profile.
class User(Base):
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    email = Column(String(length=320), unique=True, index=True, nullable=False)
    hashed_password = Column(String(length=1024), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    profile = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    categories = relationship("Category", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    category_budgets = relationship("CategoryBudget", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    budget_alerts = relationship("BudgetAlert", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    badges = relationship("UserBadge", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    # Joined so fastapi-users can append to it without a lazy load
    oauth_accounts = relationship(
        "OAuthAccount",
        lazy="joined",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User email={self.email}>"

# Google / GitHub identities linked to a User
class OAuthAccount(Base):
    __tablename__ = "oauth_accounts"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    oauth_name = Column(String(length=100), index=True, nullable=False)
    access_token = Column(String(length=1024), nullable=False)
    expires_at = Column(Integer, nullable=True)
    refresh_token = Column(String(length=1024), nullable=True)
    account_id = Column(String(length=320), index=True, nullable=False)
    account_email = Column(String(length=320), nullable=False)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

# 2. Pydantic schemas
class UserRead(schemas.BaseUser[uuid.UUID]):
    pass

class UserCreate(schemas.BaseUserCreate):
    full_name: Optional[str] = None
    username: Optional[str] = None

class UserUpdate(schemas.BaseUserUpdate):
    pass

def _email_layout(title: str, greeting_name: str, body: str, button_label: str, link: str, footnote: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>{title} - Game Ledger</title></head>
    <body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f5f3ff;">
        <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; padding: 24px;">
            <h1 style="color: #7c3aed; font-size: 22px; text-align: center;">🎮 Game Ledger</h1>
            <h2 style="color: #333;">{title}</h2>
            <p style="color: #555;">Hello <strong>{greeting_name}</strong>!</p>
            <p style="color: #555; line-height: 1.6;">{body}</p>
            <div style="text-align: center; margin: 28px 0;">
                <a href="{link}" style="background-color: #7c3aed; color: #ffffff; padding: 14px 28px; text-decoration: none; border-radius: 6px; font-weight: bold;">{button_label}</a>
            </div>
            <p style="color: #888; font-size: 13px; word-break: break-all;">{link}</p>
            <p style="color: #888; font-size: 13px;">{footnote}</p>
        </div>
    </body>
    </html>
    """

async def send_email_via_sendgrid(to_email: str, subject: str, body: str) -> bool:
    """
    Send an HTML email through SendGrid without blocking the event loop.
    Returns False (and logs) when delivery is not configured or fails.
    """
    if not settings.SENDGRID_API_KEY:
        logger.warning(f"SendGrid API key not configured, skipping email to {to_email}")
        return False

    try:
        message = Mail(
            from_email=(settings.EMAIL_FROM, settings.EMAIL_FROM_NAME),
            to_emails=to_email,
            subject=subject,
            html_content=body
        )
        message.reply_to = settings.EMAIL_FROM

        sg = sendgrid.SendGridAPIClient(api_key=settings.SENDGRID_API_KEY)
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, sg.send, message)

        if response.status_code == 202:
            logger.info(f"✅ Email sent successfully to {to_email}")
            return True
        logger.error(f"❌ Failed to send email. Status code: {response.status_code}")
        return False

    except Exception as e:
        logger.error(f"❌ Exception while sending email to {to_email}: {str(e)}")
        return False

# 3. User Manager
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has registered. Creating profile and default categories…")

        # Local imports: crud modules depend on the models registered against this Base
        from gameledger.crud.profile import create_profile_for_user
        from gameledger.crud.category import seed_default_categories_for_user

        session = self.user_db.session
        full_name = getattr(self, "_pending_full_name", None)
        username = getattr(self, "_pending_username", None)
        await create_profile_for_user(user.id, session, full_name=full_name, username=username)
        await seed_default_categories_for_user(user.id, session)

        # OAuth sign-ups arrive verified by the provider
        if user.is_verified:
            return
        try:
            await self.request_verify(user, request)
        except Exception as e:
            logger.error(f"❌ Error requesting verification for {user.email}: {str(e)}")

    async def create(self, user_create, safe: bool = False, request: Optional[Request] = None) -> User:
        # Profile fields are not User columns; keep them for on_after_register
        self._pending_full_name = getattr(user_create, "full_name", None)
        self._pending_username = getattr(user_create, "username", None)
        account_fields = user_create.model_dump(exclude_unset=True, exclude={"full_name", "username"})
        return await super().create(
            schemas.BaseUserCreate(**account_fields), safe=safe, request=request
        )

    async def on_after_request_verify(self, user: User, token: str, request: Optional[Request] = None):
        logger.info(f"Verification requested for user {user.email}. Token: {token[:10]}...")
        verification_url = f"{settings.FRONTEND_URL}/verify-email?token={token}"
        html_body = _email_layout(
            title="Verify your email",
            greeting_name=user.email.split('@')[0],
            body="Thanks for joining Game Ledger! Confirm your email address to start earning XP for every entry you record.",
            button_label="Verify Email Address",
            link=verification_url,
            footnote="If you didn't create this account, you can ignore this email.",
        )
        await send_email_via_sendgrid(user.email, "🎮 Verify your Game Ledger account", html_body)

    async def on_after_forgot_password(self, user: User, token: str, request: Optional[Request] = None):
        logger.info(f"Password reset requested for user {user.email}. Token: {token[:10]}...")
        reset_url = f"{settings.FRONTEND_URL}/reset-password?token={token}"
        html_body = _email_layout(
            title="Reset your password",
            greeting_name=user.email.split('@')[0],
            body="We received a request to reset your Game Ledger password. Use the button below to choose a new one.",
            button_label="Reset Password",
            link=reset_url,
            footnote="If you didn't request a reset, your password stays unchanged.",
        )
        await send_email_via_sendgrid(user.email, "🔑 Reset your Game Ledger password", html_body)

    async def on_after_verify(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has been verified successfully! 🎉")

    async def on_after_reset_password(self, user: User, request: Optional[Request] = None):
        logger.info(f"Password reset completed for user {user.email}")

# 4. User Database
async def get_user_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, User, OAuthAccount)

# 5. User Manager dependency
async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)

# 6. Authentication: bearer for API clients, cookie for browser sessions
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")
cookie_transport = CookieTransport(
    cookie_name=SESSION_COOKIE_NAME,
    cookie_max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    cookie_secure=settings.COOKIE_SECURE,
)

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        token_audience=JWT_AUDIENCE,
        algorithm=settings.ALGORITHM,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

cookie_backend = AuthenticationBackend(
    name="cookie",
    transport=cookie_transport,
    get_strategy=get_jwt_strategy,
)

# 7. FastAPI Users instance
fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend, cookie_backend])

current_active_user = fastapi_users.current_user(active=True)

__all__ = [
    "fastapi_users",
    "auth_backend",
    "cookie_backend",
    "current_active_user",
    "get_user_db",
    "get_user_manager",
    "User",
    "OAuthAccount",
    "UserRead",
    "UserCreate",
    "UserUpdate",
    "UserManager",
]
