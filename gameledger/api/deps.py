# gameledger/api/deps.py
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import jwt
import uuid

from gameledger.core.database import get_async_session
from gameledger.core.auth import User, JWT_AUDIENCE, SESSION_COOKIE_NAME
from gameledger.core.config import settings
from gameledger.crud.profile import get_or_create_profile
from gameledger.models.profile import Profile

optional_security = HTTPBearer(auto_error=False)

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[str]:
    """
    Find the access token in the usual places:
    - Authorization header
    - Query parameters
    - Session cookie
    """
    auth_header = request.headers.get("Authorization", "")
    token = None

    if auth_header.startswith("Bearer "):
        token = auth_header[7:]
    elif credentials and credentials.credentials:
        token = credentials.credentials

    if not token:
        token = request.query_params.get("access_token")

    if not token:
        token = request.cookies.get(SESSION_COOKIE_NAME)
        if token and token.startswith("Bearer "):
            token = token[7:]

    return token or None

def decode_user_id(token: str) -> uuid.UUID:
    """Validate a token issued by the auth backends and return its subject."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise _unauthorized("Invalid token: missing user ID")
    try:
        return uuid.UUID(user_id_str)
    except ValueError:
        raise _unauthorized("Invalid user ID format in token")

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> User:
    token = extract_token(request, credentials)
    if not token:
        raise _unauthorized("Not authenticated")

    user_id = decode_user_id(token)

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.unique().scalars().first()
    if not user:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Inactive user")
    return user

# Optional version of get_current_user that doesn't raise exceptions
async def get_optional_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> Optional[User]:
    """
    Returns None instead of raising when authentication fails. Useful for
    endpoints like logout that should work even without a valid session.
    """
    try:
        return await get_current_user(request, db, credentials)
    except HTTPException:
        return None

async def get_current_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> Profile:
    return await get_or_create_profile(uuid.UUID(str(user.id)), db)
