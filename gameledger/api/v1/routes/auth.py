# gameledger/api/v1/routes/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from gameledger.core.auth import User, SESSION_COOKIE_NAME
from gameledger.api.deps import get_optional_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

# Registered ahead of the fastapi-users routers so it wins for this path
@router.post("/jwt/logout", status_code=status.HTTP_200_OK)
async def logout(
    response: Response,
    user: Optional[User] = Depends(get_optional_current_user),
):
    """
    Logout endpoint that doesn't require authentication.
    Clears the session cookie if present.
    """
    response.delete_cookie(key=SESSION_COOKIE_NAME)
    if user is not None:
        logger.info(f"User {user.email} logged out")
    return {"detail": "Successfully logged out"}
