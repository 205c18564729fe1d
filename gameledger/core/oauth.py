# gameledger/core/oauth.py
import logging
from typing import List

from httpx_oauth.clients.github import GitHubOAuth2
from httpx_oauth.clients.google import GoogleOAuth2
from httpx_oauth.oauth2 import BaseOAuth2

from .config import settings

logger = logging.getLogger(__name__)


def configured_oauth_clients() -> List[BaseOAuth2]:
    """OAuth providers with credentials set; the others get no routes."""
    clients: List[BaseOAuth2] = []
    if settings.GOOGLE_CLIENT_ID:
        clients.append(GoogleOAuth2(settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CLIENT_SECRET))
    if settings.GITHUB_CLIENT_ID:
        clients.append(GitHubOAuth2(settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET))
    if not clients:
        logger.info("No OAuth providers configured - social sign-in disabled")
    return clients


def oauth_redirect_url(provider: str) -> str:
    # The frontend page forwards code and state to /api/v1/auth/<provider>/callback
    return f"{settings.FRONTEND_URL}/auth/callback/{provider}"
