"""
app/services/identity_service.py

Purpose: Identity resolution

- Verifies Google ID tokens (tokeninfo endpoint)
- Normalizes Google and Telegram logins into one User
- Profile sync and ban check right after every resolved login
"""

import httpx
from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ExternalServiceError, StoreError
from app.core.logging import get_logger, LogContext
from app.models.user import User
from app.services.ban_service import BanService
from app.services.user_service import UserService

logger = get_logger(__name__)


class GoogleIdentityProvider:

    def __init__(self, client_id: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.url = settings.GOOGLE_TOKENINFO_URL
        self._transport = transport

    async def verify_id_token(self, id_token: str) -> Dict[str, Any]:
        """
        Validates a Google ID token.

        Returns:
            Token claims (sub, name, email, picture, ...)

        Raises:
            AuthenticationError: Token rejected or issued for another client
            ExternalServiceError: Google unreachable
        """
        try:
            async with httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                response = await client.get(self.url, params={"id_token": id_token})
        except httpx.RequestError as e:
            logger.error(f"Google token verification unreachable: {e}")
            raise ExternalServiceError("Login service unavailable. Please try again.")

        if response.status_code != 200:
            logger.warning(f"Google rejected ID token: HTTP {response.status_code}")
            raise AuthenticationError("Invalid Google credentials")

        claims = response.json()
        if self.client_id and claims.get("aud") != self.client_id:
            logger.warning("ID token audience mismatch")
            raise AuthenticationError("Invalid Google credentials")
        if not claims.get("sub"):
            raise AuthenticationError("Invalid Google credentials")

        return claims


@dataclass
class ResolvedIdentity:
    user: User
    banned: bool


class IdentityService:
    """
    Turns an external login into a canonical User and checks its ban state.
    """

    def __init__(self, users: UserService, bans: BanService):
        self.users = users
        self.bans = bans

    async def resolve_google_user(self, claims: Dict[str, Any]) -> User:
        """
        Maps provider claims 1:1 and attaches any linked Telegram ID.
        """
        user = User(
            uid=claims["sub"],
            display_name=claims.get("name"),
            email=claims.get("email"),
            photo_url=claims.get("picture"),
            auth_method="google",
        )
        return await self.refresh(user)

    async def refresh(self, user: User) -> User:
        """
        Re-resolves a remembered user on page load.

        Telegram-only accounts have no external provider, so the stored
        session record is the identity as is. Provider accounts pick up a
        Telegram ID linked since the last login.
        """
        if user.is_telegram_only:
            return user

        profile = await self.users.get_user_profile(user.uid)
        if profile.get("telegramId"):
            user = user.model_copy(update={"telegram_id": profile["telegramId"]})
        return user

    async def complete_login(self, user: User) -> ResolvedIdentity:
        """
        Syncs the profile, then checks the ban ledger.

        A ban-ledger read failure is logged and treated as not banned.
        """
        with LogContext(user_id=user.uid):
            await self.users.sync_user_profile(user)

            try:
                status = await self.bans.get_status(user.uid)
            except StoreError as e:
                logger.error(f"Ban check failed, letting login proceed: {e}")
                return ResolvedIdentity(user=user, banned=False)

            if status.is_banned:
                logger.warning("🚫 Banned user attempted to log in")
            return ResolvedIdentity(user=user, banned=status.is_banned)


_google_provider: Optional[GoogleIdentityProvider] = None


def get_google_provider() -> GoogleIdentityProvider:
    global _google_provider
    if _google_provider is None:
        _google_provider = GoogleIdentityProvider()
    return _google_provider
