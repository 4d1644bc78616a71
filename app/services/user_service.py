"""
app/services/user_service.py

Purpose: User profile management

- Sync profile fields on every login (users/{uid}/profile)
- Link a Telegram ID to an existing account
- Register Telegram-only accounts (uid tg_<telegramId>)
- Admin listing of all users with their ban state
"""

from typing import Any, Dict, List, Optional

from app.core.exceptions import StoreError
from app.core.logging import get_logger, LogContext
from app.db.store import DocumentStore
from app.models.user import BanStatus, FullUserData, User, UserProfile, telegram_uid
from utils.time_utils import now_ms

logger = get_logger(__name__)

TELEGRAM_EMAIL_PLACEHOLDER = "Telegram User"
NO_EMAIL_PLACEHOLDER = "No Email"


def profile_path(uid: str) -> str:
    return f"users/{uid}/profile"


class UserService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_user_profile(self, uid: str) -> Dict[str, Any]:
        """
        Reads the stored profile.

        Returns:
            Profile dict, empty if missing or unreadable
        """
        try:
            return await self.store.get(profile_path(uid)) or {}
        except StoreError as e:
            logger.error(f"Error fetching user profile {uid}: {e}")
            return {}

    async def sync_user_profile(self, user: User) -> None:
        """
        Upserts profile fields after a login.

        An already linked telegramId is kept unless the user carries one.
        Failures are logged and swallowed; login continues regardless.
        """
        with LogContext(user_id=user.uid):
            try:
                existing = await self.store.get(profile_path(user.uid)) or {}

                if user.email:
                    email = user.email
                elif user.auth_method == "telegram":
                    email = TELEGRAM_EMAIL_PLACEHOLDER
                else:
                    email = NO_EMAIL_PLACEHOLDER

                await self.store.update(profile_path(user.uid), {
                    "displayName": user.display_name or "Unknown",
                    "email": email,
                    "photoURL": user.photo_url or "",
                    "lastLogin": now_ms(),
                    "telegramId": user.telegram_id or existing.get("telegramId"),
                    "authMethod": user.auth_method,
                })
                logger.debug("Profile synced")
            except StoreError as e:
                logger.error(f"Failed to sync user profile: {e}")

    async def link_telegram_id(self, uid: str, telegram_id: str) -> None:
        """
        Stores a verified Telegram ID on an existing profile.

        Raises:
            StoreError: If the write fails
        """
        await self.store.update(profile_path(uid), {"telegramId": telegram_id})
        logger.info(f"🔗 Linked Telegram ID to {uid}")

    async def register_telegram_user(self, telegram_id: str, nickname: str) -> User:
        """
        Creates (or refreshes) a Telegram-only account.

        Raises:
            StoreError: If the profile cannot be saved
        """
        user = User(
            uid=telegram_uid(telegram_id),
            display_name=nickname.strip(),
            email=None,
            photo_url=None,
            telegram_id=telegram_id,
            auth_method="telegram",
        )

        await self.store.update(profile_path(user.uid), {
            "displayName": user.display_name,
            "email": TELEGRAM_EMAIL_PLACEHOLDER,
            "photoURL": "",
            "lastLogin": now_ms(),
            "telegramId": telegram_id,
            "authMethod": "telegram",
        })
        logger.info(f"✅ Registered Telegram user {user.uid}")
        return user

    async def list_all_users(self) -> List[FullUserData]:
        """
        All users with profile and security joined, most recent login first.
        """
        records = await self.store.children("users")

        users = [
            FullUserData(
                uid=uid,
                profile=UserProfile.model_validate(value.get("profile") or {}),
                security=BanStatus.model_validate(value.get("security") or {}),
            )
            for uid, value in records.items()
        ]
        return sorted(users, key=lambda u: u.profile.last_login or 0, reverse=True)
