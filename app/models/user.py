"""
app/models/user.py

Purpose: User, profile and security models

- Canonical User for both login methods (Google, Telegram)
- Stored profile at users/{uid}/profile
- Ban state at users/{uid}/security
- Admin projection joining both
"""

from typing import Optional, Literal, Dict, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

AuthMethod = Literal["google", "telegram"]

TELEGRAM_UID_PREFIX = "tg_"


class StoreModel(BaseModel):
    """
    Base for documents persisted in the store.
    Attributes are snake_case, the stored/JSON form is camelCase.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_store(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(StoreModel):
    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None  # None for Telegram-only accounts
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    telegram_id: Optional[str] = None
    auth_method: AuthMethod = "google"

    @property
    def is_telegram_only(self) -> bool:
        return self.auth_method == "telegram"


def telegram_uid(telegram_id: str) -> str:
    """Deterministic uid for accounts created through Telegram."""
    return f"{TELEGRAM_UID_PREFIX}{telegram_id}"


class UserProfile(StoreModel):
    display_name: str = "Unknown"
    email: str = "Unknown"
    photo_url: str = Field(default="", alias="photoURL")
    last_login: int = 0
    telegram_id: Optional[str] = None
    auth_method: Optional[AuthMethod] = None


class BanStatus(StoreModel):
    is_banned: bool = False
    attempts: int = Field(default=0, ge=0)
    reason: Optional[str] = None
    banned_at: Optional[int] = None


class FullUserData(StoreModel):
    """Admin projection, recomputed on every fetch."""
    uid: str
    profile: UserProfile = Field(default_factory=UserProfile)
    security: BanStatus = Field(default_factory=BanStatus)
