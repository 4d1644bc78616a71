"""
app/services/ban_service.py

Purpose: Ban ledger

- Strike counter and ban state per user (users/{uid}/security)
- Automatic ban when strikes reach the configured maximum
- Operator ban / unban
- Every change is one store write (no partially updated record)
"""

from typing import Optional

from app.core.config import settings
from app.core.logging import get_logger, LogContext
from app.db.store import DocumentStore
from app.models.user import BanStatus
from utils.constants import AUTO_BAN_REASON
from utils.time_utils import now_ms

logger = get_logger(__name__)


def security_path(uid: str) -> str:
    return f"users/{uid}/security"


class BanService:
    """
    Tracks verification strikes and ban state.

    Store failures propagate as StoreError: a strike that could not be
    written is never reported as "not banned".
    """

    def __init__(self, store: DocumentStore, max_strikes: Optional[int] = None):
        self.store = store
        self.max_strikes = max_strikes or settings.MAX_BAN_STRIKES

    async def get_status(self, uid: str) -> BanStatus:
        """
        Reads ban state; an absent record means not banned, 0 attempts.
        """
        data = await self.store.get(security_path(uid))
        if not data:
            return BanStatus()
        return BanStatus.model_validate(data)

    async def increment_strike(self, uid: str) -> BanStatus:
        """
        Adds one strike and bans the user at the threshold.

        Args:
            uid: User id

        Returns:
            The status as written: strike count and whether this strike banned the user
        """
        with LogContext(user_id=uid):
            status = await self.get_status(uid)
            attempts = status.attempts + 1

            if attempts >= self.max_strikes:
                banned = BanStatus(
                    is_banned=True,
                    attempts=attempts,
                    reason=AUTO_BAN_REASON,
                    banned_at=now_ms(),
                )
                await self.store.update(security_path(uid), banned.to_store())
                logger.warning(f"🚫 BANNED USER (AUTO): {uid} after {attempts} strikes")
                return banned

            await self.store.update(security_path(uid), {"attempts": attempts})
            logger.info(f"⚠️ Strike {attempts}/{self.max_strikes} for {uid}")
            return status.model_copy(update={"attempts": attempts})

    async def ban(self, uid: str, reason: str) -> None:
        """Operator ban."""
        await self.store.update(security_path(uid), {
            "isBanned": True,
            "reason": reason,
            "bannedAt": now_ms(),
        })
        logger.warning(f"🚫 BANNED USER: {uid} ({reason})")

    async def unban(self, uid: str) -> None:
        """
        Clears the ban and resets strikes in a single replace.
        """
        await self.store.set(security_path(uid), BanStatus().to_store())
        logger.info(f"✅ UNBANNED USER: {uid}")
