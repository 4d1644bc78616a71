"""
app/services/otp_service.py

Purpose: Telegram ownership verification

- One-time 6-digit code per verification, held in memory only
- Code delivered through the Telegram bot
- Links the Telegram ID to a signed-in user, or registers a
  Telegram-only account (uid tg_<telegramId>) after a nickname
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from app.core.config import settings
from app.core.exceptions import (
    InvalidTransitionError,
    OtpMismatchError,
    ResourceNotFoundError,
    StoreError,
    TelegramDeliveryError,
    ValidationError,
)
from app.db.mongo import get_store
from app.core.logging import get_logger, LogContext
from app.flow.states import OtpStep
from app.models.user import User
from app.services.telegram_service import TelegramService, get_telegram_service
from app.services.user_service import UserService
from utils.constants import (
    BOT_NOT_STARTED_MESSAGE,
    INVALID_CODE_MESSAGE,
    INVALID_TELEGRAM_ID_MESSAGE,
    LINK_FAILED_MESSAGE,
    NICKNAME_REQUIRED_MESSAGE,
    REGISTRATION_FAILED_MESSAGE,
    TELEGRAM_NETWORK_ERROR_MESSAGE,
)
from utils.time_utils import is_older_than
from utils.validation_utils import validate_telegram_id

logger = get_logger(__name__)


def generate_code() -> str:
    """Uniform 6-digit code in [100000, 999999]."""
    return str(secrets.randbelow(900000) + 100000)


@dataclass
class OtpSession:
    verification_id: str
    code: str
    user: Optional[User] = None
    telegram_id: Optional[str] = None
    step: OtpStep = OtpStep.AWAITING_ID
    started_at: datetime = field(default_factory=datetime.utcnow)


class OtpService:
    """
    Drives awaiting-id -> awaiting-code -> (awaiting-nickname) -> completed.

    Codes have no expiry and no attempt limit while the verification
    is open; abandoned verifications are pruned from memory.
    """

    def __init__(self, telegram: TelegramService, users: UserService, prune_minutes: Optional[int] = None):
        self.telegram = telegram
        self.users = users
        self.prune_minutes = prune_minutes or settings.OTP_SESSION_PRUNE_MINUTES
        self._sessions: Dict[str, OtpSession] = {}

    def start(self, user: Optional[User] = None) -> OtpSession:
        """
        Opens a verification with a fresh code.

        Args:
            user: Signed-in user linking Telegram, or None for Telegram-only sign-up
        """
        self._prune()
        session = OtpSession(
            verification_id=secrets.token_urlsafe(16),
            code=generate_code(),
            user=user,
        )
        self._sessions[session.verification_id] = session
        logger.info(f"🔐 Telegram verification started ({'link' if user else 'sign-up'})")
        return session

    def get(self, verification_id: str) -> OtpSession:
        session = self._sessions.get(verification_id)
        if session is None:
            raise ResourceNotFoundError("Verification not found. Please start again.")
        return session

    def _require_step(self, session: OtpSession, step: OtpStep) -> None:
        if session.step != step:
            raise InvalidTransitionError(
                f"Verification is at '{session.step.value}'",
                details={"step": session.step.value, "expected": step.value}
            )

    async def send_code(self, verification_id: str, telegram_id: str) -> OtpSession:
        """
        Sends this verification's code to the given Telegram ID.

        Raises:
            ValidationError: Telegram ID is not a 5+ digit number
            TelegramDeliveryError: Bot not started, network or API failure;
                the same code stays valid for a retry
        """
        session = self.get(verification_id)
        self._require_step(session, OtpStep.AWAITING_ID)

        telegram_id = (telegram_id or "").strip()
        if not validate_telegram_id(telegram_id):
            raise ValidationError(INVALID_TELEGRAM_ID_MESSAGE, details={"telegramId": INVALID_TELEGRAM_ID_MESSAGE})

        with LogContext(verification_id=verification_id[:8]):
            result = await self.telegram.send_verification_code(telegram_id, session.code)

            if not result["success"]:
                reason = result["error"]
                if reason == "bot_not_started":
                    message = BOT_NOT_STARTED_MESSAGE.format(bot_username=settings.TELEGRAM_BOT_USERNAME)
                elif reason == "network_error":
                    message = TELEGRAM_NETWORK_ERROR_MESSAGE
                else:
                    message = f"Error: {reason}"
                raise TelegramDeliveryError(message, reason=reason)

            session.telegram_id = telegram_id
            session.step = OtpStep.AWAITING_CODE
            logger.info("✅ Verification code delivered")
        return session

    def change_id(self, verification_id: str) -> OtpSession:
        """Back to ID entry; the code is kept."""
        session = self.get(verification_id)
        self._require_step(session, OtpStep.AWAITING_CODE)
        session.step = OtpStep.AWAITING_ID
        return session

    async def verify_code(self, verification_id: str, code: str) -> OtpSession:
        """
        Checks the entered code against this verification's code.

        Existing users get the Telegram ID linked and complete; sign-ups
        move on to nickname entry.

        Raises:
            OtpMismatchError: Wrong code (unlimited retries)
            StoreError: Link could not be saved; step unchanged
        """
        session = self.get(verification_id)
        self._require_step(session, OtpStep.AWAITING_CODE)

        if (code or "").strip() != session.code:
            logger.info("❌ Verification code mismatch")
            raise OtpMismatchError(INVALID_CODE_MESSAGE)

        if session.user is None:
            session.step = OtpStep.AWAITING_NICKNAME
            return session

        with LogContext(user_id=session.user.uid):
            try:
                await self.users.link_telegram_id(session.user.uid, session.telegram_id)
            except StoreError as e:
                raise StoreError(LINK_FAILED_MESSAGE) from e

        session.user.telegram_id = session.telegram_id
        session.step = OtpStep.COMPLETED
        self._sessions.pop(verification_id, None)
        return session

    async def register(self, verification_id: str, nickname: str) -> User:
        """
        Creates the Telegram-only account for a verified ID.

        Raises:
            ValidationError: Empty nickname
            StoreError: Profile could not be saved; step unchanged
        """
        session = self.get(verification_id)
        self._require_step(session, OtpStep.AWAITING_NICKNAME)

        if not (nickname or "").strip():
            raise ValidationError(NICKNAME_REQUIRED_MESSAGE, details={"nickname": NICKNAME_REQUIRED_MESSAGE})

        try:
            user = await self.users.register_telegram_user(session.telegram_id, nickname)
        except StoreError as e:
            raise StoreError(REGISTRATION_FAILED_MESSAGE) from e

        session.user = user
        session.step = OtpStep.COMPLETED
        self._sessions.pop(verification_id, None)
        return user

    def _prune(self) -> None:
        stale = [
            vid for vid, s in self._sessions.items()
            if is_older_than(s.started_at, self.prune_minutes)
        ]
        for vid in stale:
            del self._sessions[vid]
        if stale:
            logger.debug(f"Pruned {len(stale)} abandoned verifications")


_otp_service: Optional[OtpService] = None


def get_otp_service() -> OtpService:
    """Get or create the in-memory verification registry."""
    global _otp_service
    if _otp_service is None:
        _otp_service = OtpService(get_telegram_service(), UserService(get_store()))
    return _otp_service
