"""
app/api/telegram.py

Purpose: Telegram verification endpoints

Flow:
1. start      -> verification id (links to the signed-in user, if any)
2. send-code  -> code delivered by the bot
3. verify-code-> linked (signed-in user) or awaiting nickname (new account)
4. register   -> Telegram-only account created and signed in
"""

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_current_session,
    get_identity_service,
    get_session_service,
    session_payload,
    view_router,
)
from app.api.auth import sign_in
from app.core.config import settings
from app.core.exceptions import AccountBannedError
from app.core.logging import get_logger
from app.flow.states import NavigationEvent, OtpStep, View
from app.schemas.requests import (
    RegisterRequest,
    SendCodeRequest,
    VerificationRequest,
    VerifyCodeRequest,
)
from app.services.identity_service import IdentityService
from app.services.otp_service import OtpService, OtpSession, get_otp_service
from app.services.session_service import Session, SessionService
from utils.constants import BANNED_MESSAGE

logger = get_logger(__name__)
router = APIRouter(prefix="/telegram/verify")


def otp_payload(otp: OtpSession) -> dict:
    return {
        "verificationId": otp.verification_id,
        "step": otp.step.value,
        "telegramId": otp.telegram_id,
        "botUsername": settings.TELEGRAM_BOT_USERNAME,
    }


async def finish_verification(session: Session, sessions: SessionService) -> Session:
    """Returns to the hero view, unless the user already left the Telegram screen."""
    session = await sessions.refresh(session)
    views = view_router(session)
    if views.apply_if_current(View.TELEGRAM_VERIFY, NavigationEvent.TELEGRAM_VERIFIED):
        session = await sessions.save_app_state(session, views.state)
    return session


@router.post("/start")
async def start_verification(
    session: Session = Depends(get_current_session),
    otp: OtpService = Depends(get_otp_service),
):
    if session.is_banned:
        raise AccountBannedError(BANNED_MESSAGE)
    return otp_payload(otp.start(session.signed_in_user))


@router.post("/send-code")
async def send_code(
    body: SendCodeRequest,
    otp: OtpService = Depends(get_otp_service),
):
    verification = await otp.send_code(body.verification_id, body.telegram_id)
    return otp_payload(verification)


@router.post("/change-id")
async def change_id(
    body: VerificationRequest,
    otp: OtpService = Depends(get_otp_service),
):
    return otp_payload(otp.change_id(body.verification_id))


@router.post("/verify-code")
async def verify_code(
    body: VerifyCodeRequest,
    session: Session = Depends(get_current_session),
    otp: OtpService = Depends(get_otp_service),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Checks the code. A signed-in user gets the Telegram ID linked.
    """
    verification = await otp.verify_code(body.verification_id, body.code)
    payload = otp_payload(verification)

    if verification.step == OtpStep.COMPLETED:
        if session.signed_in_user and session.signed_in_user.uid == verification.user.uid:
            session = await sessions.attach_user(session, verification.user)
        session = await finish_verification(session, sessions)
        payload["session"] = session_payload(session)

    return payload


@router.post("/register")
async def register(
    body: RegisterRequest,
    session: Session = Depends(get_current_session),
    otp: OtpService = Depends(get_otp_service),
    identity: IdentityService = Depends(get_identity_service),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Creates the Telegram-only account and signs this session in with it.
    """
    user = await otp.register(body.verification_id, body.nickname)
    session = await sign_in(user, session, identity, sessions)
    if not session.is_banned:
        session = await finish_verification(session, sessions)

    return {
        "verificationId": body.verification_id,
        "step": OtpStep.COMPLETED.value,
        "session": session_payload(session),
    }
