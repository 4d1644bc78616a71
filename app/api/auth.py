"""
app/api/auth.py

Purpose: Sign-in endpoints

- Google login (ID token verified server-side)
- Session resolution on page load (remembered Google or Telegram user)
- Logout
- Ban check after every resolved login
"""

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_current_session,
    get_identity_service,
    get_session_service,
    session_payload,
)
from app.core.exceptions import AccountBannedError
from app.core.logging import get_logger
from app.models.user import User
from app.schemas.requests import GoogleLoginRequest
from app.services.identity_service import (
    GoogleIdentityProvider,
    IdentityService,
    get_google_provider,
)
from app.services.session_service import Session, SessionService
from utils.constants import BANNED_MESSAGE

logger = get_logger(__name__)
router = APIRouter(prefix="/auth")


async def sign_in(
    user: User,
    session: Session,
    identity: IdentityService,
    sessions: SessionService,
) -> Session:
    """Profile sync + ban check, then either attach the user or force the ban screen."""
    resolved = await identity.complete_login(user)
    if resolved.banned:
        session.user = resolved.user
        return await sessions.force_logout_banned(session)
    session = await sessions.attach_user(session, resolved.user)
    return await sessions.refresh(session)


@router.post("/google")
async def google_login(
    body: GoogleLoginRequest,
    session: Session = Depends(get_current_session),
    google: GoogleIdentityProvider = Depends(get_google_provider),
    identity: IdentityService = Depends(get_identity_service),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Signs in with a Google ID token.

    Returns:
        Session payload; ``appState.view`` is "banned" for banned accounts
    """
    if session.is_banned:
        raise AccountBannedError(BANNED_MESSAGE)

    claims = await google.verify_id_token(body.id_token)
    user = await identity.resolve_google_user(claims)
    session = await sign_in(user, session, identity, sessions)
    return session_payload(session)


@router.get("/me")
async def current_user(
    session: Session = Depends(get_current_session),
    identity: IdentityService = Depends(get_identity_service),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Resolves the remembered user on page load.

    No user -> anonymous payload. Otherwise the user is refreshed,
    the profile synced and the ban ledger checked again.
    """
    user = session.signed_in_user
    if user is None:
        return session_payload(session)

    user = await identity.refresh(user)
    session = await sign_in(user, session, identity, sessions)
    return session_payload(session)


@router.post("/logout")
async def logout(
    session: Session = Depends(get_current_session),
    sessions: SessionService = Depends(get_session_service),
):
    if session.is_banned:
        raise AccountBannedError(BANNED_MESSAGE)
    session = await sessions.logout(session)
    return session_payload(session)
