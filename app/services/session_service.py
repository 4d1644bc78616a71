"""
app/services/session_service.py

Purpose: Session and app-state management

- One session document per browser (sessions/{id}), id held in a cookie
- Signed-in user record (the only local session for Telegram-only accounts)
- Persists the view router's AppState
- Logout and forced logout of banned users
"""

import secrets
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.core.config import settings
from app.core.logging import get_logger, LogContext
from app.db.store import DocumentStore
from app.flow.router import AppState
from app.flow.states import View
from app.models.user import StoreModel, User
from utils.time_utils import now_ms, session_expiry

logger = get_logger(__name__)


def session_path(session_id: str) -> str:
    return f"sessions/{session_id}"


class Session(StoreModel):
    id: str
    user: Optional[User] = None
    authenticated: bool = False
    app_state: AppState = Field(default_factory=AppState)
    created_at: int = 0
    expires_at: Optional[datetime] = None

    @property
    def signed_in_user(self) -> Optional[User]:
        return self.user if self.authenticated else None

    @property
    def is_banned(self) -> bool:
        return self.app_state.view == View.BANNED


class SessionService:

    def __init__(self, store: DocumentStore, ttl_days: Optional[int] = None):
        self.store = store
        self.ttl_days = ttl_days or settings.SESSION_TTL_DAYS

    async def create_session(self) -> Session:
        """
        Starts an anonymous session on the hero view.
        """
        session = Session(
            id=secrets.token_urlsafe(32),
            created_at=now_ms(),
            expires_at=session_expiry(self.ttl_days),
        )
        await self.save(session)
        logger.debug("New session created")
        return session

    async def get_session(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        data = await self.store.get(session_path(session_id))
        if not data:
            return None
        return Session.model_validate({**data, "id": session_id})

    async def save(self, session: Session) -> None:
        doc = session.to_store()
        doc.pop("id", None)
        # TTL index needs a real date, not the JSON string
        doc["expiresAt"] = session.expires_at
        await self.store.set(session_path(session.id), doc)

    async def attach_user(self, session: Session, user: User) -> Session:
        """
        Marks the session signed in; the user record doubles as the
        persisted Telegram session for Telegram-only accounts.
        """
        with LogContext(user_id=user.uid, session_id=session.id[:8]):
            session.user = user
            session.authenticated = True
            await self.store.update(session_path(session.id), {"user": user.to_store(), "authenticated": True})
            logger.info(f"🔑 Session signed in via {user.auth_method}")
        return session

    async def save_app_state(self, session: Session, state: AppState) -> Session:
        session.app_state = state
        await self.store.update(session_path(session.id), {"appState": state.to_store()})
        return session

    async def refresh(self, session: Session) -> Session:
        """
        Re-reads the stored session after a slow call; another request may
        have moved the view meanwhile.
        """
        return await self.get_session(session.id) or session

    async def force_logout_banned(self, session: Session) -> Session:
        """
        Logs the session out but keeps the user so the ban screen can greet them.
        """
        session.authenticated = False
        session.app_state = AppState(view=View.BANNED)
        fields = {"authenticated": False, "appState": session.app_state.to_store()}
        if session.user is not None:
            fields["user"] = session.user.to_store()
        await self.store.update(session_path(session.id), fields)
        logger.warning(f"Session {session.id[:8]} forced out (banned)")
        return session

    async def logout(self, session: Session) -> Session:
        session.user = None
        session.authenticated = False
        session.app_state = AppState()
        await self.store.update(session_path(session.id), {
            "user": None,
            "authenticated": False,
            "appState": session.app_state.to_store(),
        })
        logger.info(f"Session {session.id[:8]} logged out")
        return session
