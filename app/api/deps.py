"""
app/api/deps.py

Purpose: Request dependencies

- Service providers (overridable in tests via app.dependency_overrides)
- Session cookie resolution (anonymous session created on first visit)
- Signed-in user and operator guards
"""

from fastapi import Depends, Request, Response

from app.core.config import settings
from app.core.exceptions import AccountBannedError, AuthenticationError, PermissionDeniedError
from app.db.mongo import get_store
from app.db.store import DocumentStore
from app.flow.router import ViewRouter
from app.models.user import User
from app.services.ban_service import BanService
from app.services.country_service import CountryService, get_country_service
from app.services.geocoding_service import GeocodingService, get_geocoding_service
from app.services.identity_service import IdentityService
from app.services.location_service import LocationService
from app.services.order_service import OrderService
from app.services.session_service import Session, SessionService
from app.services.telegram_service import TelegramService, get_telegram_service
from app.services.user_service import UserService
from utils.constants import BANNED_MESSAGE


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_ban_service(store: DocumentStore = Depends(get_store)) -> BanService:
    return BanService(store)


def get_session_service(store: DocumentStore = Depends(get_store)) -> SessionService:
    return SessionService(store)


def get_identity_service(
    users: UserService = Depends(get_user_service),
    bans: BanService = Depends(get_ban_service),
) -> IdentityService:
    return IdentityService(users, bans)


def get_location_service(
    bans: BanService = Depends(get_ban_service),
    geocoder: GeocodingService = Depends(get_geocoding_service),
    countries: CountryService = Depends(get_country_service),
) -> LocationService:
    return LocationService(bans, geocoder, countries)


def get_order_service(
    store: DocumentStore = Depends(get_store),
    telegram: TelegramService = Depends(get_telegram_service),
) -> OrderService:
    return OrderService(store, telegram)


async def get_current_session(
    request: Request,
    response: Response,
    sessions: SessionService = Depends(get_session_service),
) -> Session:
    """
    Loads the session named by the cookie, or starts a new one.
    """
    session = await sessions.get_session(request.cookies.get(settings.SESSION_COOKIE_NAME))
    if session is None:
        session = await sessions.create_session()
        response.set_cookie(
            key=settings.SESSION_COOKIE_NAME,
            value=session.id,
            max_age=settings.SESSION_TTL_DAYS * 24 * 3600,
            httponly=True,
            samesite="lax",
            secure=settings.is_production,
        )
    return session


def require_user(session: Session = Depends(get_current_session)) -> User:
    if session.is_banned:
        raise AccountBannedError(BANNED_MESSAGE)
    user = session.signed_in_user
    if user is None:
        raise AuthenticationError("Please sign in first")
    return user


def require_admin(user: User = Depends(require_user)) -> User:
    if not settings.is_admin_email(user.email):
        raise PermissionDeniedError()
    return user


def view_router(session: Session) -> ViewRouter:
    """Router bound to this session's state and identity."""
    user = session.signed_in_user
    return ViewRouter(
        session.app_state,
        signed_in=user is not None,
        is_admin=user is not None and settings.is_admin_email(user.email),
    )


def session_payload(session: Session) -> dict:
    """Client view of a session: who is signed in and what is mounted."""
    user = session.signed_in_user
    # the banned screen still greets the user by name
    shown = user or (session.user if session.is_banned else None)
    return {
        "user": shown.to_store() if shown else None,
        "authenticated": user is not None,
        "isAdmin": user is not None and settings.is_admin_email(user.email),
        "appState": session.app_state.to_store(),
    }
