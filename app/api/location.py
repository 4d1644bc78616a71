"""
app/api/location.py

Purpose: Location verification endpoints

- Country list for the selector (cached, with fallback)
- GPS acquisition options for the client
- Verification of the declared location against the device fix
"""

from fastapi import APIRouter, Depends, Query

from app.api.deps import (
    get_current_session,
    get_location_service,
    get_session_service,
    require_user,
    session_payload,
    view_router,
)
from app.core.exceptions import AccountBannedError
from app.core.logging import get_logger
from app.flow.states import LocationStep, NavigationEvent, View
from app.models.user import User
from app.schemas.requests import LocationVerifyRequest
from app.services.country_service import CountryService, get_country_service
from app.services.location_service import LocationService, geolocation_options
from app.services.session_service import Session, SessionService

logger = get_logger(__name__)
router = APIRouter(prefix="/location")


@router.get("/countries")
async def list_countries(
    search: str = Query("", description="Case-insensitive name filter"),
    countries: CountryService = Depends(get_country_service),
):
    return [c.to_store() for c in await countries.search(search)]


@router.get("/options")
async def gps_options():
    return geolocation_options()


@router.post("/verify")
async def verify_location(
    body: LocationVerifyRequest,
    user: User = Depends(require_user),
    session: Session = Depends(get_current_session),
    locations: LocationService = Depends(get_location_service),
    sessions: SessionService = Depends(get_session_service),
):
    """
    One verification attempt.

    Mismatches answer 409 with the observed value and strike count.
    The strike that reaches the limit bans the account and ends the session.
    """
    coords = body.coordinates
    try:
        verified = await locations.verify(
            user.uid,
            body.country,
            body.region,
            body.city,
            lat=coords.lat if coords else None,
            lng=coords.lng if coords else None,
            gps_error=body.gps_error,
        )
    except AccountBannedError:
        await sessions.force_logout_banned(session)
        raise

    session = await sessions.refresh(session)
    views = view_router(session)
    applied = views.apply_if_current(
        View.LOCATION_VERIFY, NavigationEvent.LOCATION_VERIFIED, location=verified
    )
    if applied:
        session = await sessions.save_app_state(session, views.state)

    return {
        "step": LocationStep.VERIFIED.value,
        "location": verified.to_store(),
        "applied": applied,
        "session": session_payload(session),
    }
