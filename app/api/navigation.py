"""
app/api/navigation.py

Purpose: View router endpoints

- Current app state for the mounted view
- Client navigation events (server-side results drive the rest)
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_session, get_session_service, session_payload, view_router
from app.core.exceptions import InvalidTransitionError
from app.core.logging import get_logger, LogContext
from app.flow.states import SERVER_EVENTS, NavigationEvent, get_progress_message
from app.schemas.requests import NavigateRequest
from app.services.session_service import Session, SessionService

logger = get_logger(__name__)
router = APIRouter(prefix="/app")


def state_payload(session: Session) -> dict:
    payload = session_payload(session)
    payload["progress"] = get_progress_message(session.app_state.view)
    return payload


@router.get("/state")
async def get_state(session: Session = Depends(get_current_session)):
    return state_payload(session)


@router.post("/navigate")
async def navigate(
    body: NavigateRequest,
    session: Session = Depends(get_current_session),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Applies a navigation event to this session's view.

    Raises:
        InvalidTransitionError: Event not allowed from the current view
            (or only raised by the server)
    """
    if body.event in SERVER_EVENTS:
        raise InvalidTransitionError(
            f"'{body.event.value}' cannot be sent by the client",
            details={"event": body.event.value}
        )

    with LogContext(session_id=session.id[:8], view=session.app_state.view.value):
        views = view_router(session)
        state = views.dispatch(body.event, game=body.game, design=body.design)

        if body.event == NavigationEvent.LOGOUT:
            session = await sessions.logout(session)
        else:
            session = await sessions.save_app_state(session, state)

    return state_payload(session)
