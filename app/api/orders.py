"""
app/api/orders.py

Purpose: Customer order endpoints

- Order submission from the form view
- The signed-in user's order history and latest delivered result
"""

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_current_session,
    get_order_service,
    get_session_service,
    require_user,
    session_payload,
    view_router,
)
from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.flow.states import NavigationEvent, View
from app.models.order import OrderForm
from app.models.user import User
from app.schemas.requests import OrderRequest
from app.services.order_service import OrderService
from app.services.session_service import Session, SessionService
from utils.validation_utils import REQUIRED

logger = get_logger(__name__)
router = APIRouter(prefix="/orders")


@router.post("", status_code=201)
async def submit_order(
    body: OrderRequest,
    user: User = Depends(require_user),
    session: Session = Depends(get_current_session),
    orders: OrderService = Depends(get_order_service),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Stores the order for the signed-in user.

    Game and design default to the shop selection; the location is the
    one verified earlier in this session.
    """
    state = session.app_state
    game = body.selected_game or (state.order_config.game if state.order_config else None)
    design = body.selected_design or (state.order_config.design if state.order_config else None)

    missing = {}
    if game is None:
        missing["selectedGame"] = REQUIRED
    if design is None:
        missing["selectedDesign"] = REQUIRED
    if state.verified_location is None:
        missing["location"] = "Verify your location first"
    if missing:
        raise ValidationError("Order is incomplete", details=missing)

    form = OrderForm(
        **body.model_dump(exclude={"selected_game", "selected_design"}),
        selected_game=game,
        selected_design=design,
    )
    order = await orders.submit_order(user.uid, form, location=state.verified_location)

    session = await sessions.refresh(session)
    views = view_router(session)
    if views.apply_if_current(View.FORM, NavigationEvent.ORDER_SUBMITTED):
        session = await sessions.save_app_state(session, views.state)

    return {
        "order": order.to_store(),
        "session": session_payload(session),
    }


@router.get("/mine")
async def my_orders(
    user: User = Depends(require_user),
    orders: OrderService = Depends(get_order_service),
):
    history = await orders.get_user_orders(user.uid)
    latest = orders.latest_result(history)
    return {
        "orders": [o.to_store() for o in history],
        "latestResult": latest.to_store() if latest else None,
    }
