"""
app/flow/router.py

Purpose: Top-level view router

- Explicit application state (view, verified location, shop selection)
- Applies navigation events with auth / operator / ban guards
- Drops late results that no longer match the mounted view
"""

from typing import Optional

from app.core.exceptions import (
    AccountBannedError,
    AuthenticationError,
    InvalidTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from app.core.logging import get_logger
from app.flow.states import NavigationEvent, View, get_view_metadata, next_view
from app.models.order import DesignType, GameType, VerifiedLocation
from app.models.user import StoreModel

logger = get_logger(__name__)


class OrderConfig(StoreModel):
    game: GameType
    design: DesignType


class AppState(StoreModel):
    view: View = View.HERO
    verified_location: Optional[VerifiedLocation] = None
    order_config: Optional[OrderConfig] = None


class ViewRouter:
    """
    Finite-state controller selecting the mounted view.

    Works on a copy of the given AppState; callers persist ``state``
    after a successful dispatch.
    """

    def __init__(self, state: AppState, signed_in: bool = False, is_admin: bool = False):
        self.state = state.model_copy(deep=True)
        self.signed_in = signed_in
        self.is_admin = is_admin

    def dispatch(
        self,
        event: NavigationEvent,
        game: Optional[GameType] = None,
        design: Optional[DesignType] = None,
        location: Optional[VerifiedLocation] = None,
    ) -> AppState:
        current = self.state.view
        if current == View.BANNED:
            raise AccountBannedError()

        target = next_view(current, event)
        if target is None:
            raise InvalidTransitionError(
                f"Cannot '{event.value}' from '{current.value}'",
                details={"view": current.value, "event": event.value}
            )

        metadata = get_view_metadata(target)
        if metadata.requires_user and not self.signed_in:
            raise AuthenticationError("Please sign in first")
        if metadata.requires_admin and not self.is_admin:
            raise PermissionDeniedError()

        if event == NavigationEvent.LOCATION_VERIFIED:
            if location is None:
                raise ValidationError("Verified location required")
            self.state.verified_location = location
        elif event == NavigationEvent.SELECT:
            if game is None or design is None:
                raise ValidationError("Game and design selection required")
            self.state.order_config = OrderConfig(game=game, design=design)
        elif event in (NavigationEvent.HOME, NavigationEvent.LOGOUT) or (
            current == View.SUCCESS and event == NavigationEvent.MY_ORDERS
        ):
            self.state.order_config = None
            if event == NavigationEvent.LOGOUT:
                self.state.verified_location = None

        logger.info(f"🧭 {current.value} --{event.value}--> {target.value}")
        self.state.view = target
        return self.state

    def ban(self) -> AppState:
        """Enter the terminal banned view from anywhere."""
        self.state = AppState(view=View.BANNED)
        return self.state

    def apply_if_current(self, expected: View, event: NavigationEvent, **kwargs) -> bool:
        """
        Dispatches ``event`` only while ``expected`` is still mounted.

        Returns:
            True if the event was applied, False if the result was stale
        """
        if self.state.view != expected:
            logger.info(
                f"Discarding stale '{event.value}': view is now {self.state.view.value}"
            )
            return False
        self.dispatch(event, **kwargs)
        return True
