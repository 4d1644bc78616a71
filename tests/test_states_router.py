import pytest

from app.core.exceptions import (
    AccountBannedError,
    AuthenticationError,
    InvalidTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from app.flow.router import AppState, OrderConfig, ViewRouter
from app.flow.states import (
    NavigationEvent,
    View,
    get_progress_message,
    is_valid_transition,
    next_view,
)
from app.models.order import DesignType, GameType, VerifiedLocation

LOCATION = VerifiedLocation(country="Uzbekistan", region="Tashkent", city="Tashkent", lat=41.3, lng=69.2)


def test_transition_table():
    assert next_view(View.HERO, NavigationEvent.START) == View.LOCATION_VERIFY
    assert next_view(View.HERO, NavigationEvent.TELEGRAM) == View.TELEGRAM_VERIFY
    assert next_view(View.SHOP, NavigationEvent.BACK) == View.LOCATION_VERIFY
    assert next_view(View.FORM, NavigationEvent.ORDER_SUBMITTED) == View.SUCCESS
    assert next_view(View.SUCCESS, NavigationEvent.MY_ORDERS) == View.MY_ORDERS
    assert next_view(View.ADMIN, NavigationEvent.BACK) == View.HERO


def test_logout_and_ban_from_any_view():
    for view in View:
        if view == View.BANNED:
            continue
        assert next_view(view, NavigationEvent.LOGOUT) == View.HERO
        assert next_view(view, NavigationEvent.BAN) == View.BANNED


def test_banned_is_terminal():
    for event in NavigationEvent:
        assert not is_valid_transition(View.BANNED, event)


def test_invalid_transition():
    assert next_view(View.HERO, NavigationEvent.ORDER_SUBMITTED) is None


def test_progress_message():
    assert get_progress_message(View.SHOP) == "Step 2 of 4"
    assert get_progress_message(View.HERO) == ""


def test_start_requires_sign_in():
    with pytest.raises(AuthenticationError):
        ViewRouter(AppState()).dispatch(NavigationEvent.START)


def test_admin_requires_operator():
    with pytest.raises(PermissionDeniedError):
        ViewRouter(AppState(), signed_in=True).dispatch(NavigationEvent.ADMIN)

    state = ViewRouter(AppState(), signed_in=True, is_admin=True).dispatch(NavigationEvent.ADMIN)
    assert state.view == View.ADMIN


def test_full_order_funnel():
    router = ViewRouter(AppState(), signed_in=True)
    router.dispatch(NavigationEvent.START)
    router.dispatch(NavigationEvent.LOCATION_VERIFIED, location=LOCATION)
    router.dispatch(NavigationEvent.SELECT, game=GameType.PUBG, design=DesignType.LOGO)
    state = router.dispatch(NavigationEvent.ORDER_SUBMITTED)

    assert state.view == View.SUCCESS
    assert state.verified_location == LOCATION
    assert state.order_config == OrderConfig(game=GameType.PUBG, design=DesignType.LOGO)

    state = router.dispatch(NavigationEvent.HOME)
    assert state.view == View.HERO
    assert state.order_config is None
    assert state.verified_location == LOCATION


def test_location_verified_needs_location():
    router = ViewRouter(AppState(view=View.LOCATION_VERIFY), signed_in=True)
    with pytest.raises(ValidationError):
        router.dispatch(NavigationEvent.LOCATION_VERIFIED)


def test_select_needs_game_and_design():
    router = ViewRouter(AppState(view=View.SHOP), signed_in=True)
    with pytest.raises(ValidationError):
        router.dispatch(NavigationEvent.SELECT, game=GameType.PUBG)


def test_logout_clears_state():
    state = AppState(
        view=View.FORM,
        verified_location=LOCATION,
        order_config=OrderConfig(game=GameType.GTA, design=DesignType.BANNER),
    )
    result = ViewRouter(state, signed_in=True).dispatch(NavigationEvent.LOGOUT)
    assert result == AppState()


def test_router_works_on_a_copy():
    state = AppState()
    ViewRouter(state, signed_in=True).dispatch(NavigationEvent.START)
    assert state.view == View.HERO


def test_banned_state_rejects_every_event():
    router = ViewRouter(AppState(), signed_in=True)
    router.ban()
    with pytest.raises(AccountBannedError):
        router.dispatch(NavigationEvent.LOGOUT)


def test_unknown_event_from_view():
    with pytest.raises(InvalidTransitionError):
        ViewRouter(AppState(), signed_in=True).dispatch(NavigationEvent.SELECT)


def test_stale_result_is_dropped():
    router = ViewRouter(AppState(view=View.HERO), signed_in=True)
    applied = router.apply_if_current(
        View.LOCATION_VERIFY, NavigationEvent.LOCATION_VERIFIED, location=LOCATION
    )
    assert applied is False
    assert router.state.view == View.HERO
    assert router.state.verified_location is None


def test_current_result_is_applied():
    router = ViewRouter(AppState(view=View.LOCATION_VERIFY), signed_in=True)
    assert router.apply_if_current(
        View.LOCATION_VERIFY, NavigationEvent.LOCATION_VERIFIED, location=LOCATION
    )
    assert router.state.view == View.SHOP
