"""
app/flow/states.py

Purpose: Defines all storefront views and verification steps

- Enum for each screen the front end can mount
- Navigation events and the allowed view transitions
- Location and Telegram verification step enums
- Metadata for each view (auth / operator requirements, terminal views)
"""

from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass


class View(str, Enum):
    """
    Screens selected by the view router.
    """
    HERO = "hero"
    TELEGRAM_VERIFY = "telegram-verify"
    LOCATION_VERIFY = "location-verify"
    SHOP = "shop"
    FORM = "form"
    SUCCESS = "success"
    MY_ORDERS = "my-orders"
    ADMIN = "admin"
    BANNED = "banned"


class NavigationEvent(str, Enum):
    START = "start"
    TELEGRAM = "telegram"
    TELEGRAM_VERIFIED = "telegram_verified"
    LOCATION_VERIFIED = "location_verified"
    SELECT = "select"
    ORDER_SUBMITTED = "order_submitted"
    MY_ORDERS = "my_orders"
    ADMIN = "admin"
    HOME = "home"
    BACK = "back"
    LOGOUT = "logout"
    BAN = "ban"


class LocationStep(str, Enum):
    """
    Location verification: collecting-input -> acquiring-gps ->
    reverse-geocoding -> matching -> verified | failed | banned.
    Failed loops back to collecting-input.
    """
    COLLECTING_INPUT = "collecting-input"
    ACQUIRING_GPS = "acquiring-gps"
    REVERSE_GEOCODING = "reverse-geocoding"
    MATCHING = "matching"
    VERIFIED = "verified"
    FAILED = "failed"
    BANNED = "banned"


class OtpStep(str, Enum):
    """
    Telegram verification steps. AWAITING_NICKNAME only occurs for
    brand-new Telegram-only accounts.
    """
    AWAITING_ID = "awaiting-id"
    AWAITING_CODE = "awaiting-code"
    AWAITING_NICKNAME = "awaiting-nickname"
    COMPLETED = "completed"


@dataclass
class ViewMetadata:
    """
    Metadata associated with each view.
    """
    name: View
    display_name: str
    step_number: Optional[int] = None  # Position in the order funnel
    total_steps: int = 4
    requires_user: bool = False
    requires_admin: bool = False
    terminal: bool = False
    description: str = ""


VIEW_METADATA: Dict[View, ViewMetadata] = {
    View.HERO: ViewMetadata(
        name=View.HERO,
        display_name="Home",
        description="Landing screen with login, my orders and admin entry points"
    ),
    View.TELEGRAM_VERIFY: ViewMetadata(
        name=View.TELEGRAM_VERIFY,
        display_name="Telegram Verification",
        description="Link a Telegram ID or sign up with Telegram only"
    ),
    View.LOCATION_VERIFY: ViewMetadata(
        name=View.LOCATION_VERIFY,
        display_name="Location Verification",
        step_number=1,
        requires_user=True,
        description="Declared location checked against device GPS"
    ),
    View.SHOP: ViewMetadata(
        name=View.SHOP,
        display_name="Choose Design",
        step_number=2,
        requires_user=True,
        description="Pick game and design type"
    ),
    View.FORM: ViewMetadata(
        name=View.FORM,
        display_name="Order Details",
        step_number=3,
        requires_user=True,
        description="Contact details and comment"
    ),
    View.SUCCESS: ViewMetadata(
        name=View.SUCCESS,
        display_name="Order Sent",
        step_number=4,
        requires_user=True,
        description="Order stored and operator notified"
    ),
    View.MY_ORDERS: ViewMetadata(
        name=View.MY_ORDERS,
        display_name="My Orders",
        requires_user=True,
        description="Status of the user's orders and delivered results"
    ),
    View.ADMIN: ViewMetadata(
        name=View.ADMIN,
        display_name="Admin Panel",
        requires_user=True,
        requires_admin=True,
        description="Orders, users and ban management"
    ),
    View.BANNED: ViewMetadata(
        name=View.BANNED,
        display_name="Banned",
        terminal=True,
        description="Terminal screen, no navigation out"
    ),
}


# Allowed navigation; BAN and LOGOUT are handled for every non-terminal view
VIEW_TRANSITIONS: Dict[View, Dict[NavigationEvent, View]] = {
    View.HERO: {
        NavigationEvent.START: View.LOCATION_VERIFY,
        NavigationEvent.TELEGRAM: View.TELEGRAM_VERIFY,
        NavigationEvent.MY_ORDERS: View.MY_ORDERS,
        NavigationEvent.ADMIN: View.ADMIN,
    },
    View.TELEGRAM_VERIFY: {
        NavigationEvent.BACK: View.HERO,
        NavigationEvent.TELEGRAM_VERIFIED: View.HERO,
    },
    View.LOCATION_VERIFY: {
        NavigationEvent.BACK: View.HERO,
        NavigationEvent.LOCATION_VERIFIED: View.SHOP,
    },
    View.SHOP: {
        NavigationEvent.BACK: View.LOCATION_VERIFY,
        NavigationEvent.SELECT: View.FORM,
    },
    View.FORM: {
        NavigationEvent.BACK: View.SHOP,
        NavigationEvent.ORDER_SUBMITTED: View.SUCCESS,
    },
    View.SUCCESS: {
        NavigationEvent.HOME: View.HERO,
        NavigationEvent.MY_ORDERS: View.MY_ORDERS,
    },
    View.MY_ORDERS: {
        NavigationEvent.BACK: View.HERO,
    },
    View.ADMIN: {
        NavigationEvent.BACK: View.HERO,
    },
    View.BANNED: {},
}


def next_view(current: View, event: NavigationEvent) -> Optional[View]:
    """
    Resolves the target view of a navigation event.

    Args:
        current: View currently mounted
        event: Navigation event

    Returns:
        Target view, or None if the event is not allowed from ``current``
    """
    if current == View.BANNED:
        return None
    if event == NavigationEvent.BAN:
        return View.BANNED
    if event == NavigationEvent.LOGOUT:
        return View.HERO
    return VIEW_TRANSITIONS.get(current, {}).get(event)


def is_valid_transition(current: View, event: NavigationEvent) -> bool:
    return next_view(current, event) is not None


def get_view_metadata(view: View) -> ViewMetadata:
    """
    Retrieves metadata for a given view.
    """
    return VIEW_METADATA.get(view, ViewMetadata(
        name=view,
        display_name=view.value,
        description="Unknown view"
    ))


def get_progress_message(view: View) -> str:
    """
    Progress label for funnel views (e.g., "Step 2 of 4").
    """
    metadata = get_view_metadata(view)
    if metadata.step_number and metadata.step_number > 0:
        return f"Step {metadata.step_number} of {metadata.total_steps}"
    return ""


# Raised by the server when the corresponding result arrives, never by the client
SERVER_EVENTS = frozenset({
    NavigationEvent.TELEGRAM_VERIFIED,
    NavigationEvent.LOCATION_VERIFIED,
    NavigationEvent.ORDER_SUBMITTED,
    NavigationEvent.BAN,
})
