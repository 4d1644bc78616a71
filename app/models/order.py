"""
app/models/order.py

Purpose: Order document model

- Form fields submitted by the customer
- Game / design catalogue enums
- Server-assigned id, owner, timestamp and status
- Delivery fields filled when the operator completes the order
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from app.models.user import StoreModel


class GameType(str, Enum):
    PUBG = "pubg"
    MINECRAFT = "minecraft"
    CSGO = "csgo"
    VLOG = "vlog"
    GTA = "gta"
    VALORANT = "valorant"
    FREEFIRE = "freefire"
    ROBLOX = "roblox"
    FIFA = "fifa"
    COD = "cod"
    DOTA = "dota"
    STANDOFF = "standoff"
    OTHER = "other"


class DesignType(str, Enum):
    PREVIEW = "preview"
    BANNER = "banner"
    AVATAR = "avatar"
    LOGO = "logo"


class OrderStatus(str, Enum):
    """
    Operator-facing order status. Any value may follow any other.
    """
    SENT = "sent"
    PROCESSING = "processing"
    REVIEWING = "reviewing"
    BUSY = "busy"
    COMPLETED = "completed"


class VerifiedLocation(StoreModel):
    country: str
    region: str
    city: str
    lat: float
    lng: float


class OrderForm(StoreModel):
    """
    Customer-entered fields. Text rules are checked by
    validate_order_form so that every error is reported at once.
    """
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: str = ""
    telegram_username: str = ""
    comment: str = ""
    selected_game: GameType
    selected_design: DesignType
    location: Optional[VerifiedLocation] = None


class Order(OrderForm):
    id: str
    user_id: str
    created_at: int
    status: OrderStatus = OrderStatus.SENT
    result_image: Optional[str] = None
    result_description: Optional[str] = None
