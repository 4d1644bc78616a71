"""
app/schemas/requests.py

Purpose: HTTP request bodies

- Login, Telegram verification and location verification payloads
- Navigation events
- Order form and operator actions
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Literal

from app.flow.states import NavigationEvent
from app.models.order import DesignType, GameType, OrderStatus


class RequestModel(BaseModel):
    """camelCase on the wire, like every response; snake_case still accepted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GoogleLoginRequest(RequestModel):
    id_token: str = Field(..., min_length=1, description="Google ID token from the sign-in popup")


class VerificationRequest(RequestModel):
    verification_id: str


class SendCodeRequest(VerificationRequest):
    telegram_id: str = Field(..., description="Numeric Telegram user id")


class VerifyCodeRequest(VerificationRequest):
    code: str


class RegisterRequest(VerificationRequest):
    nickname: str = ""


class Coordinates(RequestModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class LocationVerifyRequest(RequestModel):
    """
    Declared location plus the device's GPS outcome: either
    ``coordinates`` or ``gps_error``.
    """
    country: str = ""
    region: str = ""
    city: str = ""
    coordinates: Optional[Coordinates] = None
    gps_error: Optional[Literal["unsupported", "denied", "timeout"]] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "country": "Uzbekistan",
            "region": "Tashkent",
            "city": "Tashkent",
            "coordinates": {"lat": 41.3111, "lng": 69.2797}
        }
    })


class NavigateRequest(RequestModel):
    event: NavigationEvent
    game: Optional[GameType] = None
    design: Optional[DesignType] = None


class OrderRequest(RequestModel):
    """
    Game and design fall back to the session's shop selection.
    """
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: str = ""
    telegram_username: str = ""
    comment: str = ""
    selected_game: Optional[GameType] = None
    selected_design: Optional[DesignType] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "firstName": "Ali",
            "lastName": "Valiyev",
            "phone": "+998901234567",
            "telegramUsername": "@ali",
            "comment": "Dark theme, red accents"
        }
    })


class StatusUpdateRequest(RequestModel):
    status: OrderStatus


class DeliverRequest(RequestModel):
    image_url: str
    description: str = ""


class BanRequest(RequestModel):
    reason: str = "Banned by operator"
