"""
app/services/telegram_service.py

Purpose: Telegram Bot API messaging

- Operator notification for new orders (advisory, never blocks an order)
- Verification code delivery to a user's Telegram ID
- Distinguishes "user never started the bot" from other failures
"""

import httpx
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.models.order import OrderForm
from utils.constants import (
    BOT_NOT_STARTED_MARKER,
    DESIGN_LABELS,
    EMAIL_NOT_PROVIDED,
    GAME_LABELS,
    ORDER_LOCATION_LINE,
    ORDER_NOTIFICATION_TEMPLATE,
    VERIFICATION_CODE_TEMPLATE,
)
from utils.validation_utils import detect_carrier, normalize_telegram_username, sanitize_input

logger = get_logger(__name__)


def format_order_message(order: OrderForm) -> str:
    """
    Builds the HTML summary sent to the operator chat.
    """
    username = normalize_telegram_username(order.telegram_username)
    carrier = detect_carrier(order.phone)

    location = ""
    if order.location:
        location = ORDER_LOCATION_LINE.format(
            city=sanitize_input(order.location.city),
            region=sanitize_input(order.location.region),
            country=sanitize_input(order.location.country),
        )

    return ORDER_NOTIFICATION_TEMPLATE.format(
        username=sanitize_input(username),
        first_name=sanitize_input(order.first_name),
        last_name=sanitize_input(order.last_name),
        email=sanitize_input(order.email) or EMAIL_NOT_PROVIDED,
        phone=order.phone,
        carrier=f" ({carrier})" if carrier else "",
        game=GAME_LABELS.get(order.selected_game.value, order.selected_game.value),
        design=DESIGN_LABELS.get(order.selected_design.value, order.selected_design.value),
        location=location,
        comment=sanitize_input(order.comment),
    )


class TelegramService:
    """Thin client over the Bot API sendMessage method."""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        operator_chat_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bot_token = bot_token if bot_token is not None else settings.TELEGRAM_BOT_TOKEN
        self.operator_chat_id = operator_chat_id if operator_chat_id is not None else settings.TELEGRAM_OPERATOR_CHAT_ID
        self.base_url = f"{settings.TELEGRAM_API_BASE}/bot{self.bot_token}"
        self._transport = transport
        self._timeout = settings.HTTP_TIMEOUT_SECONDS

    async def send_message(self, chat_id: str, text: str) -> Dict[str, Any]:
        """
        Sends an HTML message.

        Returns:
            {"success": bool, "error": Optional[str]}; ``error`` is
            "bot_not_started", "network_error" or the Bot API description
        """
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/sendMessage", json=payload)
                data = response.json()
        except (httpx.RequestError, ValueError) as e:
            logger.error(f"❌ Telegram send error: {e}")
            return {"success": False, "error": "network_error"}

        if not data.get("ok"):
            description = data.get("description") or f"HTTP {response.status_code}"
            if BOT_NOT_STARTED_MARKER in description.lower():
                logger.warning(f"Chat {chat_id} has not started the bot")
                return {"success": False, "error": "bot_not_started"}
            logger.error(f"❌ Telegram API error: {description}")
            return {"success": False, "error": description}

        return {"success": True, "error": None}

    async def send_order_notification(self, order: OrderForm) -> bool:
        """
        Notifies the operator chat about a new order.

        Returns:
            True if Telegram accepted the message
        """
        if not self.bot_token or not self.operator_chat_id:
            logger.warning("Telegram operator chat not configured, skipping notification")
            return False

        result = await self.send_message(self.operator_chat_id, format_order_message(order))
        if result["success"]:
            logger.info("📬 Operator notified about new order")
        return result["success"]

    async def send_verification_code(self, telegram_id: str, code: str) -> Dict[str, Any]:
        """
        Delivers a one-time code to the user.
        """
        logger.info(f"📤 Sending verification code to Telegram ID {telegram_id}")
        return await self.send_message(telegram_id, VERIFICATION_CODE_TEMPLATE.format(code=code))


def get_telegram_service() -> TelegramService:
    return TelegramService()
