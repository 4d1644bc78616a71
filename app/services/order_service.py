"""
app/services/order_service.py

Purpose: Order pipeline and order views

- Validates and stores new orders (orders/{id})
- Best-effort operator notification on Telegram
- Newest-N order window for the operator and per-user history
- Operator status changes and result delivery
"""

from typing import List, Optional

from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError, ValidationError
from app.core.logging import get_logger, LogContext
from app.db.store import DocumentStore
from app.models.order import Order, OrderForm, OrderStatus, VerifiedLocation
from app.services.telegram_service import TelegramService
from utils.time_utils import now_ms
from utils.validation_utils import validate_order_form

logger = get_logger(__name__)


def order_path(order_id: str) -> str:
    return f"orders/{order_id}"


class OrderService:

    def __init__(self, store: DocumentStore, telegram: TelegramService, window: Optional[int] = None):
        self.store = store
        self.telegram = telegram
        self.window = window or settings.ORDERS_WINDOW

    async def submit_order(
        self,
        user_id: str,
        form: OrderForm,
        location: Optional[VerifiedLocation] = None,
    ) -> Order:
        """
        Stores a new order, then notifies the operator.

        Args:
            user_id: Owner uid
            form: Customer-entered fields
            location: Verified location from this session, if any

        Returns:
            The stored order

        Raises:
            ValidationError: Field errors in ``details`` (nothing is written)
            StoreError: Order could not be stored (no notification is sent)
        """
        errors = validate_order_form(form.first_name, form.phone, form.telegram_username, form.comment)
        if errors:
            raise ValidationError("Please correct the highlighted fields", details=errors)

        order_id = self.store.new_key("orders")
        order = Order(
            **form.model_dump(exclude={"location"}),
            location=location or form.location,
            id=order_id,
            user_id=user_id,
            created_at=now_ms(),
            status=OrderStatus.SENT,
        )

        with LogContext(user_id=user_id, order_id=order_id):
            await self.store.set(order_path(order_id), order.to_store())
            logger.info(f"📝 Order stored: {order.selected_game.value}/{order.selected_design.value}")

            # Advisory only; the order already exists
            if not await self.telegram.send_order_notification(order):
                logger.warning("Operator notification not delivered")

        return order

    async def get_all_orders(self) -> List[Order]:
        """
        Newest orders first, bounded by the configured window.
        """
        docs = await self.store.last("orders", self.window, "createdAt")
        orders = [Order.model_validate(doc) for doc in docs]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    async def get_user_orders(self, user_id: str) -> List[Order]:
        """
        The user's orders within the newest-N window.
        """
        return [o for o in await self.get_all_orders() if o.user_id == user_id]

    @staticmethod
    def latest_result(orders: List[Order]) -> Optional[Order]:
        """Newest completed order that carries a delivered image."""
        for order in orders:
            if order.status == OrderStatus.COMPLETED and order.result_image:
                return order
        return None

    async def _require_order(self, order_id: str) -> None:
        if not await self.store.get(order_path(order_id)):
            raise ResourceNotFoundError(f"Order {order_id} not found")

    async def update_order_status(self, order_id: str, status: OrderStatus) -> None:
        """
        Sets any status; transitions are unrestricted.
        """
        await self._require_order(order_id)
        await self.store.update(order_path(order_id), {"status": status.value})
        logger.info(f"Order {order_id} -> {status.value}")

    async def deliver_order_result(self, order_id: str, image_url: str, description: str = "") -> None:
        """
        Completes an order with its result in a single write.
        """
        if not (image_url or "").strip():
            raise ValidationError("Result image URL required", details={"imageUrl": "Required"})

        await self._require_order(order_id)
        await self.store.update(order_path(order_id), {
            "status": OrderStatus.COMPLETED.value,
            "resultImage": image_url.strip(),
            "resultDescription": description or "",
        })
        logger.info(f"✅ Order {order_id} delivered")
