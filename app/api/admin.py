"""
app/api/admin.py

Purpose: Operator panel endpoints

- Dashboard: order window plus users split into active / banned
- Order status changes and result delivery
- Manual ban / unban
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_ban_service, get_order_service, get_user_service, require_admin
from app.core.logging import get_logger
from app.models.order import OrderStatus
from app.models.user import User
from app.schemas.requests import BanRequest, DeliverRequest, StatusUpdateRequest
from app.services.ban_service import BanService
from app.services.order_service import OrderService
from app.services.user_service import UserService

logger = get_logger(__name__)
router = APIRouter(prefix="/admin")


@router.get("/dashboard")
async def dashboard(
    admin: User = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
    users: UserService = Depends(get_user_service),
):
    all_orders = await orders.get_all_orders()
    all_users = await users.list_all_users()

    active = [u for u in all_users if not u.security.is_banned]
    banned = [u for u in all_users if u.security.is_banned]

    return {
        "orders": [o.to_store() for o in all_orders],
        "activeUsers": [u.to_store() for u in active],
        "bannedUsers": [u.to_store() for u in banned],
        "stats": {
            "totalOrders": len(all_orders),
            "newOrders": sum(1 for o in all_orders if o.status == OrderStatus.SENT),
            "completedOrders": sum(1 for o in all_orders if o.status == OrderStatus.COMPLETED),
            "totalUsers": len(all_users),
            "bannedUsers": len(banned),
        },
    }


@router.patch("/orders/{order_id}/status")
async def update_status(
    order_id: str,
    body: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    await orders.update_order_status(order_id, body.status)
    return {"id": order_id, "status": body.status.value}


@router.post("/orders/{order_id}/deliver")
async def deliver_result(
    order_id: str,
    body: DeliverRequest,
    admin: User = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    await orders.deliver_order_result(order_id, body.image_url, body.description)
    return {"id": order_id, "status": OrderStatus.COMPLETED.value}


@router.post("/users/{uid}/ban")
async def ban_user(
    uid: str,
    body: BanRequest,
    admin: User = Depends(require_admin),
    bans: BanService = Depends(get_ban_service),
):
    logger.info(f"Operator {admin.uid} banning {uid}")
    await bans.ban(uid, body.reason)
    return {"uid": uid, "isBanned": True}


@router.post("/users/{uid}/unban")
async def unban_user(
    uid: str,
    admin: User = Depends(require_admin),
    bans: BanService = Depends(get_ban_service),
):
    logger.info(f"Operator {admin.uid} unbanning {uid}")
    await bans.unban(uid)
    return {"uid": uid, "isBanned": False}
