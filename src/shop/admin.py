from __future__ import annotations

from decimal import Decimal
from typing import List

from db import crud, kv
from db.models import Order, Stats, User
from shop.session import SessionManager
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)


class AdminReports:
    """Read-only views across every user's data. All admin-gated."""

    def __init__(self, sessions: SessionManager) -> None:
        self.sessions = sessions

    async def get_all_orders(self) -> List[Order]:
        await self.sessions.require_auth(needs_admin=True)
        return await crud.list_orders()

    async def get_all_users(self) -> List[User]:
        await self.sessions.require_auth(needs_admin=True)
        return await crud.list_users()

    async def get_stats(self) -> Stats:
        """
        Revenue sums every order's total regardless of status. Low stock
        means fewer than LOW_STOCK_THRESHOLD units. Recent orders are the
        newest RECENT_ORDERS_LIMIT, newest first.
        """
        await self.sessions.require_auth(needs_admin=True)
        products = await crud.list_products()
        orders = await crud.list_orders()
        users = await crud.list_users()

        return Stats(
            total_revenue=sum((o.total for o in orders), Decimal("0")),
            total_products=len(products),
            total_orders=len(orders),
            total_users=len(users),
            low_stock_products=sum(
                1 for p in products if p.stock < config.LOW_STOCK_THRESHOLD
            ),
            recent_orders=tuple(reversed(orders[-config.RECENT_ORDERS_LIMIT :])),
        )


async def reset_data() -> None:
    """Restore the seed state. Maintenance hook for test isolation; not gated."""
    # reset_all re-lists under the locks, so carts created meanwhile go too
    cart_keys = await kv.keys(crud.CART_PREFIX)
    async with kv.locked(
        crud.PRODUCTS_KEY,
        crud.USERS_KEY,
        crud.ORDERS_KEY,
        crud.SESSION_TOKEN_KEY,
        crud.SESSION_KEY,
        *cart_keys,
    ):
        dropped = await crud.reset_all()
    _logger.info(f"Data reset to seed state ({dropped} cart(s) cleared)")
