from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import List

from db import crud, kv
from db.models import ORDER_STATUSES, Order
from shop.errors import (
    AccessDenied,
    CartEmpty,
    InsufficientStock,
    OrderNotFound,
    ValidationFailed,
)
from shop.session import SessionManager
from utils.logger import get_logger
from utils.pure import compute_totals, generate_order_id

_logger = get_logger(__name__)


class OrderWorkflow:
    def __init__(self, sessions: SessionManager) -> None:
        self.sessions = sessions

    async def create_order(self) -> Order:
        """
        Turn the caller's cart into a pending order.

        Every cart line is re-checked against current stock before anything is
        written; one short line fails the whole order and leaves cart, catalog
        and order list untouched. On success the order list, the debited
        catalog and the emptied cart are committed in a single store
        transaction, written in that order.
        """
        auth = await self.sessions.require_auth()
        cart_key = crud.cart_key(auth.user_id)

        async with kv.locked(crud.ORDERS_KEY, crud.PRODUCTS_KEY, cart_key):
            items = await crud.list_cart(auth.user_id)
            if not items:
                raise CartEmpty()

            products = await crud.list_products(include_deleted=True)
            by_id = {p.id: idx for idx, p in enumerate(products)}
            for item in items:
                idx = by_id.get(item.product_id)
                product = products[idx] if idx is not None else None
                if product is None or product.deleted or product.stock < item.quantity:
                    name = product.name if product is not None else item.product_id
                    raise InsufficientStock(f"Insufficient stock for {name}")

            orders = await crud.list_orders()
            taken = {o.id for o in orders}
            order_id = generate_order_id(self.sessions.now_ms())
            while order_id in taken:
                order_id = generate_order_id(self.sessions.now_ms())

            totals = compute_totals(items)
            created_at = datetime.fromtimestamp(self.sessions.clock(), tz=timezone.utc)
            order = Order(
                id=order_id,
                user_id=auth.user_id,
                items=tuple(items),
                subtotal=totals.subtotal,
                tax=totals.tax,
                shipping=totals.shipping,
                total=totals.total,
                status="pending",
                created_at=created_at.isoformat(),
            )

            for item in items:
                idx = by_id[item.product_id]
                products[idx] = replace(
                    products[idx], stock=products[idx].stock - item.quantity
                )
            orders.append(order)

            await kv.set_many(
                {
                    crud.ORDERS_KEY: crud.dump_orders(orders),
                    crud.PRODUCTS_KEY: crud.dump_products(products),
                    cart_key: [],
                }
            )

        _logger.info(
            f"Order {order.id} placed by user {auth.user_id}: "
            f"{len(order.items)} line(s), total {order.total}"
        )
        return order

    async def get_orders(self) -> List[Order]:
        """Only the caller's own orders, admins included."""
        auth = await self.sessions.require_auth()
        return [o for o in await crud.list_orders() if o.user_id == auth.user_id]

    async def get_order(self, order_id: str) -> Order:
        auth = await self.sessions.require_auth()
        for order in await crud.list_orders():
            if order.id == order_id:
                break
        else:
            raise OrderNotFound()

        if order.user_id != auth.user_id and auth.role != "admin":
            raise AccessDenied()
        return order

    async def update_order_status(self, order_id: str, status: str) -> Order:
        """Admin only. Any known status may replace any other."""
        await self.sessions.require_auth(needs_admin=True)
        if status not in ORDER_STATUSES:
            raise ValidationFailed(f"Unknown order status: {status!r}")

        async with kv.locked(crud.ORDERS_KEY):
            orders = await crud.list_orders()
            for idx, order in enumerate(orders):
                if order.id == order_id:
                    break
            else:
                raise OrderNotFound()

            previous = order.status
            orders[idx] = order = replace(order, status=status)
            await crud.save_orders(orders)

        _logger.info(f"Order {order_id} status {previous} -> {status}")
        return order
