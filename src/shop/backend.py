from __future__ import annotations

import asyncio
import functools
from decimal import InvalidOperation
from typing import Any, Mapping, Optional

import aiosqlite

from db import crud
from db.models import AuthToken
from shop.admin import AdminReports, reset_data as reset_store
from shop.cart import CartService
from shop.catalog import Catalog
from shop.errors import ShopError
from shop.orders import OrderWorkflow
from shop.response import ApiResponse
from shop.session import Clock, SessionManager
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

# failures of the store itself, as opposed to a rejected request
STORE_ERRORS = (aiosqlite.Error, OSError, ValueError, KeyError, InvalidOperation)


def operation(failure: str, delay_ms: int = 0):
    """
    Wrap a backend method so it always returns an ApiResponse.

    ShopError becomes `fail(str(err))`; store failures and any other
    exception are logged and reported as `failure`. `delay_ms` is the nominal latency slept when
    simulated delay is enabled.
    """

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(self: "ShopBackend", *args, **kwargs) -> ApiResponse:
            if self.simulate_delay and delay_ms:
                await asyncio.sleep(delay_ms / 1000)
            try:
                await self._ensure_seeded()
                return await fn(self, *args, **kwargs)
            except ShopError as err:
                _logger.debug(f"{fn.__name__} rejected: {err}")
                return ApiResponse.fail(str(err))
            except STORE_ERRORS:
                _logger.exception(f"{fn.__name__} failed")
                return ApiResponse.fail(failure)
            except Exception:
                _logger.exception(f"{fn.__name__} raised unexpectedly")
                return ApiResponse.fail(failure)

        return wrapper

    return decorator


class ShopBackend:
    """
    The storefront's whole operation surface.

    One instance per store. Callers (a UI, a script, a test) invoke one
    operation at a time and always get an ApiResponse back; nothing raises.
    """

    def __init__(
        self, clock: Optional[Clock] = None, simulate_delay: Optional[bool] = None
    ) -> None:
        self.sessions = SessionManager(clock)
        self.catalog = Catalog(self.sessions)
        self.cart = CartService(self.sessions)
        self.orders = OrderWorkflow(self.sessions)
        self.admin = AdminReports(self.sessions)
        self.simulate_delay = (
            config.SIMULATED_DELAY if simulate_delay is None else simulate_delay
        )
        self._seeded = False

    async def _ensure_seeded(self) -> None:
        if not self._seeded:
            await crud.ensure_seeded()
            self._seeded = True

    # ---------------------------
    # Auth
    # ---------------------------

    @operation("Login failed", delay_ms=300)
    async def login(self, email: str, password: str) -> ApiResponse:
        user, token = await self.sessions.login(email, password)
        return ApiResponse.ok({"user": user, "token": token}, message="Login successful")

    @operation("Logout failed", delay_ms=100)
    async def logout(self) -> ApiResponse:
        await self.sessions.logout()
        return ApiResponse.ok(message="Logout successful")

    @operation("Failed to get user", delay_ms=100)
    async def get_current_user(self) -> ApiResponse:
        return ApiResponse.ok(await self.sessions.get_current_user())

    async def is_authenticated(self) -> bool:
        return await self.current_session() is not None

    async def current_session(self) -> Optional[AuthToken]:
        return await self.sessions.current_session()

    # ---------------------------
    # Products
    # ---------------------------

    @operation("Failed to fetch products", delay_ms=200)
    async def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = config.DEFAULT_PAGE_LIMIT,
    ) -> ApiResponse:
        products, pagination = await self.catalog.list_products(
            search=search, category=category, page=page, limit=limit
        )
        return ApiResponse.ok(products, pagination=pagination)

    @operation("Failed to fetch product", delay_ms=150)
    async def get_product(self, product_id: str) -> ApiResponse:
        return ApiResponse.ok(await self.catalog.get_product(product_id))

    @operation("Failed to fetch categories")
    async def get_categories(self) -> ApiResponse:
        return ApiResponse.ok(self.catalog.categories())

    @operation("Failed to create product", delay_ms=300)
    async def create_product(self, data: Mapping[str, Any]) -> ApiResponse:
        product = await self.catalog.create_product(data)
        return ApiResponse.ok(product, message="Product created successfully")

    @operation("Failed to update product", delay_ms=300)
    async def update_product(self, product_id: str, updates: Mapping[str, Any]) -> ApiResponse:
        product = await self.catalog.update_product(product_id, updates)
        return ApiResponse.ok(product, message="Product updated successfully")

    @operation("Failed to delete product", delay_ms=200)
    async def delete_product(self, product_id: str) -> ApiResponse:
        await self.catalog.delete_product(product_id)
        return ApiResponse.ok(message="Product deleted successfully")

    # ---------------------------
    # Cart
    # ---------------------------

    @operation("Failed to fetch cart", delay_ms=150)
    async def get_cart(self) -> ApiResponse:
        return ApiResponse.ok(await self.cart.get_cart())

    @operation("Failed to add item to cart", delay_ms=200)
    async def add_to_cart(self, product_id: str, quantity: int = 1) -> ApiResponse:
        await self.cart.add_to_cart(product_id, quantity)
        return ApiResponse.ok(message="Item added to cart")

    @operation("Failed to update cart", delay_ms=200)
    async def update_cart_item(self, product_id: str, quantity: int) -> ApiResponse:
        await self.cart.update_cart_item(product_id, quantity)
        if quantity <= 0:
            return ApiResponse.ok(message="Item removed from cart")
        return ApiResponse.ok(message="Cart updated")

    @operation("Failed to remove item", delay_ms=150)
    async def remove_from_cart(self, product_id: str) -> ApiResponse:
        await self.cart.remove_from_cart(product_id)
        return ApiResponse.ok(message="Item removed from cart")

    @operation("Failed to clear cart", delay_ms=100)
    async def clear_cart(self) -> ApiResponse:
        await self.cart.clear_cart()
        return ApiResponse.ok(message="Cart cleared")

    # ---------------------------
    # Orders
    # ---------------------------

    @operation("Failed to fetch orders", delay_ms=200)
    async def get_orders(self) -> ApiResponse:
        return ApiResponse.ok(await self.orders.get_orders())

    @operation("Failed to fetch order", delay_ms=150)
    async def get_order(self, order_id: str) -> ApiResponse:
        return ApiResponse.ok(await self.orders.get_order(order_id))

    @operation("Failed to create order", delay_ms=400)
    async def create_order(self) -> ApiResponse:
        order = await self.orders.create_order()
        return ApiResponse.ok(order, message="Order created successfully")

    @operation("Failed to update order status", delay_ms=200)
    async def update_order_status(self, order_id: str, status: str) -> ApiResponse:
        order = await self.orders.update_order_status(order_id, status)
        return ApiResponse.ok(order, message="Order status updated")

    # ---------------------------
    # Admin
    # ---------------------------

    @operation("Failed to fetch orders", delay_ms=300)
    async def get_all_orders(self) -> ApiResponse:
        return ApiResponse.ok(await self.admin.get_all_orders())

    @operation("Failed to fetch users", delay_ms=200)
    async def get_all_users(self) -> ApiResponse:
        return ApiResponse.ok(await self.admin.get_all_users())

    @operation("Failed to fetch stats", delay_ms=250)
    async def get_stats(self) -> ApiResponse:
        return ApiResponse.ok(await self.admin.get_stats())

    # ---------------------------
    # Maintenance
    # ---------------------------

    @operation("Failed to reset data")
    async def reset_data(self) -> ApiResponse:
        await reset_store()
        return ApiResponse.ok(message="Data reset successfully")
