from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List

from db import crud, kv
from db.models import CartItem
from shop.errors import InsufficientStock, ItemNotFound, ProductNotFound, ValidationFailed
from shop.session import SessionManager
from utils.logger import get_logger
from utils.pure import compute_totals

_logger = get_logger(__name__)


def _to_quantity(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailed(f"Invalid quantity: {value!r}")
    return value


def _find(items: List[CartItem], product_id: str) -> int:
    for idx, item in enumerate(items):
        if item.product_id == product_id:
            return idx
    return -1


class CartService:
    """
    Per-user cart. Every mutation is checked against current catalog stock
    while holding both the owner's cart lock and the catalog lock.
    """

    def __init__(self, sessions: SessionManager) -> None:
        self.sessions = sessions

    async def get_cart(self) -> Dict[str, Any]:
        auth = await self.sessions.require_auth()
        items = await crud.list_cart(auth.user_id)
        return {"items": items, "totals": compute_totals(items)}

    async def add_to_cart(self, product_id: str, quantity: int = 1) -> CartItem:
        auth = await self.sessions.require_auth()
        quantity = _to_quantity(quantity)
        if quantity < 1:
            raise ValidationFailed("Quantity must be at least 1")

        async with kv.locked(crud.cart_key(auth.user_id), crud.PRODUCTS_KEY):
            product = await crud.get_product(product_id)
            if product is None:
                raise ProductNotFound()

            items = await crud.list_cart(auth.user_id)
            idx = _find(items, product_id)
            existing = items[idx].quantity if idx >= 0 else 0
            if existing + quantity > product.stock:
                raise InsufficientStock()

            if idx >= 0:
                # keep the price captured on first add
                item = replace(items[idx], quantity=existing + quantity)
                items[idx] = item
            else:
                item = CartItem(product_id=product_id, quantity=quantity, price=product.price)
                items.append(item)
            await crud.save_cart(auth.user_id, items)

        _logger.debug(f"Cart {auth.user_id}: {product_id} x{item.quantity}")
        return item

    async def update_cart_item(self, product_id: str, quantity: int) -> None:
        """Set an item's quantity; zero or less removes it."""
        auth = await self.sessions.require_auth()
        quantity = _to_quantity(quantity)
        if quantity <= 0:
            await self.remove_from_cart(product_id)
            return

        async with kv.locked(crud.cart_key(auth.user_id), crud.PRODUCTS_KEY):
            product = await crud.get_product(product_id)
            if product is None:
                raise ProductNotFound()
            if quantity > product.stock:
                raise InsufficientStock()

            items = await crud.list_cart(auth.user_id)
            idx = _find(items, product_id)
            if idx < 0:
                raise ItemNotFound()

            items[idx] = replace(items[idx], quantity=quantity)
            await crud.save_cart(auth.user_id, items)

    async def remove_from_cart(self, product_id: str) -> None:
        """Idempotent: removing an item that is not there still succeeds."""
        auth = await self.sessions.require_auth()
        async with kv.locked(crud.cart_key(auth.user_id)):
            items = await crud.list_cart(auth.user_id)
            remaining = [i for i in items if i.product_id != product_id]
            if len(remaining) != len(items):
                await crud.save_cart(auth.user_id, remaining)

    async def clear_cart(self) -> None:
        auth = await self.sessions.require_auth()
        async with kv.locked(crud.cart_key(auth.user_id)):
            await crud.save_cart(auth.user_id, [])
