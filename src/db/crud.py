# src/db/crud.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from db import kv
from db.models import AuthToken, CartItem, Order, Product, User
from db.seed import SEED_PRODUCTS, SEED_USERS
from utils.logger import get_logger

_logger = get_logger(__name__)

# ---------------------------
# Key layout
# ---------------------------

PREFIX = "shop:"
PRODUCTS_KEY = PREFIX + "products"
USERS_KEY = PREFIX + "users"
ORDERS_KEY = PREFIX + "orders"
CART_PREFIX = PREFIX + "cart:"
SESSION_TOKEN_KEY = PREFIX + "session_token"
SESSION_KEY = PREFIX + "session"


def cart_key(user_id: str) -> str:
    return f"{CART_PREFIX}{user_id}"


def dump_products(products: Sequence[Product]) -> list:
    return [p.to_dict() for p in products]


def dump_orders(orders: Sequence[Order]) -> list:
    return [o.to_dict() for o in orders]


def dump_cart(items: Sequence[CartItem]) -> list:
    return [i.to_dict() for i in items]


# ---------------------------
# Seeding
# ---------------------------


async def ensure_seeded() -> None:
    """Write seed catalog, seed users and an empty order list if missing.

    Existing values are never overwritten.
    """
    async with kv.locked(PRODUCTS_KEY, USERS_KEY, ORDERS_KEY):
        missing = {}
        if await kv.get(PRODUCTS_KEY) is None:
            missing[PRODUCTS_KEY] = dump_products(SEED_PRODUCTS)
        if await kv.get(USERS_KEY) is None:
            missing[USERS_KEY] = [u.to_dict() for u in SEED_USERS]
        if await kv.get(ORDERS_KEY) is None:
            missing[ORDERS_KEY] = []
        if missing:
            _logger.info(f"Seeding store keys: {', '.join(missing)}")
            await kv.set_many(missing)


async def reset_all() -> int:
    """Restore seed catalog/users, drop every order, cart and the session.

    Seed writes and deletions commit in one transaction. Callers hold the
    locks of every key touched, cart keys included.

    Returns the number of cart keys removed.
    """
    cart_keys = await kv.keys(CART_PREFIX)
    await kv.set_many(
        {
            PRODUCTS_KEY: dump_products(SEED_PRODUCTS),
            USERS_KEY: [u.to_dict() for u in SEED_USERS],
            ORDERS_KEY: [],
        },
        delete=cart_keys + [SESSION_TOKEN_KEY, SESSION_KEY],
    )
    return len(cart_keys)


# ---------------------------
# Products
# ---------------------------


async def list_products(include_deleted: bool = False) -> List[Product]:
    """All products in catalog order; soft-deleted ones only on request."""
    rows = await kv.get(PRODUCTS_KEY, [])
    products = [Product.from_dict(r) for r in rows]
    if include_deleted:
        return products
    return [p for p in products if not p.deleted]


async def get_product(product_id: str) -> Optional[Product]:
    for p in await list_products():
        if p.id == product_id:
            return p
    return None


async def save_products(products: Sequence[Product]) -> None:
    await kv.set(PRODUCTS_KEY, dump_products(products))


# ---------------------------
# Users
# ---------------------------


async def list_users() -> List[User]:
    return [User.from_dict(r) for r in await kv.get(USERS_KEY, [])]


async def get_user(user_id: str) -> Optional[User]:
    for u in await list_users():
        if u.id == user_id:
            return u
    return None


async def get_user_by_email(email: str) -> Optional[User]:
    for u in await list_users():
        if u.email == email:
            return u
    return None


# ---------------------------
# Carts
# ---------------------------


async def list_cart(user_id: str) -> List[CartItem]:
    return [CartItem.from_dict(r) for r in await kv.get(cart_key(user_id), [])]


async def save_cart(user_id: str, items: Sequence[CartItem]) -> None:
    await kv.set(cart_key(user_id), dump_cart(items))


# ---------------------------
# Orders
# ---------------------------


async def list_orders() -> List[Order]:
    """Every order, oldest first."""
    return [Order.from_dict(r) for r in await kv.get(ORDERS_KEY, [])]


async def save_orders(orders: Sequence[Order]) -> None:
    await kv.set(ORDERS_KEY, dump_orders(orders))


# ---------------------------
# Session
# ---------------------------


async def load_session() -> Tuple[Optional[str], Optional[AuthToken]]:
    token = await kv.get(SESSION_TOKEN_KEY)
    raw = await kv.get(SESSION_KEY)
    return token, (AuthToken.from_dict(raw) if raw else None)


async def save_session(token: str, auth: AuthToken) -> None:
    await kv.set_many({SESSION_TOKEN_KEY: token, SESSION_KEY: auth.to_dict()})


async def clear_session() -> None:
    await kv.delete_many([SESSION_TOKEN_KEY, SESSION_KEY])
