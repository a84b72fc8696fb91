from __future__ import annotations

from dataclasses import fields, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from db import crud, kv
from db.models import Pagination, Product
from db.seed import CATEGORIES
from shop.errors import ProductNotFound, ValidationFailed
from shop.session import SessionManager
from utils import config
from utils.logger import get_logger
from utils.pure import generate_product_id

_logger = get_logger(__name__)

ALL_CATEGORIES = "All"

_REQUIRED_FIELDS = ("name", "price", "category", "stock")
_EDITABLE_FIELDS = {f.name for f in fields(Product)} - {"id", "deleted"}


def _to_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationFailed(f"Invalid price: {value!r}")
    if not price.is_finite() or price < 0:
        raise ValidationFailed("Price must be a non-negative number")
    return price


def _to_stock(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailed(f"Invalid stock: {value!r}")
    if value < 0:
        raise ValidationFailed("Stock cannot be negative")
    return value


def _clean_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = set(data) - _EDITABLE_FIELDS - {"id"}
    if unknown:
        raise ValidationFailed(f"Unknown product fields: {', '.join(sorted(unknown))}")
    cleaned = {k: v for k, v in data.items() if k in _EDITABLE_FIELDS}
    if "price" in cleaned:
        cleaned["price"] = _to_price(cleaned["price"])
    if "stock" in cleaned:
        cleaned["stock"] = _to_stock(cleaned["stock"])
    for key in ("name", "description", "image", "category"):
        if key in cleaned and not isinstance(cleaned[key], str):
            raise ValidationFailed(f"{key} must be a string")
    return cleaned


def matches(product: Product, search: Optional[str], category: Optional[str]) -> bool:
    """Case-insensitive substring on name/description, exact category."""
    if search:
        term = search.lower()
        if term not in product.name.lower() and term not in product.description.lower():
            return False
    if category and category != ALL_CATEGORIES and product.category != category:
        return False
    return True


class Catalog:
    """Product listing for everyone, product writes for admins."""

    def __init__(self, sessions: SessionManager) -> None:
        self.sessions = sessions

    async def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = config.DEFAULT_PAGE_LIMIT,
    ) -> Tuple[List[Product], Pagination]:
        """
        Filter, then paginate. `Pagination.total` is the filtered count
        before slicing.
        """
        for name, value in (("page", page), ("limit", limit)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationFailed(f"Invalid {name}: {value!r}")
        if page < 1 or limit < 1:
            raise ValidationFailed("page and limit must be at least 1")

        filtered = [
            p for p in await crud.list_products() if matches(p, search, category)
        ]
        start = (page - 1) * limit
        return filtered[start : start + limit], Pagination(
            page=page, limit=limit, total=len(filtered)
        )

    async def get_product(self, product_id: str) -> Product:
        product = await crud.get_product(product_id)
        if product is None:
            raise ProductNotFound()
        return product

    @staticmethod
    def categories() -> List[str]:
        return list(CATEGORIES)

    async def create_product(self, data: Mapping[str, Any]) -> Product:
        await self.sessions.require_auth(needs_admin=True)

        missing = [k for k in _REQUIRED_FIELDS if k not in data]
        if missing:
            raise ValidationFailed(f"Missing product fields: {', '.join(missing)}")
        cleaned = _clean_fields(data)

        async with kv.locked(crud.PRODUCTS_KEY):
            products = await crud.list_products(include_deleted=True)
            taken = {p.id for p in products}
            product_id = generate_product_id(self.sessions.now_ms())
            while product_id in taken:
                product_id = generate_product_id(self.sessions.now_ms())

            product = Product(
                id=product_id,
                name=cleaned["name"],
                price=cleaned["price"],
                description=cleaned.get("description", ""),
                image=cleaned.get("image", ""),
                category=cleaned["category"],
                stock=cleaned["stock"],
            )
            products.append(product)
            await crud.save_products(products)

        _logger.info(f"Created product {product.id} ({product.name})")
        return product

    async def update_product(self, product_id: str, updates: Mapping[str, Any]) -> Product:
        """Shallow merge of `updates` into the product; the id never changes."""
        await self.sessions.require_auth(needs_admin=True)
        cleaned = _clean_fields(updates)

        async with kv.locked(crud.PRODUCTS_KEY):
            products = await crud.list_products(include_deleted=True)
            for idx, product in enumerate(products):
                if product.id == product_id and not product.deleted:
                    break
            else:
                raise ProductNotFound()

            updated = replace(product, **cleaned)
            products[idx] = updated
            await crud.save_products(products)

        _logger.info(f"Updated product {product_id}: {', '.join(cleaned) or 'no changes'}")
        return updated

    async def delete_product(self, product_id: str) -> None:
        """Soft delete: the record stays, listings and lookups stop seeing it."""
        await self.sessions.require_auth(needs_admin=True)

        async with kv.locked(crud.PRODUCTS_KEY):
            products = await crud.list_products(include_deleted=True)
            for idx, product in enumerate(products):
                if product.id == product_id and not product.deleted:
                    break
            else:
                raise ProductNotFound()

            products[idx] = replace(product, deleted=True)
            await crud.save_products(products)

        _logger.info(f"Deleted product {product_id}")
