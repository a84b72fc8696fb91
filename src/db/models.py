# provide dataclass models, persisted as plain dicts in the key-value store
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Literal, Tuple

Role = Literal["admin", "customer"]
OrderStatus = Literal["pending", "processing", "shipped", "delivered"]

ORDER_STATUSES: Tuple[str, ...] = ("pending", "processing", "shipped", "delivered")


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: Decimal
    description: str
    image: str
    category: str
    stock: int
    deleted: bool = False  # soft delete, hidden from listings

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["price"] = str(self.price)
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        return cls(
            id=str(d["id"]),
            name=d["name"],
            price=Decimal(str(d["price"])),
            description=d.get("description", ""),
            image=d.get("image", ""),
            category=d["category"],
            stock=int(d["stock"]),
            deleted=bool(d.get("deleted", False)),
        )


@dataclass(frozen=True)
class User:
    id: str
    email: str
    name: str
    role: Role

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        return cls(id=str(d["id"]), email=d["email"], name=d["name"], role=d["role"])


@dataclass(frozen=True)
class CartItem:
    product_id: str
    quantity: int
    price: Decimal  # unit price captured when first added

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": str(self.price),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartItem":
        return cls(
            product_id=str(d["product_id"]),
            quantity=int(d["quantity"]),
            price=Decimal(str(d["price"])),
        )


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {k: str(v) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    items: Tuple[CartItem, ...]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    status: OrderStatus
    created_at: str  # ISO-8601, UTC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "items": [item.to_dict() for item in self.items],
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "shipping": str(self.shipping),
            "total": str(self.total),
            "status": self.status,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Order":
        return cls(
            id=d["id"],
            user_id=str(d["user_id"]),
            items=tuple(CartItem.from_dict(i) for i in d["items"]),
            subtotal=Decimal(d["subtotal"]),
            tax=Decimal(d["tax"]),
            shipping=Decimal(d["shipping"]),
            total=Decimal(d["total"]),
            status=d["status"],
            created_at=d["created_at"],
        )


@dataclass(frozen=True)
class AuthToken:
    """The current session: who is logged in and until when (epoch seconds)."""

    user_id: str
    email: str
    role: Role
    expires_at: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AuthToken":
        return cls(
            user_id=str(d["user_id"]),
            email=d["email"],
            role=d["role"],
            expires_at=float(d["expires_at"]),
        )


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Stats:
    total_revenue: Decimal
    total_products: int
    total_orders: int
    total_users: int
    low_stock_products: int
    recent_orders: Tuple[Order, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_revenue": str(self.total_revenue),
            "total_products": self.total_products,
            "total_orders": self.total_orders,
            "total_users": self.total_users,
            "low_stock_products": self.low_stock_products,
            "recent_orders": [o.to_dict() for o in self.recent_orders],
        }
