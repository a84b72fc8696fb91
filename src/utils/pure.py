import random
import string
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from db.models import CartItem, Totals
from utils import config

CENTS = Decimal("0.01")

_LOWER_ALNUM = string.ascii_lowercase + string.digits
_UPPER_ALNUM = string.ascii_uppercase + string.digits


def compute_totals(items: Iterable[CartItem]) -> Totals:
    """
    Price a list of cart items.

    subtotal = sum(price * quantity)
    tax      = 8% of subtotal, rounded half-up to cents
    shipping = free above the threshold, flat fee otherwise
    total    = subtotal + tax + shipping

    Pure and Decimal-only: identical items always give identical totals.
    Tax is rounded to whole cents so stored orders carry payable amounts;
    the subtotal stays exact, so split subtotals still add up.
    """
    subtotal = sum((item.price * item.quantity for item in items), Decimal("0"))
    tax = (subtotal * config.TAX_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)
    if subtotal > config.FREE_SHIPPING_THRESHOLD:
        shipping = Decimal("0.00")
    else:
        shipping = config.SHIPPING_FEE
    return Totals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )


def _suffix(alphabet: str, length: int) -> str:
    return "".join(random.choice(alphabet) for _ in range(length))


def generate_order_id(now_ms: int) -> str:
    return f"ORD-{now_ms}-{_suffix(_UPPER_ALNUM, 4)}"


def generate_token(user_id: str, now_ms: int) -> str:
    """Opaque session token. Unique, not unguessable."""
    return f"tok_{user_id}_{now_ms}_{_suffix(_LOWER_ALNUM, 9)}"


def generate_product_id(now_ms: int) -> str:
    return f"{now_ms}_{_suffix(_LOWER_ALNUM, 9)}"


def format_currency(amount: Decimal) -> str:
    return f"${amount.quantize(CENTS, rounding=ROUND_HALF_UP):,}"
