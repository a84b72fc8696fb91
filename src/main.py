import asyncio

from rich.console import Console
from rich.table import Table

from shop.backend import ShopBackend
from shop.response import ApiResponse
from utils.logger import get_logger
from utils.pure import format_currency

_logger = get_logger("demo")
console = Console()


def _check(resp: ApiResponse, what: str) -> ApiResponse:
    if not resp.success:
        raise SystemExit(f"{what} failed: {resp.error}")
    return resp


def render_stats(stats) -> None:
    summary = Table(title="Store summary")
    summary.add_column("Metric")
    summary.add_column("Value", justify="right")
    summary.add_row("Revenue", format_currency(stats.total_revenue))
    summary.add_row("Products", str(stats.total_products))
    summary.add_row("Orders", str(stats.total_orders))
    summary.add_row("Users", str(stats.total_users))
    summary.add_row("Low stock", str(stats.low_stock_products))
    console.print(summary)

    recent = Table(title="Recent orders")
    for col in ("Order", "User", "Items", "Total", "Status"):
        recent.add_column(col)
    for order in stats.recent_orders:
        recent.add_row(
            order.id,
            order.user_id,
            str(sum(i.quantity for i in order.items)),
            format_currency(order.total),
            order.status,
        )
    console.print(recent)


async def demo() -> None:
    """Reset, shop as the customer, check out, then report as the admin."""
    backend = ShopBackend()
    _check(await backend.reset_data(), "reset")

    _check(await backend.login("user@test.com", "user123"), "customer login")
    _check(await backend.add_to_cart("1", 2), "add headphones")
    _check(await backend.add_to_cart("6", 3), "add coffee")
    order = _check(await backend.create_order(), "checkout").data
    _logger.info(f"Placed {order.id} for {format_currency(order.total)}")

    _check(await backend.login("admin@test.com", "admin123"), "admin login")
    _check(await backend.update_order_status(order.id, "processing"), "status update")
    render_stats(_check(await backend.get_stats(), "stats").data)
    await backend.logout()


def main() -> None:
    asyncio.run(demo())


if __name__ == "__main__":
    main()
