# runtime settings, overridable through environment variables
import os
from decimal import Decimal

DB_PATH = os.getenv("SHOP_DB_PATH", "data/shop.sqlite")

SESSION_TTL_HOURS = float(os.getenv("SHOP_SESSION_TTL_HOURS", "24"))

# when set, every operation sleeps for its nominal latency before running
SIMULATED_DELAY = bool(os.getenv("SHOP_SIMULATED_DELAY"))

TAX_RATE = Decimal("0.08")
FREE_SHIPPING_THRESHOLD = Decimal("50")
SHIPPING_FEE = Decimal("9.99")

LOW_STOCK_THRESHOLD = 5
DEFAULT_PAGE_LIMIT = 20
RECENT_ORDERS_LIMIT = 5
