import os
import tempfile
import unittest

from db import database as db_database
from shop.backend import ShopBackend

CUSTOMER = ("user@test.com", "user123")
ADMIN = ("admin@test.com", "admin123")

T0 = 1_750_000_000.0


class StoreTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh sqlite file and a seeded backend with a controllable clock."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False
        self.now = T0
        self.backend = ShopBackend(clock=lambda: self.now, simulate_delay=False)

    async def asyncSetUp(self):
        resp = await self.backend.reset_data()
        self.assertTrue(resp.success, resp.error)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def login_customer(self):
        resp = await self.backend.login(*CUSTOMER)
        self.assertTrue(resp.success, resp.error)
        return resp

    async def login_admin(self):
        resp = await self.backend.login(*ADMIN)
        self.assertTrue(resp.success, resp.error)
        return resp

    async def stock_of(self, product_id: str) -> int:
        resp = await self.backend.get_product(product_id)
        self.assertTrue(resp.success, resp.error)
        return resp.data.stock
