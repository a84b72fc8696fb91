import asyncio
import unittest
from decimal import Decimal

from db import crud
from store_case import StoreTestCase


class OrderTestCase(StoreTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        await self.login_customer()

    async def place_order(self, *lines):
        for pid, qty in lines:
            resp = await self.backend.add_to_cart(pid, qty)
            self.assertTrue(resp.success, resp.error)
        resp = await self.backend.create_order()
        self.assertTrue(resp.success, resp.error)
        return resp.data

    # ---------- create ----------

    async def test_create_order_commits_everything(self):
        order = await self.place_order(("1", 2), ("6", 3))

        self.assertTrue(order.id.startswith("ORD-"))
        self.assertEqual(order.user_id, "2")
        self.assertEqual(order.status, "pending")
        self.assertEqual([(i.product_id, i.quantity) for i in order.items], [("1", 2), ("6", 3)])
        self.assertEqual(order.subtotal, Decimal("250.95"))
        self.assertEqual(order.tax, Decimal("20.08"))
        self.assertEqual(order.shipping, Decimal("0"))
        self.assertEqual(order.total, Decimal("271.03"))

        self.assertEqual(await self.stock_of("1"), 13)
        self.assertEqual(await self.stock_of("6"), 42)
        self.assertEqual((await self.backend.get_cart()).data["items"], [])

        resp = await self.backend.get_orders()
        self.assertEqual([o.id for o in resp.data], [order.id])
        self.assertEqual(resp.data[0], order)

    async def test_empty_cart_cannot_be_ordered(self):
        resp = await self.backend.create_order()
        self.assertFalse(resp.success)
        self.assertEqual(resp.error, "Cart is empty")
        self.assertEqual(await crud.list_orders(), [])

    async def test_cart_cannot_be_ordered_twice(self):
        await self.place_order(("2", 1))
        resp = await self.backend.create_order()
        self.assertEqual(resp.error, "Cart is empty")
        self.assertEqual(len(await crud.list_orders()), 1)

    async def test_create_order_needs_session(self):
        await self.backend.add_to_cart("1", 1)
        await self.backend.logout()
        resp = await self.backend.create_order()
        self.assertEqual(resp.error, "Authentication required")

    async def test_create_order_is_all_or_nothing(self):
        await self.backend.add_to_cart("1", 1)
        await self.backend.add_to_cart("4", 5)

        # stock drops after the items were added
        await self.login_admin()
        await self.backend.update_product("4", {"stock": 3})
        await self.login_customer()

        cart_before = (await self.backend.get_cart()).data["items"]
        resp = await self.backend.create_order()
        self.assertFalse(resp.success)
        self.assertEqual(resp.error, "Insufficient stock for Mechanical Gaming Keyboard")

        self.assertEqual(await crud.list_orders(), [])
        self.assertEqual(await self.stock_of("1"), 15)
        self.assertEqual(await self.stock_of("4"), 3)
        self.assertEqual((await self.backend.get_cart()).data["items"], cart_before)

    async def test_deleted_product_blocks_order(self):
        await self.backend.add_to_cart("9", 1)
        await self.login_admin()
        await self.backend.delete_product("9")
        await self.login_customer()

        resp = await self.backend.create_order()
        self.assertEqual(resp.error, "Insufficient stock for Ceramic Plant Pot Set")
        self.assertEqual(len((await self.backend.get_cart()).data["items"]), 1)

    async def test_stock_can_reach_zero_but_not_below(self):
        await self.place_order(("4", 8))
        self.assertEqual(await self.stock_of("4"), 0)
        resp = await self.backend.add_to_cart("4", 1)
        self.assertEqual(resp.error, "Insufficient stock")

    async def test_order_snapshot_survives_catalog_changes(self):
        await self.backend.add_to_cart("7", 1)
        await self.login_admin()
        await self.backend.update_product("7", {"price": "1.00"})
        await self.login_customer()

        order = await self.place_order()
        self.assertEqual(order.items[0].price, Decimal("89.99"))

        await self.login_admin()
        await self.backend.update_product("7", {"price": "500.00", "name": "Renamed"})
        resp = await self.backend.get_order(order.id)
        self.assertEqual(resp.data.items[0].price, Decimal("89.99"))
        self.assertEqual(resp.data.total, order.total)

    async def test_concurrent_checkouts_place_one_order(self):
        await self.backend.add_to_cart("4", 8)
        results = await asyncio.gather(
            self.backend.create_order(), self.backend.create_order()
        )
        self.assertEqual(sorted(r.success for r in results), [False, True])
        failed = next(r for r in results if not r.success)
        self.assertEqual(failed.error, "Cart is empty")
        self.assertEqual(await self.stock_of("4"), 0)
        self.assertEqual(len(await crud.list_orders()), 1)

    # ---------- read ----------

    async def test_order_access_control(self):
        mine = await self.place_order(("2", 1))

        await self.login_admin()
        admins = await self.place_order(("3", 1))

        # admin can read any order, but get_orders is only their own
        self.assertTrue((await self.backend.get_order(mine.id)).success)
        resp = await self.backend.get_orders()
        self.assertEqual([o.id for o in resp.data], [admins.id])

        await self.login_customer()
        resp = await self.backend.get_order(admins.id)
        self.assertFalse(resp.success)
        self.assertEqual(resp.error, "Access denied")
        resp = await self.backend.get_order(mine.id)
        self.assertEqual(resp.data, mine)

        resp = await self.backend.get_order("ORD-0-XXXX")
        self.assertEqual(resp.error, "Order not found")

    # ---------- status ----------

    async def test_update_status_needs_admin(self):
        order = await self.place_order(("2", 1))
        resp = await self.backend.update_order_status(order.id, "shipped")
        self.assertEqual(resp.error, "Admin access required")

    async def test_any_status_may_follow_any_other(self):
        order = await self.place_order(("2", 1))
        await self.login_admin()

        for status in ["delivered", "pending", "shipped", "processing", "pending"]:
            resp = await self.backend.update_order_status(order.id, status)
            self.assertTrue(resp.success, resp.error)
            self.assertEqual(resp.data.status, status)

        stored = (await self.backend.get_order(order.id)).data
        self.assertEqual(stored.status, "pending")
        self.assertEqual(stored.items, order.items)
        self.assertEqual(stored.total, order.total)

    async def test_update_status_rejects_unknown(self):
        order = await self.place_order(("2", 1))
        await self.login_admin()

        resp = await self.backend.update_order_status(order.id, "lost")
        self.assertFalse(resp.success)
        resp = await self.backend.update_order_status("ORD-0-XXXX", "shipped")
        self.assertEqual(resp.error, "Order not found")
        self.assertEqual((await self.backend.get_order(order.id)).data.status, "pending")


if __name__ == "__main__":
    unittest.main()
