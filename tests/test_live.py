"""Live collection mirror over WebSocket, and the change feed behind it."""

import asyncio
import unittest

from starlette.websockets import WebSocketDisconnect

from seva.shared.infrastructure.events import ChangeFeed
from tests.support import TEST_TOKEN, ApiTestCase


class ChangeFeedTestCase(unittest.IsolatedAsyncioTestCase):

    async def test_publish_reaches_only_subscribers_of_that_collection(self):
        feed = ChangeFeed()
        staff = feed.subscribe("staff")
        tasks = feed.subscribe("tasks")

        feed.publish("staff")
        self.assertEqual(await asyncio.wait_for(staff.get(), 1), "staff")
        self.assertTrue(tasks.empty())

    async def test_full_queue_drops_extra_signals(self):
        feed = ChangeFeed(max_pending=1)
        queue = feed.subscribe("staff")
        feed.publish("staff")
        feed.publish("staff")
        self.assertEqual(queue.qsize(), 1)

    async def test_unsubscribe(self):
        feed = ChangeFeed()
        queue = feed.subscribe("staff")
        feed.unsubscribe("staff", queue)
        self.assertEqual(feed.subscriber_count("staff"), 0)
        feed.publish("staff")
        self.assertTrue(queue.empty())


class LiveSocketTestCase(ApiTestCase):

    def assertClosedWith(self, url: str, code: int):
        with self.assertRaises(WebSocketDisconnect) as ctx:
            with self.client.websocket_connect(url) as ws:
                ws.receive_json()
        self.assertEqual(ctx.exception.code, code)

    def test_token_required(self):
        self.assertClosedWith("/live/staff", 4001)

    def test_rejected_token(self):
        self.assertClosedWith("/live/staff?token=stale", 4002)

    def test_unknown_collection(self):
        self.assertClosedWith(f"/live/payroll?token={TEST_TOKEN}", 4004)

    def test_snapshot_then_full_list_after_each_write(self):
        with self.client.websocket_connect(f"/live/staff?token={TEST_TOKEN}") as ws:
            first = ws.receive_json()
            self.assertEqual(first, {"collection": "staff", "items": []})

            staff = self.create_staff()
            update = ws.receive_json()
            self.assertEqual(update["collection"], "staff")
            self.assertEqual([s["id"] for s in update["items"]], [staff["id"]])

            self.create_staff(name="Amit Singh", phone="9876500001")
            update = ws.receive_json()
            self.assertEqual([s["name"] for s in update["items"]], ["Amit Singh", "Ravi Kumar"])

    def test_unrelated_writes_are_not_sent(self):
        with self.client.websocket_connect(f"/live/facilities?token={TEST_TOKEN}") as ws:
            self.assertEqual(ws.receive_json()["items"], [])
            self.create_team()
            self.create_facility()
            update = ws.receive_json()
            self.assertEqual([f["code"] for f in update["items"]], ["T7"])


if __name__ == "__main__":
    unittest.main()
