"""Notifications and ads over HTTP."""

import datetime as dt
import unittest

from tests.support import TEST_UID, ApiTestCase


class NotificationApiTestCase(ApiTestCase):

    def test_templates(self):
        templates = self.assertStatus(self.get("/notifications/templates"), 200)
        self.assertEqual(
            [t["id"] for t in templates],
            ["shift-reminder", "task-assigned", "emergency-alert", "shift-end"],
        )

    def test_zone_message_reaches_active_staff_once(self):
        self.create_staff(name="Amit Singh", phone="9876500001", zone="North")
        self.create_staff(name="Sita Devi", phone="9876500002", zone="Ghat-3")
        gone = self.create_staff(name="Mohan Lal", phone="9876500003", zone="North")
        self.post(f"/staff/{gone['id']}/deactivate")
        self.create_staff(name="Ravi Kumar", phone="9876500004", zone="South")

        body = self.assertStatus(self.post("/notifications", {
            "recipient_type": "zone",
            "recipient_ids": ["North", "Ghat-3", "North"],
            "channel": "whatsapp",
            "template_id": "emergency-alert",
        }), 201)
        self.assertEqual(body["status"], "pending")
        self.assertEqual(sorted(body["recipients"]), ["+919876500001", "+919876500002"])
        self.assertEqual(body["recipient_ids"], ["North", "Ghat-3"])
        self.assertTrue(body["message"].startswith("URGENT"))
        self.assertEqual(body["created_by"], TEST_UID)

    def test_unknown_individual(self):
        staff = self.create_staff()
        body = self.assertStatus(self.post("/notifications", {
            "recipient_ids": [staff["id"], "missing"],
            "message": "Hello",
        }), 400)
        self.assertIn("recipient_ids", body["errors"])

    def test_message_or_template_required(self):
        staff = self.create_staff()
        self.assertStatus(self.post("/notifications", {"recipient_ids": [staff["id"]]}), 400)
        self.assertStatus(
            self.post("/notifications", {"recipient_ids": [staff["id"]], "template_id": "nope"}), 400
        )

    def test_no_reachable_recipients(self):
        self.assertStatus(self.post("/notifications", {
            "recipient_type": "zone", "recipient_ids": ["Empty"], "message": "Hello",
        }), 400)

    def test_delivery_reports(self):
        staff = self.create_staff()
        notification = self.assertStatus(
            self.post(f"/staff/{staff['id']}/notify", {"message": "Please report to Ghat 3"}), 201
        )
        self.assertEqual(notification["channel"], "sms")
        url = f"/notifications/{notification['id']}/delivery"

        self.assertStatus(self.patch(url, {"status": "delivered"}), 409)

        sent = self.assertStatus(self.patch(url, {"status": "sent", "provider_response": {"sid": "SM1"}}), 200)
        self.assertEqual(sent["status"], "sent")
        self.assertIsNotNone(sent["sent_at"])
        self.assertEqual(sent["provider_response"], {"sid": "SM1"})

        delivered = self.assertStatus(self.patch(url, {"status": "delivered"}), 200)
        self.assertIsNotNone(delivered["delivered_at"])
        self.assertStatus(self.patch(url, {"status": "failed"}), 409)

        listed = self.assertStatus(self.get("/notifications", params={"status": "delivered"}), 200)
        self.assertEqual([n["id"] for n in listed], [notification["id"]])


class AdApiTestCase(ApiTestCase):

    def test_sponsored_needs_publishing(self):
        ad = self.assertStatus(self.post("/ads", {
            "title": "Free water at Gate 4", "type": "sponsored", "description": "Courtesy of a sponsor",
        }), 201)
        self.assertEqual(ad["status"], "draft")
        self.assertIsNone(ad["approved_by"])
        self.assertFalse(ad["is_expired"])

        published = self.assertStatus(self.patch(f"/ads/{ad['id']}/status", {"status": "published"}), 200)
        self.assertEqual(published["status"], "published")
        self.assertEqual(published["approved_by"], TEST_UID)

        expired = self.assertStatus(self.patch(f"/ads/{ad['id']}/status", {"status": "expired"}), 200)
        self.assertEqual(expired["status"], "expired")
        self.assertStatus(self.patch(f"/ads/{ad['id']}/status", {"status": "published"}), 409)

    def test_announcement_published_with_default_window(self):
        ad = self.assertStatus(self.post("/ads", {
            "title": "Lost and found", "description": "Helpdesk near Ghat 2",
        }), 201)
        self.assertEqual(ad["status"], "published")
        valid_from = dt.datetime.fromisoformat(ad["valid_from"].replace("Z", "+00:00"))
        valid_to = dt.datetime.fromisoformat(ad["valid_to"].replace("Z", "+00:00"))
        self.assertEqual(valid_to - valid_from, dt.timedelta(days=7))

    def test_past_window_is_expired(self):
        ad = self.assertStatus(self.post("/ads", {
            "title": "Yesterday", "type": "emergency", "description": "Old notice",
            "valid_from": "2024-01-01T00:00:00Z", "valid_to": "2024-01-02T00:00:00Z",
        }), 201)
        self.assertTrue(ad["is_expired"])

    def test_window_must_be_ordered(self):
        body = self.assertStatus(self.post("/ads", {
            "title": "Backwards", "description": "x",
            "valid_from": "2025-01-02T00:00:00Z", "valid_to": "2025-01-01T00:00:00Z",
        }), 400)
        self.assertIn("valid_to", body["errors"])


if __name__ == "__main__":
    unittest.main()
