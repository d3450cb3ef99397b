"""Public site backend: copy, contact form and staffing demo."""

import unittest

from tests.support import FakeEmailRelay, ApiTestCase
from seva.main import app


CONTACT = {
    "name": "Asha Verma",
    "organization": "Nagar Nigam",
    "email": "asha@example.org",
    "phone": "+91 98765 43210",
    "dates": "Jan 2026",
    "message": "Pilot for Sangam ghats",
}


class SiteContentTestCase(ApiTestCase):

    def test_languages(self):
        self.assertEqual(self.assertStatus(self.client.get("/site/languages"), 200), ["en", "hi"])

    def test_both_languages_share_keys(self):
        en = self.assertStatus(self.client.get("/site/content/en"), 200)
        hi = self.assertStatus(self.client.get("/site/content/hi"), 200)
        self.assertEqual(en["language"], "en")
        self.assertEqual(set(en["content"]), set(hi["content"]))
        self.assertEqual(en["content"]["hero"]["headline"], "Clean Ghats. Safe Pilgrims. Smart Management.")
        self.assertEqual(len(hi["content"]["problems"]), 4)

    def test_unknown_language(self):
        self.assertStatus(self.client.get("/site/content/fr"), 404)


class ContactTestCase(ApiTestCase):

    def test_submission_is_relayed_once(self):
        body = self.assertStatus(self.client.post("/site/contact", json=CONTACT), 200)
        self.assertTrue(body["success"])
        self.assertIn("48 hours", body["message"])
        self.assertEqual(len(self.relay.sent), 1)
        self.assertEqual(self.relay.sent[0]["organization"], "Nagar Nigam")
        self.assertEqual(self.relay.sent[0]["email"], "asha@example.org")

    def test_hindi_confirmation(self):
        body = self.assertStatus(self.client.post("/site/contact", params={"lang": "hi"}, json=CONTACT), 200)
        self.assertIn("48 ghante", body["message"])

    def test_missing_fields(self):
        self.assertStatus(self.client.post("/site/contact", json={**CONTACT, "organization": " "}), 422)
        self.assertStatus(self.client.post("/site/contact", json={**CONTACT, "email": "asha"}), 422)
        self.assertEqual(self.relay.sent, [])

    def test_relay_failure(self):
        app.state.email_relay = FakeEmailRelay(fail=True)
        body = self.assertStatus(self.client.post("/site/contact", json=CONTACT), 502)
        self.assertIn("correlation_id", body)


class StaffingDemoTestCase(ApiTestCase):

    def test_twelve_thousand(self):
        body = self.assertStatus(self.client.get("/site/demo/staffing", params={"headcount": 12000}), 200)
        self.assertEqual(body["required_staff"], 1500)
        self.assertEqual(body["message"], "Headcount: 12,000 → Required staff: 1,500")

    def test_bounds(self):
        self.assertStatus(self.client.get("/site/demo/staffing", params={"headcount": -1}), 422)
        body = self.assertStatus(self.client.get("/site/demo/staffing", params={"headcount": 0}), 200)
        self.assertEqual(body["required_staff"], 0)


if __name__ == "__main__":
    unittest.main()
