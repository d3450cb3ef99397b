"""Dashboard summary and CSV exports."""

import csv
import datetime as dt
import io
import unittest

from tests.support import ApiTestCase


class AnalyticsApiTestCase(ApiTestCase):

    def seed(self):
        self.create_staff(name="Amit Singh", phone="9876500001", shift="green", on_duty=True)
        self.create_staff(name="Sita Devi", phone="9876500002", shift="green", on_duty=True)
        self.create_staff(name="Mohan Lal", phone="9876500003", shift="red")

        done = self.assertStatus(self.post("/tasks", {"title": "Sweep", "zone": "North"}), 201)
        for step in ("in-progress", "completed"):
            self.patch(f"/tasks/{done['id']}/status", {"status": step})
        self.assertStatus(self.post("/tasks", {"title": "Refill", "zone": "North"}), 201)

        self.assertStatus(self.post("/issues", {
            "zone": "North", "category": "safety", "severity": "low", "description": "Loose railing",
        }), 201)

    def test_summary(self):
        self.seed()
        body = self.assertStatus(self.get("/analytics/summary"), 200)

        self.assertEqual(body["tasks"]["total"], 2)
        self.assertEqual(body["tasks"]["by_status"]["completed"], 1)
        self.assertEqual(body["tasks"]["completion_rate"], 50)
        self.assertEqual(body["issues"]["by_category"]["safety"], 1)
        self.assertEqual(body["issues"]["open"], 1)
        self.assertEqual(body["staff"]["active"], 3)
        self.assertEqual(body["staff"]["on_duty_by_shift"], {"red": 0, "orange": 0, "green": 2})
        self.assertEqual(body["notifications"]["total"], 0)

    def test_range_excludes_older_records(self):
        self.seed()
        body = self.assertStatus(
            self.get("/analytics/summary", params={"date_from": "2020-01-01", "date_to": "2020-01-31"}), 200
        )
        self.assertEqual(body["tasks"]["total"], 0)
        self.assertEqual(body["tasks"]["completion_rate"], 0)

        today = dt.datetime.now(dt.timezone.utc).date().isoformat()
        body = self.assertStatus(
            self.get("/analytics/summary", params={"date_from": today, "date_to": today}), 200
        )
        self.assertEqual(body["tasks"]["total"], 2)

    def test_reversed_range(self):
        self.assertStatus(
            self.get("/analytics/summary", params={"date_from": "2025-02-01", "date_to": "2025-01-01"}), 400
        )

    def test_issue_export_includes_sla(self):
        self.seed()
        response = self.get("/analytics/export/issues.csv")
        self.assertStatus(response, 200)
        self.assertIn('filename="issues-', response.headers["content-disposition"])

        rows = list(csv.DictReader(io.StringIO(response.text)))
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["category"], "safety")
        self.assertEqual(rows[0]["sla_status"], "on-track")
        self.assertTrue(rows[0]["sla_deadline"])

    def test_unknown_dataset(self):
        self.assertStatus(self.get("/analytics/export/payroll.csv"), 422)


if __name__ == "__main__":
    unittest.main()
