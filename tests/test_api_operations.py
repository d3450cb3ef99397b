"""Facilities, tasks, issues and QR codes over HTTP."""

import datetime as dt
import unittest

from tests.support import TEST_UID, ApiTestCase


def _utc(value: str) -> dt.datetime:
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=dt.timezone.utc)


class DueTimeMixin:

    def assertDueAfter(self, task: dict, minutes: int, before: dt.datetime, after: dt.datetime):
        slack = dt.timedelta(seconds=1)
        due = _utc(task["due_at"])
        self.assertGreaterEqual(due, before + dt.timedelta(minutes=minutes) - slack)
        self.assertLessEqual(due, after + dt.timedelta(minutes=minutes) + slack)


class FacilityApiTestCase(DueTimeMixin, ApiTestCase):

    def test_codes_are_unique_ignoring_case(self):
        self.create_facility(code="T7")
        body = self.assertStatus(
            self.post("/facilities", {"code": "t7", "type": "bin", "zone": "South", "lat": 25.4, "lng": 81.8}), 409
        )
        self.assertIn("already exists", body["detail"])

    def test_maintenance_creates_exactly_one_task(self):
        facility = self.create_facility()
        before = dt.datetime.now(dt.timezone.utc)
        body = self.assertStatus(
            self.patch(f"/facilities/{facility['id']}/status", {"status": "maintenance"}), 200
        )
        after = dt.datetime.now(dt.timezone.utc)
        self.assertEqual(body["status"], "maintenance")
        self.assertIsNotNone(body["assigned_task_id"])

        detail = self.assertStatus(self.get(f"/facilities/{facility['id']}"), 200)
        self.assertEqual(len(detail["tasks"]), 1)
        task = detail["tasks"][0]
        self.assertEqual(task["id"], body["assigned_task_id"])
        self.assertEqual(task["title"], "Maintenance Required")
        self.assertEqual((task["priority"], task["sla_minutes"], task["status"]), ("high", 60, "pending"))
        self.assertEqual(task["zone"], "North")
        self.assertEqual(task["created_by"], "system")
        self.assertDueAfter(task, 60, before, after)

    def test_full_creates_cleaning_task(self):
        facility = self.create_facility(type="bin")
        before = dt.datetime.now(dt.timezone.utc)
        self.patch(f"/facilities/{facility['id']}/status", {"status": "full"})
        after = dt.datetime.now(dt.timezone.utc)
        tasks = self.assertStatus(self.get("/tasks", params={"facility_id": facility["id"]}), 200)
        self.assertEqual([(t["title"], t["priority"], t["sla_minutes"]) for t in tasks],
                         [("Empty/Clean Required", "medium", 120)])
        self.assertDueAfter(tasks[0], 120, before, after)

    def test_other_statuses_create_no_task(self):
        facility = self.create_facility()
        self.assertStatus(self.patch(f"/facilities/{facility['id']}/status", {"status": "occupied"}), 200)
        self.assertEqual(self.assertStatus(self.get("/tasks"), 200), [])

    def test_unchanged_status_is_rejected(self):
        facility = self.create_facility()
        body = self.assertStatus(
            self.patch(f"/facilities/{facility['id']}/status", {"status": "available"}), 409
        )
        self.assertEqual(body["context"]["from"], "available")

    def test_soft_delete_hides_facility(self):
        facility = self.create_facility()
        self.assertStatus(self.delete(f"/facilities/{facility['id']}"), 200)
        self.assertStatus(self.get(f"/facilities/{facility['id']}"), 404)
        self.assertEqual(self.assertStatus(self.get("/facilities"), 200), [])

    def test_search(self):
        self.create_facility(code="T7")
        self.create_facility(code="W1", type="water", zone="Ghat-3")
        found = self.assertStatus(self.get("/facilities", params={"search": "ghat"}), 200)
        self.assertEqual([f["code"] for f in found], ["W1"])


class TaskApiTestCase(ApiTestCase):

    def test_tasks_advance_one_step_at_a_time(self):
        task = self.assertStatus(self.post("/tasks", {"title": "Clean Ghat 3", "zone": "North"}), 201)
        self.assertEqual(task["next_statuses"], ["in-progress"])
        self.assertFalse(task["is_overdue"])
        url = f"/tasks/{task['id']}/status"

        self.assertStatus(self.patch(url, {"status": "completed"}), 409)
        started = self.assertStatus(self.patch(url, {"status": "in-progress"}), 200)
        self.assertIsNotNone(started["started_at"])
        done = self.assertStatus(self.patch(url, {"status": "completed"}), 200)
        self.assertIsNotNone(done["completed_at"])
        verified = self.assertStatus(self.patch(url, {"status": "verified"}), 200)
        self.assertEqual(verified["next_statuses"], [])
        self.assertStatus(self.patch(url, {"status": "pending"}), 409)

    def test_past_due_task_is_overdue(self):
        task = self.assertStatus(self.post("/tasks", {
            "title": "Late", "zone": "North", "due_at": "2024-01-01T00:00:00Z",
        }), 201)
        self.assertTrue(task["is_overdue"])
        overdue = self.assertStatus(self.get("/tasks", params={"overdue": "true"}), 200)
        self.assertEqual([t["id"] for t in overdue], [task["id"]])

    def test_team_stats_count_open_tasks(self):
        team = self.create_team()
        self.assertStatus(self.post("/tasks", {
            "title": "Sweep", "zone": "North", "assigned_to": {"type": "team", "id": team["id"]},
        }), 201)
        team = self.assertStatus(self.get(f"/teams/{team['id']}"), 200)
        self.assertEqual(team["stats"]["active_tasks"], 1)


class IssueApiTestCase(DueTimeMixin, ApiTestCase):

    def report(self, severity: str, **fields):
        payload = {
            "zone": "North",
            "category": "cleanliness",
            "severity": severity,
            "description": "Overflowing bin near Ghat 3",
        }
        payload.update(fields)
        return self.assertStatus(self.post("/issues", payload), 201)

    def test_critical_issue_gets_a_task(self):
        before = dt.datetime.now(dt.timezone.utc)
        issue = self.report("critical")
        after = dt.datetime.now(dt.timezone.utc)
        self.assertIsNotNone(issue["task_id"])
        self.assertEqual(issue["status"], "open")
        self.assertEqual(issue["sla"]["sla_minutes"], 60)
        self.assertEqual(issue["sla"]["status"], "critical")

        task = self.assertStatus(self.get(f"/tasks/{issue['task_id']}"), 200)
        self.assertEqual(task["title"], "CRITICAL: cleanliness issue")
        self.assertEqual((task["priority"], task["sla_minutes"]), ("high", 60))
        self.assertEqual(task["issue_id"], issue["id"])
        self.assertDueAfter(task, 60, before, after)

    def test_high_issue_task_is_medium_priority(self):
        before = dt.datetime.now(dt.timezone.utc)
        issue = self.report("high")
        after = dt.datetime.now(dt.timezone.utc)
        task = self.assertStatus(self.get(f"/tasks/{issue['task_id']}"), 200)
        self.assertEqual((task["priority"], task["sla_minutes"]), ("medium", 120))
        self.assertDueAfter(task, 120, before, after)

    def test_low_issue_has_no_task(self):
        issue = self.report("low")
        self.assertIsNone(issue["task_id"])
        self.assertEqual(issue["sla"]["status"], "on-track")
        self.assertEqual(self.assertStatus(self.get("/tasks"), 200), [])

    def test_anonymous_reporter_details_dropped(self):
        issue = self.report("medium", reported_by={"anonymous": True, "name": "Asha", "contact": "9876500001"})
        self.assertTrue(issue["reporter_anonymous"])
        self.assertIsNone(issue["reporter_name"])
        self.assertIsNone(issue["reporter_contact"])

    def test_lifecycle_and_triage(self):
        critical = self.report("critical")
        low = self.report("low")

        triage = self.assertStatus(self.get("/issues/triage"), 200)
        self.assertEqual([i["id"] for i in triage["critical"]], [critical["id"]])
        self.assertEqual(triage["counts"], {"critical": 1, "high": 0, "medium": 0, "low": 1})

        url = f"/issues/{low['id']}/status"
        self.assertStatus(self.patch(url, {"status": "resolved"}), 409)
        assigned = self.assertStatus(
            self.patch(url, {"status": "assigned", "assigned_to": {"type": "staff", "id": TEST_UID}}), 200
        )
        self.assertEqual((assigned["assignee_type"], assigned["assignee_id"]), ("staff", TEST_UID))
        self.patch(url, {"status": "in-progress"})
        resolved = self.assertStatus(self.patch(url, {"status": "resolved"}), 200)
        self.assertIsNotNone(resolved["resolved_at"])
        self.assertEqual(resolved["sla"]["status"], "met")

        triage = self.assertStatus(self.get("/issues/triage"), 200)
        self.assertEqual(triage["counts"]["low"], 0)

    def test_sla_breaches_start_empty(self):
        self.report("critical")
        body = self.assertStatus(self.get("/issues/sla-breaches"), 200)
        self.assertEqual(body["total"], 0)
        self.assertEqual(set(body["breached"]), {"critical", "high", "medium", "low"})


class QRCodeApiTestCase(ApiTestCase):

    def test_generate_and_regenerate(self):
        facility = self.create_facility(code="T7")
        [qr] = self.assertStatus(self.post("/qrcodes", {"facility_ids": [facility["id"]]}), 201)
        self.assertEqual(qr["short_url"], "https://seva.test/q/T7")
        self.assertEqual((qr["version"], qr["is_active"]), (1, True))
        detail = self.assertStatus(self.get(f"/facilities/{facility['id']}"), 200)
        self.assertEqual(detail["qr_id"], qr["id"])

        [second] = self.assertStatus(self.post("/qrcodes", {"facility_ids": [facility["id"]]}), 201)
        self.assertEqual(second["version"], 2)
        first = self.assertStatus(self.get(f"/qrcodes/{qr['id']}"), 200)
        self.assertFalse(first["is_active"])

    def test_unknown_facility(self):
        self.assertStatus(self.post("/qrcodes", {"facility_ids": ["missing"]}), 404)

    def test_placement_steps_and_photo(self):
        facility = self.create_facility()
        [qr] = self.assertStatus(self.post("/qrcodes", {"facility_ids": [facility["id"]]}), 201)
        url = f"/qrcodes/{qr['id']}/placement"

        printed = self.assertStatus(self.post(url, data={"status": "printed"}), 200)
        self.assertEqual((printed["placement_status"], printed["printed_by"]), ("printed", TEST_UID))

        photo = {"photo": ("ghat.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")}
        self.assertStatus(self.post(url, data={"status": "verified"}, files=photo), 400)

        placed = self.assertStatus(self.post(url, data={"status": "placed"}, files=photo), 200)
        self.assertTrue(placed["placement_photo_url"].startswith("https://storage.test/qr-placements/"))
        self.assertEqual(len(self.storage.objects), 1)

        bad = {"photo": ("notes.pdf", b"%PDF", "application/pdf")}
        self.assertStatus(self.post(url, data={"status": "placed"}, files=bad), 400)

        events = self.assertStatus(self.get(f"/qrcodes/{qr['id']}/events"), 200)
        self.assertEqual(sorted(e["action"] for e in events), ["placed", "printed"])

    def test_unknown_step(self):
        facility = self.create_facility()
        [qr] = self.assertStatus(self.post("/qrcodes", {"facility_ids": [facility["id"]]}), 201)
        self.assertStatus(self.post(f"/qrcodes/{qr['id']}/placement", data={"status": "lost"}), 422)


if __name__ == "__main__":
    unittest.main()
