"""Staff roster, bulk upload, teams, shifts and zone coverage over HTTP."""

import datetime as dt
import json
import unittest

from tests.support import TEST_UID, ApiTestCase


class StaffApiTestCase(ApiTestCase):

    def test_create_normalizes_phone_and_audits(self):
        staff = self.create_staff(phone="98765 43210", zone="North")
        self.assertEqual(staff["phone"], "+919876543210")
        self.assertEqual((staff["role"], staff["shift"]), ("staff", "red"))
        self.assertTrue(staff["is_active"])
        self.assertEqual(staff["created_by"], TEST_UID)

        audit = self.assertStatus(self.get(f"/staff/{staff['id']}/audit"), 200)
        self.assertEqual([a["action"] for a in audit], ["create"])

    def test_invalid_fields_reported_together(self):
        body = self.assertStatus(self.post("/staff", {"name": "R", "phone": "123", "role": "janitor"}), 400)
        self.assertEqual(set(body["errors"]), {"name", "phone", "role"})

    def test_update_records_changed_fields_only(self):
        staff = self.create_staff()
        updated = self.assertStatus(
            self.patch(f"/staff/{staff['id']}", {"name": "Ravi K.", "shift": "red"}), 200
        )
        self.assertEqual(updated["name"], "Ravi K.")

        audit = self.assertStatus(self.get(f"/staff/{staff['id']}/audit"), 200)
        self.assertEqual(audit[0]["action"], "update")
        self.assertEqual(audit[0]["changes"], {"name": {"from": "Ravi Kumar", "to": "Ravi K."}})

    def test_required_fields_cannot_be_cleared(self):
        staff = self.create_staff(zone="North")
        body = self.assertStatus(self.patch(f"/staff/{staff['id']}", {"role": None}), 400)
        self.assertEqual(set(body["errors"]), {"role"})

        body = self.assertStatus(
            self.patch(f"/staff/{staff['id']}", {"shift": None, "on_duty": None, "email": None}), 400
        )
        self.assertEqual(set(body["errors"]), {"shift", "on_duty"})

        unchanged = self.assertStatus(self.get(f"/staff/{staff['id']}"), 200)
        self.assertEqual((unchanged["role"], unchanged["shift"]), ("staff", "red"))

        cleared = self.assertStatus(self.patch(f"/staff/{staff['id']}", {"zone": None}), 200)
        self.assertIsNone(cleared["zone"])

    def test_deactivate_is_soft(self):
        staff = self.create_staff(on_duty=True)
        body = self.assertStatus(self.post(f"/staff/{staff['id']}/deactivate"), 200)
        self.assertFalse(body["is_active"])
        self.assertFalse(body["on_duty"])

        # Still readable and listed when asked for inactive staff.
        self.assertStatus(self.get(f"/staff/{staff['id']}"), 200)
        page = self.assertStatus(self.get("/staff", params={"is_active": "false"}), 200)
        self.assertEqual([s["id"] for s in page["items"]], [staff["id"]])

        audit = self.assertStatus(self.get(f"/staff/{staff['id']}/audit"), 200)
        self.assertEqual({a["action"] for a in audit}, {"create", "deactivate"})

    def test_search_and_pagination(self):
        self.create_staff(name="Amit Singh", phone="9876500001")
        self.create_staff(name="Sita Devi", phone="9876500002", email="sita@example.org")
        self.create_staff(name="Mohan Lal", phone="9876500003")

        page = self.assertStatus(self.get("/staff", params={"search": "sita"}), 200)
        self.assertEqual([s["name"] for s in page["items"]], ["Sita Devi"])

        page = self.assertStatus(self.get("/staff", params={"page": 2, "page_size": 2}), 200)
        self.assertEqual((page["total"], page["pages"], len(page["items"])), (3, 2, 1))

    def test_empty_roster_has_one_page(self):
        page = self.assertStatus(self.get("/staff"), 200)
        self.assertEqual((page["total"], page["page"], page["pages"], page["items"]), (0, 1, 1, []))

    def test_unknown_staff(self):
        body = self.assertStatus(self.get("/staff/does-not-exist"), 404)
        self.assertIn("correlation_id", body)

    def test_export_csv(self):
        self.create_staff(name="Kumar, Ravi")
        response = self.get("/staff/export.csv")
        self.assertStatus(response, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/csv"))
        lines = response.text.splitlines()
        self.assertTrue(lines[0].startswith("id,name,phone"))
        self.assertIn('"Kumar, Ravi"', lines[1])


class BulkUploadApiTestCase(ApiTestCase):

    ROSTER = (
        "name,Phone No,role,team_name\n"
        "Amit Singh,9876500001,staff,Ghat Sweepers\n"
        "Sita Devi,9876500001,supervisor,\n"
        "Bad Row,123,staff,\n"
        "Mohan Lal,9876500002,Staff,Nowhere\n"
    )

    def upload(self, content: str, mapping=None, file_name: str = "roster.csv"):
        data = {"column_mapping": json.dumps(mapping)} if mapping else {}
        return self.post(
            "/staff/bulk-upload",
            files={"file": (file_name, content.encode("utf-8"), "text/csv")},
            data=data,
        )

    def test_valid_rows_imported_and_errors_reported(self):
        team = self.create_team()
        body = self.assertStatus(self.upload(self.ROSTER, {"mobile": "Phone No"}), 201)

        self.assertEqual(body["status"], "completed")
        self.assertEqual((body["total_rows"], body["valid_rows"], body["error_rows"]), (4, 1, 3))
        self.assertEqual(body["success_count"], 1)
        errors = {(e["row"], e["field"]) for e in body["errors"]}
        self.assertEqual(errors, {(2, "mobile"), (3, "mobile"), (4, "team_name")})
        duplicate = next(e for e in body["errors"] if e["row"] == 2)
        self.assertEqual(duplicate["error"], "Duplicate mobile number (same as row 1)")

        [path] = self.storage.objects
        self.assertTrue(path.startswith("bulk-uploads/"))
        self.assertTrue(path.endswith("-roster.csv"))
        self.assertEqual(body["file_url"], f"https://storage.test/{path}")

        page = self.assertStatus(self.get("/staff"), 200)
        self.assertEqual([s["name"] for s in page["items"]], ["Amit Singh"])
        imported = page["items"][0]
        self.assertEqual(imported["team_ids"], [team["id"]])

        team = self.assertStatus(self.get(f"/teams/{team['id']}"), 200)
        self.assertEqual(team["member_ids"], [imported["id"]])

        errors_csv = self.get(f"/staff/bulk-uploads/{body['id']}/errors.csv")
        self.assertStatus(errors_csv, 200)
        self.assertEqual(errors_csv.text.splitlines()[0], "row,field,error")
        self.assertEqual(len(errors_csv.text.splitlines()), 4)

    def test_no_valid_rows_fails(self):
        body = self.assertStatus(self.upload("name,mobile,role\nX,1,boss\n"), 201)
        self.assertEqual(body["status"], "failed")
        self.assertEqual(body["success_count"], 0)

    def test_unmapped_required_column(self):
        body = self.assertStatus(self.upload("name,Phone No,role\nAmit,9876500001,staff\n"), 400)
        self.assertIn("mobile", body["errors"])
        self.assertEqual(self.storage.objects, {})

    def test_unsupported_file_type(self):
        self.assertStatus(self.upload("name,mobile,role\n", file_name="roster.pdf"), 400)


class TeamApiTestCase(ApiTestCase):

    def test_membership_and_stats(self):
        team = self.create_team(capacity=4)
        self.assertEqual(team["stats"]["total_members"], 0)
        staff = self.create_staff(on_duty=True)

        team = self.assertStatus(self.post(f"/teams/{team['id']}/members", {"staff_id": staff["id"]}), 200)
        self.assertEqual(team["member_ids"], [staff["id"]])
        self.assertEqual(team["stats"]["total_members"], 1)
        self.assertEqual(team["stats"]["active_members"], 1)
        self.assertEqual(team["stats"]["coverage_percent"], 25)

        staff = self.assertStatus(self.get(f"/staff/{staff['id']}"), 200)
        self.assertEqual(staff["team_ids"], [team["id"]])

        team = self.assertStatus(self.delete(f"/teams/{team['id']}/members/{staff['id']}"), 200)
        self.assertEqual(team["member_ids"], [])

    def test_zones_cannot_be_cleared(self):
        team = self.create_team(zones=["North"])
        body = self.assertStatus(self.patch(f"/teams/{team['id']}", {"zones": None}), 400)
        self.assertEqual(set(body["errors"]), {"zones"})
        self.assertEqual(self.assertStatus(self.get(f"/teams/{team['id']}"), 200)["zones"], ["North"])

    def test_delete_is_soft(self):
        team = self.create_team()
        body = self.assertStatus(self.delete(f"/teams/{team['id']}"), 200)
        self.assertFalse(body["is_active"])
        self.assertIsNotNone(body["deleted_at"])
        self.assertStatus(self.get(f"/teams/{team['id']}"), 404)
        self.assertEqual(self.assertStatus(self.get("/teams"), 200), [])
        self.assertEqual(len(self.assertStatus(self.get("/teams", params={"include_inactive": "true"}), 200)), 1)

    def test_team_notify(self):
        team = self.create_team()
        staff = self.create_staff()
        self.post(f"/teams/{team['id']}/members", {"staff_id": staff["id"]})

        body = self.assertStatus(self.post(f"/teams/{team['id']}/notify", {"message": "Report to Ghat 3"}), 201)
        self.assertEqual(body["recipients"], [staff["phone"]])
        self.assertEqual(body["message"], "[Ghat Sweepers] Report to Ghat 3")
        self.assertEqual(body["status"], "pending")


class CoverageApiTestCase(ApiTestCase):

    def shift_payload(self, **fields):
        payload = {
            "zone": "North",
            "name": "Morning",
            "color": "red",
            "start_time": "06:00",
            "end_time": "14:00",
            "date": dt.datetime.now(dt.timezone.utc).date().isoformat(),
            "required_staff": 3,
        }
        payload.update(fields)
        return payload

    def test_twelve_thousand_people_need_fifteen_hundred_staff(self):
        self.assertStatus(self.post("/headcounts", {"zone": "North", "count": 12000}), 201)
        body = self.assertStatus(self.get("/coverage/North"), 200)
        self.assertEqual(body["headcount"], 12000)
        self.assertEqual(body["required_staff"], 1500)
        self.assertEqual(body["assigned_staff"], 0)
        self.assertEqual(body["delta"], -1500)
        self.assertEqual(body["status"], "understaffed")

    def test_latest_headcount_and_assigned_shifts(self):
        staff = [self.create_staff(name=f"Staff {i}", phone=f"987650000{i}") for i in range(3)]
        self.assertStatus(self.post("/headcounts", {"zone": "North", "count": 500}), 201)
        self.assertStatus(self.post("/headcounts", {"zone": "North", "count": 20}), 201)
        self.assertStatus(
            self.post("/shifts", self.shift_payload(assigned_staff_ids=[s["id"] for s in staff])), 201
        )

        body = self.assertStatus(self.get("/coverage/North"), 200)
        self.assertEqual((body["headcount"], body["required_staff"], body["assigned_staff"]), (20, 3, 3))
        self.assertEqual(body["status"], "adequate")

    def test_zone_without_headcount(self):
        self.assertStatus(self.get("/coverage/Nowhere"), 404)

    def test_inactive_staff_cannot_be_assigned(self):
        staff = self.create_staff()
        self.post(f"/staff/{staff['id']}/deactivate")
        body = self.assertStatus(self.post("/shifts", self.shift_payload(assigned_staff_ids=[staff["id"]])), 400)
        self.assertIn("staff_ids", body["errors"])

    def test_bad_time_format(self):
        self.assertStatus(self.post("/shifts", self.shift_payload(start_time="6am")), 422)

    def test_auto_assign_fills_up_to_required(self):
        for i in range(4):
            self.create_staff(name=f"Staff {i}", phone=f"987650000{i}")
        shift = self.assertStatus(self.post("/shifts", self.shift_payload(required_staff=3)), 201)

        shift = self.assertStatus(self.post(f"/shifts/{shift['id']}/auto-assign"), 200)
        self.assertEqual(len(shift["assigned_staff_ids"]), 3)

        again = self.assertStatus(self.post(f"/shifts/{shift['id']}/auto-assign"), 200)
        self.assertEqual(again["assigned_staff_ids"], shift["assigned_staff_ids"])


if __name__ == "__main__":
    unittest.main()
