"""Staff field checks, phone normalization and spreadsheet parsing."""

import io
import unittest

import openpyxl

from seva.core.exceptions import ValidationException
from seva.site.application import ContactRequest
from seva.workforce.application.services import BulkUploadService
from seva.workforce.domain import normalize_phone, validate_bulk_row, validate_staff_fields
from seva.workforce.infrastructure.spreadsheets import read_csv, read_spreadsheet, read_xlsx

from pydantic import ValidationError


class PhoneTestCase(unittest.TestCase):

    def test_local_mobile_gets_country_code(self):
        self.assertEqual(normalize_phone("98765 43210"), "+919876543210")
        self.assertEqual(normalize_phone("98765-43210"), "+919876543210")

    def test_e164_kept(self):
        self.assertEqual(normalize_phone("+44 7700 900123"), "+447700900123")

    def test_blank(self):
        self.assertEqual(normalize_phone(None), "")
        self.assertEqual(normalize_phone("   "), "")


class StaffFieldsTestCase(unittest.TestCase):

    def test_valid(self):
        errors = validate_staff_fields(
            name="Sita Devi", phone="+919876543210", email="sita@example.org", role="staff", shift="green"
        )
        self.assertEqual(errors, {})

    def test_every_failure_reported(self):
        errors = validate_staff_fields(name="S", phone="12345", email="sita@", role="janitor", shift="blue")
        self.assertEqual(set(errors), {"name", "phone", "email", "role", "shift"})

    def test_email_typo_hint(self):
        errors = validate_staff_fields(name="Sita", phone="+919876543210", email="sita@gmail.con", role="staff")
        self.assertEqual(errors["email"], "Did you mean gmail.com?")

    def test_partial_skips_missing_fields(self):
        self.assertEqual(validate_staff_fields(shift="red", partial=True), {})


class BulkRowTestCase(unittest.TestCase):

    def test_phone_errors_named_mobile(self):
        errors = validate_bulk_row({"name": "Amit", "mobile": "123", "role": "staff"}, 4)
        self.assertEqual(len(errors), 1)
        self.assertEqual((errors[0].row, errors[0].field), (4, "mobile"))

    def test_role_is_case_insensitive(self):
        self.assertEqual(validate_bulk_row({"name": "Amit", "mobile": "9876543210", "role": "Supervisor"}, 1), [])


class MappingTestCase(unittest.TestCase):

    def test_headers_matched_by_name(self):
        mapping = BulkUploadService.resolve_mapping(["Name", "Mobile", "Role", "Email"], None)
        self.assertEqual(mapping, {"name": "Name", "mobile": "Mobile", "role": "Role", "email": "Email"})

    def test_explicit_mapping_wins(self):
        mapping = BulkUploadService.resolve_mapping(["Full Name", "Phone No", "Role"], {
            "name": "Full Name", "mobile": "Phone No",
        })
        self.assertEqual(mapping["mobile"], "Phone No")

    def test_missing_required_field(self):
        with self.assertRaises(ValidationException) as ctx:
            BulkUploadService.resolve_mapping(["Name", "Role"], None)
        self.assertIn("mobile", ctx.exception.errors)

    def test_file_checks(self):
        self.assertEqual(BulkUploadService.check_file("Roster.XLSX", 100), ".xlsx")
        with self.assertRaises(ValidationException):
            BulkUploadService.check_file("roster.pdf", 100)
        with self.assertRaises(ValidationException):
            BulkUploadService.check_file("roster.csv", 50 * 1024 * 1024)


class SpreadsheetTestCase(unittest.TestCase):

    def test_csv_with_bom_and_blank_lines(self):
        content = b"\xef\xbb\xbfname,mobile,role\nAmit,9876543210,staff\n\n,,\nSita,9876500000,supervisor\n"
        headers, rows = read_csv(content)
        self.assertEqual(headers, ["name", "mobile", "role"])
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[1]["name"], "Sita")

    def test_header_only_rejected(self):
        with self.assertRaises(ValidationException):
            read_csv(b"name,mobile,role\n")

    def test_xlsx_numbers_lose_decimal(self):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["name", "mobile", "role"])
        ws.append(["Amit", 9876543210, "staff"])
        buffer = io.BytesIO()
        wb.save(buffer)

        headers, rows = read_spreadsheet("roster.xlsx", buffer.getvalue())
        self.assertEqual(headers, ["name", "mobile", "role"])
        self.assertEqual(rows[0]["mobile"], "9876543210")

    def test_corrupt_xlsx(self):
        with self.assertRaises(ValidationException):
            read_xlsx(b"not a workbook")


class ContactRequestTestCase(unittest.TestCase):

    def test_valid_request_is_trimmed(self):
        request = ContactRequest(
            name="  Asha Verma ", organization="Nagar Nigam", email=" asha@example.org ", phone="+919876543210"
        )
        self.assertEqual(request.name, "Asha Verma")
        self.assertEqual(request.email, "asha@example.org")

    def test_invalid_email(self):
        with self.assertRaises(ValidationError):
            ContactRequest(name="Asha", organization="NGO", email="asha-at-example", phone="+919876543210")

    def test_blank_organization(self):
        with self.assertRaises(ValidationError):
            ContactRequest(name="Asha", organization="   ", email="asha@example.org", phone="+919876543210")
