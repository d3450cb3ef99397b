"""CSV serialisation."""

import csv
import datetime as dt
import io
import unittest

from seva.config import TaskStatus
from seva.shared.infrastructure.exports import to_csv


class ToCsvTestCase(unittest.TestCase):

    def test_special_characters_are_quoted(self):
        text = to_csv(["name", "note"], [{"name": "Kumar, Ravi", "note": 'said "hello"\nthen left'}])
        self.assertIn('"Kumar, Ravi"', text)
        self.assertIn('"said ""hello""\nthen left"', text)

        parsed = list(csv.reader(io.StringIO(text)))
        self.assertEqual(parsed[1], ["Kumar, Ravi", 'said "hello"\nthen left'])

    def test_value_formatting(self):
        when = dt.datetime(2025, 1, 14, 6, 30, tzinfo=dt.timezone.utc)
        text = to_csv(
            ["status", "at", "zones", "missing"],
            [{"status": TaskStatus.IN_PROGRESS, "at": when, "zones": ["North", "Ghat-3"]}],
        )
        self.assertEqual(text.splitlines()[1], "in-progress,2025-01-14T06:30:00+00:00,North;Ghat-3,")

    def test_header_only(self):
        self.assertEqual(to_csv(["a", "b"], []), "a,b\n")
