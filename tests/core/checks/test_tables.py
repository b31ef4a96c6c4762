import unittest

from dbcheck.core.checks.tables import smallint_table_counts
from dbcheck.core.exceptions import QueryFailure

from fakes import FakeDatabase


def describe(first_type):
    return [
        {"Field": "id", "Type": first_type, "Null": "NO", "Key": "PRI"},
        {"Field": "name", "Type": "varchar(64)", "Null": "NO", "Key": ""},
    ]


class TestSmallintTableCounts(unittest.TestCase):
    def setUp(self):
        self.responses = {
            "SHOW TABLES": [{"Tables_in_bugzilla": t} for t in ("priority", "bugs", "components", "resolution")],
            "DESCRIBE `priority`": describe("smallint(6)"),
            "DESCRIBE `bugs`": describe("mediumint(9)"),
            "DESCRIBE `components`": describe("smallint(6)"),
            "DESCRIBE `resolution`": describe("smallint(6)"),
            "SELECT COUNT(*) FROM `priority`": [{"COUNT(*)": 5}],
            "SELECT COUNT(*) FROM `components`": [{"COUNT(*)": 120}],
            "SELECT COUNT(*) FROM `resolution`": [{"COUNT(*)": 7}],
        }

    def test_only_smallint_tables_largest_first(self):
        counts = smallint_table_counts(FakeDatabase(self.responses))
        self.assertEqual([(c.table, c.rows) for c in counts],
                         [("components", 120), ("resolution", 7), ("priority", 5)])

    def test_failed_count_is_zero(self):
        self.responses["SELECT COUNT(*) FROM `resolution`"] = RuntimeError("lock wait timeout")
        with self.assertLogs("dbcheck.core.checks.tables", level="ERROR"):
            counts = smallint_table_counts(FakeDatabase(self.responses))
        self.assertEqual(counts[-1].table, "resolution")
        self.assertEqual(counts[-1].rows, 0)

    def test_listing_failure_propagates(self):
        self.responses["SHOW TABLES"] = RuntimeError("no database selected")
        with self.assertRaises(QueryFailure):
            smallint_table_counts(FakeDatabase(self.responses))


if __name__ == "__main__":
    unittest.main()
