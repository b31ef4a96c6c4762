import json
import logging
import unittest
from datetime import datetime, timezone

from dbcheck.core.models import ClusterSnapshot, PolicyResult, TableCount
from dbcheck.utils.formatters import (
    JsonLogFormatter,
    format_as_json,
    format_results_text,
    format_snapshot,
    format_table_counts,
)

from fakes import make_cluster, make_instance


class TestJsonFormatting(unittest.TestCase):
    def test_snapshot_with_datetimes_and_divergence(self):
        cluster = make_cluster()
        cluster["ClusterCreateTime"] = datetime(2019, 5, 1, 8, 30, tzinfo=timezone.utc)
        snapshot = ClusterSnapshot.build(cluster, [make_instance()], {"log_output": "FILE"})

        data = json.loads(format_snapshot(snapshot, {"DBInstanceClass": ["db.r4.large", "db.r5.large"]}))

        self.assertEqual(data["Cluster"]["ClusterCreateTime"], "2019-05-01T08:30:00+00:00")
        self.assertEqual(data["Params"], {"log_output": "FILE"})
        self.assertIn("Divergent", data)

    def test_no_divergence_key_when_uniform(self):
        snapshot = ClusterSnapshot.build(make_cluster(), [make_instance()], {})
        self.assertNotIn("Divergent", json.loads(format_snapshot(snapshot, {})))

    def test_bytes_and_dataclasses(self):
        self.assertEqual(json.loads(format_as_json({"v": b"Barracuda"})), {"v": "Barracuda"})
        self.assertEqual(json.loads(format_as_json(TableCount("priority", 5))), {"table": "priority", "rows": 5})

    def test_table_counts_as_key_value(self):
        data = json.loads(format_table_counts([TableCount("components", 120), TableCount("priority", 5)]))
        self.assertEqual(data, [{"Key": "components", "Value": 120}, {"Key": "priority", "Value": 5}])


class TestTextFormatting(unittest.TestCase):
    def test_results_lines(self):
        text = format_results_text({
            "iam": PolicyResult(name="iam", value=1.0),
            "slowlog": PolicyResult(name="slowlog", labels={"enabled": "1"}),
        })
        lines = text.splitlines()
        self.assertTrue(lines[0].startswith("iam"))
        self.assertTrue(lines[0].rstrip().endswith("1"))
        self.assertIn("enabled=1", lines[1])


class TestJsonLogFormatter(unittest.TestCase):
    def test_one_object_per_record(self):
        record = logging.LogRecord("dbcheck.core.dns", logging.WARNING, __file__, 1, "zone %s", ("Z1",), None)
        entry = json.loads(JsonLogFormatter().format(record))
        self.assertEqual(entry["level"], "warning")
        self.assertEqual(entry["logger"], "dbcheck.core.dns")
        self.assertEqual(entry["message"], "zone Z1")


if __name__ == "__main__":
    unittest.main()
