import unittest

from dbcheck.core.dns import record_target, resolve_alias, select_hosted_zone
from dbcheck.core.exceptions import ConfigurationError, NotFound

from fakes import ENDPOINT, HOST, FakeControlPlane


class TestSelectHostedZone(unittest.TestCase):
    def test_longest_suffix_wins(self):
        zones = [
            {"Id": "Z-com", "Name": "com."},
            {"Id": "Z-dev", "Name": "dev.example.com."},
            {"Id": "Z-example", "Name": "example.com."},
        ]
        self.assertEqual(select_hosted_zone(zones, "auroradb.dev.example.com")["Id"], "Z-dev")
        self.assertEqual(select_hosted_zone(zones, "auroradb.example.com")["Id"], "Z-example")

    def test_suffix_must_end_on_a_label(self):
        zones = [{"Id": "Z1", "Name": "ample.com."}]
        with self.assertRaises(NotFound):
            select_hosted_zone(zones, "auroradb.example.com")

    def test_no_zone_is_not_found(self):
        with self.assertRaises(NotFound):
            select_hosted_zone([{"Id": "Z1", "Name": "other.org."}], HOST)

    def test_tie_is_a_configuration_error(self):
        zones = [
            {"Id": "Z-public", "Name": "example.com."},
            {"Id": "Z-private", "Name": "example.com."},
        ]
        with self.assertRaises(ConfigurationError):
            select_hosted_zone(zones, HOST)


class TestRecordTarget(unittest.TestCase):
    def test_alias_target_preferred_and_dot_stripped(self):
        record = {
            "Name": HOST + ".",
            "AliasTarget": {"DNSName": ENDPOINT + "."},
            "ResourceRecords": [{"Value": "ignored.example.com"}],
        }
        self.assertEqual(record_target(record), ENDPOINT)

    def test_first_literal_value(self):
        record = {"ResourceRecords": [{"Value": ENDPOINT + "."}, {"Value": "second"}]}
        self.assertEqual(record_target(record), ENDPOINT)

    def test_empty_record(self):
        self.assertIsNone(record_target({"Name": HOST + "."}))


class TestResolveAlias(unittest.TestCase):
    def test_resolves_cname(self):
        self.assertEqual(resolve_alias(FakeControlPlane(), HOST), ENDPOINT)

    def test_record_name_needs_trailing_dot_match(self):
        cp = FakeControlPlane(records={"/hostedzone/Z1": [
            {"Name": HOST, "ResourceRecords": [{"Value": ENDPOINT}]},
        ]})
        with self.assertRaises(NotFound):
            resolve_alias(cp, HOST)

    def test_missing_record_is_not_found(self):
        cp = FakeControlPlane(records={"/hostedzone/Z1": []})
        with self.assertRaises(NotFound):
            resolve_alias(cp, HOST)


if __name__ == "__main__":
    unittest.main()
