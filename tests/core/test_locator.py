import unittest

from dbcheck.core.exceptions import NotFound
from dbcheck.core.locator import locate

from fakes import ENDPOINT, FakeControlPlane, make_cluster


class TestLocate(unittest.TestCase):
    def setUp(self):
        other = make_cluster(endpoint="staging.cluster-zzz.ap-southeast-1.rds.amazonaws.com")
        other["DBClusterIdentifier"] = "staging"
        self.cp = FakeControlPlane(clusters=[other, make_cluster()])

    def test_exact_endpoint_match(self):
        self.assertEqual(locate(self.cp, ENDPOINT)["DBClusterIdentifier"], "prod")

    def test_case_differences_do_not_match(self):
        with self.assertRaises(NotFound):
            locate(self.cp, ENDPOINT.upper())

    def test_trailing_dot_does_not_match(self):
        with self.assertRaises(NotFound):
            locate(self.cp, ENDPOINT + ".")

    def test_suffix_does_not_match(self):
        with self.assertRaises(NotFound):
            locate(self.cp, "cluster-abc123.ap-southeast-1.rds.amazonaws.com")


if __name__ == "__main__":
    unittest.main()
