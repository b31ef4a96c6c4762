"""
In-memory stand-ins for the control plane and the database, plus builders
for describe payloads shaped like the RDS / Route 53 APIs return them.
"""

from typing import Optional

from dbcheck.core.base_database import BaseDatabase
from dbcheck.core.base_provider import BaseControlPlane
from dbcheck.core.exceptions import QueryFailure
from dbcheck.core.models import ParameterPage

ENDPOINT = "prod.cluster-abc123.ap-southeast-1.rds.amazonaws.com"
HOST = "auroradb.example.com"


def make_instance(identifier="db-1", engine_version="5.7.12", instance_class="db.r4.large",
                  iam=True, group="prod-params", apply_status="in-sync"):
    return {
        "DBInstanceIdentifier": identifier,
        "EngineVersion": engine_version,
        "DBInstanceClass": instance_class,
        "IAMDatabaseAuthenticationEnabled": iam,
        "Endpoint": {"Address": f"{identifier}.abc123.ap-southeast-1.rds.amazonaws.com", "Port": 3306},
        "DBParameterGroups": [
            {"DBParameterGroupName": group, "ParameterApplyStatus": apply_status},
        ],
    }


def make_cluster(members=("db-1",), endpoint=ENDPOINT, member_status="in-sync", roles=None):
    return {
        "DBClusterIdentifier": "prod",
        "Endpoint": endpoint,
        "Status": "available",
        "DBClusterParameterGroup": "prod-cluster-params",
        "DBClusterMembers": [
            {"DBInstanceIdentifier": m, "DBClusterParameterGroupStatus": member_status}
            for m in members
        ],
        "AssociatedRoles": roles or [],
    }


def param(name, value):
    return {"ParameterName": name, "ParameterValue": value, "Source": "user"}


def paged(params: list[dict], page_size: int) -> list[list[dict]]:
    return [params[i:i + page_size] for i in range(0, len(params), page_size)] or [[]]


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeControlPlane(BaseControlPlane):
    provider_name = "fake"

    def __init__(self, zones=None, records=None, clusters=None, instances=None,
                 cluster_pages=None, db_pages=None, role_policies=None, account_id="123456789012"):
        self.zones = zones if zones is not None else [{"Id": "/hostedzone/Z1", "Name": "example.com."}]
        self.records = records if records is not None else {
            "/hostedzone/Z1": [
                {"Name": "example.com.", "Type": "SOA"},
                {"Name": HOST + ".", "Type": "CNAME", "ResourceRecords": [{"Value": ENDPOINT}]},
            ],
        }
        self.clusters = clusters if clusters is not None else [make_cluster()]
        self.instances = instances if instances is not None else {"db-1": make_instance()}
        self.cluster_pages = cluster_pages or {}
        self.db_pages = db_pages or {}
        self.role_policies = role_policies or {}
        self.account_id = account_id
        self.calls: list[tuple] = []
        self.failures: dict[str, Exception] = {}

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.failures:
            raise self.failures[name]

    def get_account_id(self) -> str:
        self._call("get_account_id")
        return self.account_id

    def list_hosted_zones(self):
        self._call("list_hosted_zones")
        return self.zones

    def list_resource_record_sets(self, zone_id):
        self._call("list_resource_record_sets", zone_id)
        return self.records.get(zone_id, [])

    def list_db_clusters(self):
        self._call("list_db_clusters")
        return self.clusters

    def describe_db_instance(self, identifier):
        self._call("describe_db_instance", identifier)
        return self.instances[identifier]

    @staticmethod
    def _page(pages, group_name, marker):
        chunks = pages.get(group_name, [[]])
        index = int(marker) if marker else 0
        next_marker = str(index + 1) if index + 1 < len(chunks) else None
        return ParameterPage(parameters=list(chunks[index]), marker=next_marker)

    def cluster_parameter_page(self, group_name, marker: Optional[str] = None):
        self._call("cluster_parameter_page", group_name, marker)
        return self._page(self.cluster_pages, group_name, marker)

    def db_parameter_page(self, group_name, marker: Optional[str] = None):
        self._call("db_parameter_page", group_name, marker)
        return self._page(self.db_pages, group_name, marker)

    def list_attached_role_policies(self, role_name):
        self._call("list_attached_role_policies", role_name)
        return self.role_policies.get(role_name, [])


class FakeDatabase(BaseDatabase):
    """
    Answers statements from a lookup table. A value may be a list of row
    dicts or an Exception to raise (wrapped in QueryFailure).
    """

    def __init__(self, responses: Optional[dict] = None):
        self.responses = responses or {}
        self.statements: list[tuple] = []
        self.closed = False

    def rows(self, statement, args=None):
        self.statements.append((statement, tuple(args) if args else None))
        response = self.responses.get(statement)
        if response is None:
            raise QueryFailure(statement, LookupError("no fake response"))
        if isinstance(response, Exception):
            raise QueryFailure(statement, response)
        return [dict(r) for r in response]

    def execute(self, statement, args=None):
        self.rows_or_none(statement, args)

    def rows_or_none(self, statement, args=None):
        self.statements.append((statement, tuple(args) if args else None))
        response = self.responses.get(statement)
        if isinstance(response, Exception):
            raise QueryFailure(statement, response)

    def ping(self):
        self.rows_or_none("ping")

    def close(self):
        self.closed = True

    def ran(self, prefix: str) -> bool:
        return any(s.startswith(prefix) for s, _ in self.statements)
