# src/dbcheck/core/models.py

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional


class SignalName(str, Enum):
    CLUSTER_INFO = "dbinfo"
    USER_GROUP_COUNT = "user_group_map_total"
    SLOW_LOG = "slowlog"
    IAM = "iam"
    IN_SYNC = "insync"


def _freeze(value: Any) -> Any:
    """Read-only copy of a describe payload: dicts become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class ClusterSnapshot:
    """
    The resolved cluster, its member instances and their merged parameters.

    Built once per assembly and never mutated. `cluster` and each entry of
    `instances` are the provider's describe payloads, read-only at every
    depth: nested records are proxies and nested lists are tuples.
    """
    cluster: Mapping[str, Any]
    instances: tuple[Mapping[str, Any], ...]
    parameters: Mapping[str, str]

    @classmethod
    def build(cls, cluster: dict, instances: list[dict], parameters: dict[str, str]) -> "ClusterSnapshot":
        return cls(
            cluster=_freeze(cluster),
            instances=tuple(_freeze(i) for i in instances),
            parameters=MappingProxyType(dict(parameters)),
        )

    @property
    def endpoint(self) -> str:
        return self.cluster.get("Endpoint", "")

    @property
    def status(self) -> str:
        return self.cluster.get("Status", "")

    @property
    def identifier(self) -> str:
        return self.cluster.get("DBClusterIdentifier", "")

    def parameter(self, name: str) -> str:
        """Current value of a parameter, empty when it was never set."""
        return self.parameters.get(name, "")

    def to_dict(self) -> dict:
        return {
            "Cluster": _thaw(self.cluster),
            "DBs": [_thaw(i) for i in self.instances],
            "Params": dict(self.parameters),
        }


@dataclass
class ParameterPage:
    """One page of a parameter listing and the cursor for the next one."""
    parameters: list[dict]
    marker: Optional[str] = None


@dataclass(frozen=True)
class PolicyResult:
    """
    Uniform output of every evaluator.

    `value` carries booleans as 1.0/0.0. `labels` carries the string facts
    of labelled signals such as the slow-log configuration.
    """
    name: str
    value: float = 0.0
    labels: Mapping[str, str] = field(default_factory=dict)
    description: str = ""

    @property
    def ok(self) -> bool:
        return self.value == 1.0

    def label_text(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.labels.items())


@dataclass
class ProcedureRecord:
    schema: str
    name: str
    definer: str = ""
    character_set_client: str = ""
    collation_connection: str = ""
    database_collation: str = ""
    sql_mode: str = ""
    source: str = ""
    modified: Optional[datetime] = None


@dataclass
class RoutineDiagnostic:
    """Collation verdict and callee ARN check for one stored routine."""
    procedure: ProcedureRecord
    correct_collation: bool
    checked_arn: bool = False
    function: str = ""
    account: str = ""
    region: str = ""
    issues: list[str] = field(default_factory=list)


@dataclass
class LambdaIntegrationReport:
    invoker: str
    role_arn: str
    routines: dict[str, list[RoutineDiagnostic]] = field(default_factory=dict)

    def incorrect_count(self, schema: str) -> int:
        return sum(1 for r in self.routines.get(schema, []) if not r.correct_collation)


@dataclass
class TableCollation:
    name: str
    collation: Optional[str]
    correct: bool


@dataclass
class SchemaCollation:
    name: str
    create_statement: str = ""
    database_collation: str = ""
    character_set_client: str = ""
    correct: bool = False
    tables: list[TableCollation] = field(default_factory=list)
    error: str = ""


@dataclass
class TableCount:
    table: str
    rows: int
