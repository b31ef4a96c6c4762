# src/dbcheck/core/checks/cluster.py
"""
Snapshot evaluators.

Each function is a pure read of a ClusterSnapshot and never raises on missing
data; absence is encoded in the result.

Evaluators in this module:
  - check_in_sync      (insync)  : every member and parameter group applied?
  - check_iam_enabled  (iam)     : IAM database authentication on every instance?
  - check_slow_log     (slowlog) : slow query log configuration, verbatim
  - engine_version / instance_class : first non-empty value across instances
"""

import logging

from dbcheck.config import IN_SYNC_STATUS
from dbcheck.core.models import ClusterSnapshot, PolicyResult, SignalName

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 1. Parameter group synchronisation
# ---------------------------------------------------------------------------

def check_in_sync(snapshot: ClusterSnapshot, applied: str = IN_SYNC_STATUS) -> PolicyResult:
    """
    In sync only if every cluster member's cluster-parameter-group status and
    every instance parameter group's apply status equal `applied`.

    The first out-of-sync entity ends the scan.
    """
    result = PolicyResult(
        name=SignalName.IN_SYNC.value,
        value=0.0,
        description="shows whether we are in-sync with the parameter groups",
    )

    for member in snapshot.cluster.get("DBClusterMembers") or []:
        if member.get("DBClusterParameterGroupStatus") != applied:
            logger.warning("not in-sync: db=%s", member.get("DBInstanceIdentifier"))
            return result

    for db in snapshot.instances:
        for group in db.get("DBParameterGroups") or []:
            if group.get("ParameterApplyStatus") != applied:
                logger.warning(
                    "not in-sync: db=%s paramgroup=%s",
                    db.get("DBInstanceIdentifier"), group.get("DBParameterGroupName"),
                )
                return result

    return PolicyResult(name=result.name, value=1.0, description=result.description)


# ---------------------------------------------------------------------------
# 2. IAM database authentication
# ---------------------------------------------------------------------------

def check_iam_enabled(snapshot: ClusterSnapshot) -> PolicyResult:
    """True only when every instance has IAM database authentication enabled."""
    enabled = bool(snapshot.instances)
    for db in snapshot.instances:
        address = (db.get("Endpoint") or {}).get("Address", db.get("DBInstanceIdentifier"))
        if db.get("IAMDatabaseAuthenticationEnabled"):
            logger.info("IAM ENABLED: endpoint=%s", address)
        else:
            logger.warning("IAM NOT enabled: endpoint=%s", address)
            enabled = False

    return PolicyResult(
        name=SignalName.IAM.value,
        value=1.0 if enabled else 0.0,
        description="shows whether IAM auth is enabled or not.",
    )


# ---------------------------------------------------------------------------
# 3. Slow query log
# ---------------------------------------------------------------------------

SLOW_LOG_PARAMETERS = {
    "enabled": "slow_query_log",
    "log_output": "log_output",
    "log_queries_not_using_indexes": "log_queries_not_using_indexes",
}


def check_slow_log(snapshot: ClusterSnapshot) -> PolicyResult:
    labels = {label: snapshot.parameter(param) for label, param in SLOW_LOG_PARAMETERS.items()}
    return PolicyResult(
        name=SignalName.SLOW_LOG.value,
        value=1.0,
        labels=labels,
        description="A metric with a constant '1' value labeled with slow log lint.",
    )


# ---------------------------------------------------------------------------
# 4. Engine facts (first match)
# ---------------------------------------------------------------------------

def _first_non_empty(snapshot: ClusterSnapshot, key: str) -> str:
    for db in snapshot.instances:
        value = db.get(key)
        if value:
            return value
    return ""


def engine_version(snapshot: ClusterSnapshot) -> str:
    return _first_non_empty(snapshot, "EngineVersion")


def instance_class(snapshot: ClusterSnapshot) -> str:
    return _first_non_empty(snapshot, "DBInstanceClass")


def divergent_fields(snapshot: ClusterSnapshot, keys=("EngineVersion", "DBInstanceClass")) -> dict[str, list[str]]:
    """
    Fields whose non-empty values differ between member instances.

    engine_version() and instance_class() still report the first match; this
    only makes a heterogeneous cluster visible.
    """
    divergent = {}
    for key in keys:
        values = sorted({db.get(key) for db in snapshot.instances if db.get(key)})
        if len(values) > 1:
            logger.warning("instances disagree on %s: %s", key, ", ".join(values))
            divergent[key] = values
    return divergent
