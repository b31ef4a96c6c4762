# src/dbcheck/core/evaluation.py
"""
Runs every policy evaluator against one snapshot.

Evaluators are independent reads; a query failure inside one of them only
empties that signal. The returned mapping is keyed by signal name in a
fixed order: dbinfo, user_group_map_total, slowlog, iam, insync.
"""

import logging
from typing import Optional

from dbcheck.config import ProbeConfig
from dbcheck.core.base_database import BaseDatabase
from dbcheck.core.checks.cluster import (
    check_iam_enabled,
    check_in_sync,
    check_slow_log,
    divergent_fields,
    engine_version,
    instance_class,
)
from dbcheck.core.checks.database import (
    aurora_version,
    innodb_file_format,
    schema_version,
    user_group_count,
)
from dbcheck.core.deadline import Deadline
from dbcheck.core.models import ClusterSnapshot, PolicyResult, SignalName

logger = logging.getLogger(__name__)


def cluster_info(snapshot: ClusterSnapshot, db: Optional[BaseDatabase], config: ProbeConfig) -> PolicyResult:
    """Constant '1' gauge labelled with the versions and identity of the cluster."""
    # Warns about each field the members disagree on; the labels below keep
    # the first-match values.
    divergent_fields(snapshot)
    labels = {
        "schemaversion": schema_version(db, config.schema_version_table) if db else "",
        "auroraversion": aurora_version(db) if db else "",
        "commit": config.commit,
        "engineversion": engine_version(snapshot),
        "instanceclass": instance_class(snapshot),
        "endpoint": snapshot.endpoint,
        "innodb_file_format": innodb_file_format(db) if db else "",
        "status": snapshot.status,
    }
    return PolicyResult(
        name=SignalName.CLUSTER_INFO.value,
        value=1.0,
        labels=labels,
        description="A metric with a constant '1' value labeled by the schema version, Aurora version and commit.",
    )


def _user_groups(snapshot: ClusterSnapshot, db: Optional[BaseDatabase], config: ProbeConfig) -> PolicyResult:
    if db is None:
        return PolicyResult(
            name=SignalName.USER_GROUP_COUNT.value,
            description="shows the number of rows in the user_group_map table.",
        )
    return user_group_count(db, config.user_group_table)


EVALUATORS = [
    (SignalName.CLUSTER_INFO.value, cluster_info),
    (SignalName.USER_GROUP_COUNT.value, _user_groups),
    (SignalName.SLOW_LOG.value, lambda snapshot, db, config: check_slow_log(snapshot)),
    (SignalName.IAM.value, lambda snapshot, db, config: check_iam_enabled(snapshot)),
    (SignalName.IN_SYNC.value, lambda snapshot, db, config: check_in_sync(snapshot, config.in_sync_status)),
]


def evaluate_all(
    snapshot: ClusterSnapshot,
    db: Optional[BaseDatabase],
    config: ProbeConfig,
    deadline: Optional[Deadline] = None,
) -> dict[str, PolicyResult]:
    """
    Compute every signal. Without a database handle the live-query labels
    are empty and the user group count is zero.

    The deadline is checked before each evaluator; once it has passed the
    whole evaluation is cancelled rather than returning a partial set.
    """
    deadline = deadline or Deadline.unbounded()
    results = {}
    for name, evaluate in EVALUATORS:
        deadline.check(f"evaluating {name}")
        r = evaluate(snapshot, db, config)
        logger.debug("%s = %s %s", r.name, r.value, r.label_text())
        results[r.name] = r
    return results
