# src/dbcheck/core/assembler.py
"""
Snapshot assembler — DNS resolver → cluster locator → parameter aggregator.

Steps run strictly in order and the first failure propagates with its
original type, so callers can still tell a DNS miss from a provider error.
"""

import logging
from typing import Optional

from dbcheck.config import ProbeConfig

from .base_provider import BaseControlPlane
from .deadline import Deadline
from .dns import resolve_alias
from .locator import locate
from .models import ClusterSnapshot
from .parameters import aggregate

logger = logging.getLogger(__name__)


class SnapshotAssembler:

    def __init__(self, control_plane: BaseControlPlane, config: ProbeConfig):
        self.control_plane = control_plane
        self.config = config

    def assemble(self, logical_host: Optional[str] = None, deadline: Optional[Deadline] = None) -> ClusterSnapshot:
        host = logical_host or self.config.mysql_host
        deadline = deadline or Deadline(self.config.timeout_seconds)

        alias_target = resolve_alias(self.control_plane, host, deadline)
        cluster = locate(self.control_plane, alias_target, deadline)
        instances, parameters = aggregate(self.control_plane, cluster, deadline)

        # The last call may have overrun the budget; never hand out its result.
        deadline.check("snapshot")
        snapshot = ClusterSnapshot.build(cluster, instances, parameters)
        logger.info(
            "assembled snapshot of %s: %d instance(s), %d parameter(s)",
            snapshot.identifier, len(snapshot.instances), len(snapshot.parameters),
        )
        return snapshot


def assemble(
    control_plane: BaseControlPlane,
    config: ProbeConfig,
    logical_host: Optional[str] = None,
    deadline: Optional[Deadline] = None,
) -> ClusterSnapshot:
    return SnapshotAssembler(control_plane, config).assemble(logical_host, deadline)
