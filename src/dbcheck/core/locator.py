# src/dbcheck/core/locator.py

import logging
from typing import Optional

from .base_provider import BaseControlPlane
from .deadline import Deadline
from .exceptions import NotFound

logger = logging.getLogger(__name__)


def locate(
    control_plane: BaseControlPlane,
    alias_target: str,
    deadline: Optional[Deadline] = None,
) -> dict:
    """
    Return the cluster whose published endpoint equals `alias_target`.

    The comparison is exact string equality, so a differently cased or
    dot-terminated target does not match.
    """
    deadline = deadline or Deadline.unbounded()
    deadline.check("describe_db_clusters")

    clusters = control_plane.list_db_clusters()
    logger.debug("comparing %d cluster(s) against %s", len(clusters), alias_target)
    for cluster in clusters:
        if cluster.get("Endpoint") == alias_target:
            logger.info("located cluster %s", cluster.get("DBClusterIdentifier"))
            return cluster

    raise NotFound(f"no cluster info found for {alias_target}")
