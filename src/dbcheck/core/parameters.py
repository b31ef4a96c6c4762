# src/dbcheck/core/parameters.py
"""
Parameter aggregator — collects the member instances of a cluster and
merges the user-modified parameters of the cluster parameter group and the
canonical instance parameter group into one flat mapping.

Pagination is modelled as ParameterPages, a lazy, finite, non-restartable
stream of pages driven by the provider's marker.
"""

import logging
from typing import Callable, Iterable, Iterator, Optional

from .base_provider import BaseControlPlane
from .deadline import Deadline
from .exceptions import NotFound
from .models import ParameterPage

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str, Optional[str]], ParameterPage]


class ParameterPages(Iterator[ParameterPage]):
    """
    Cursor-driven stream over the pages of one parameter group listing.

    Each next() issues one provider call. Once the provider stops returning a
    marker the stream is exhausted for good; iterating it again yields nothing.
    """

    def __init__(self, fetch: PageFetcher, group_name: str, deadline: Optional[Deadline] = None):
        self._fetch = fetch
        self._group_name = group_name
        self._deadline = deadline or Deadline.unbounded()
        self._marker: Optional[str] = None
        self._exhausted = False
        self.pages_read = 0

    def __iter__(self) -> "ParameterPages":
        return self

    def __next__(self) -> ParameterPage:
        if self._exhausted:
            raise StopIteration
        self._deadline.check(f"parameter page {self.pages_read + 1} of {self._group_name}")

        page = self._fetch(self._group_name, self._marker)
        self.pages_read += 1
        self._marker = page.marker
        if not page.marker:
            self._exhausted = True
        return page


def merge_parameters(pages: Iterable[ParameterPage], into: dict[str, str]) -> dict[str, str]:
    """
    Drain `pages` into `into`. Later entries for the same name overwrite
    earlier ones; parameters the provider reports without a value are skipped.
    """
    for page in pages:
        for param in page.parameters:
            name = param.get("ParameterName")
            value = param.get("ParameterValue")
            if not name or value is None:
                continue
            into[name] = value
    return into


def canonical_parameter_group(instances: list[dict]) -> Optional[str]:
    """
    Name of the first instance's first parameter group.

    Instances referencing a different group are logged; the first-seen name
    stays canonical.
    """
    canonical = None
    for db in instances:
        groups = db.get("DBParameterGroups") or []
        if not groups:
            logger.warning("instance %s has no parameter group", db.get("DBInstanceIdentifier"))
            continue
        name = groups[0].get("DBParameterGroupName")
        if canonical is None:
            canonical = name
        elif name != canonical:
            logger.warning(
                "Differing parameter groups! %r != %r (instance %s)",
                canonical, name, db.get("DBInstanceIdentifier"),
            )
    return canonical


def aggregate(
    control_plane: BaseControlPlane,
    cluster: dict,
    deadline: Optional[Deadline] = None,
) -> tuple[list[dict], dict[str, str]]:
    """
    Describe every member of `cluster` and merge its parameters.

    Returns (instances, parameters). Any provider error propagates unchanged
    so nothing partial reaches the caller.
    """
    deadline = deadline or Deadline.unbounded()
    cluster_id = cluster.get("DBClusterIdentifier", "unknown")

    members = cluster.get("DBClusterMembers") or []
    logger.info("describing %d instance(s) of %s", len(members), cluster_id)
    instances = []
    for member in members:
        identifier = member["DBInstanceIdentifier"]
        deadline.check(f"describe_db_instances {identifier}")
        instances.append(control_plane.describe_db_instance(identifier))

    if not instances:
        raise NotFound(f"cluster {cluster_id} has no member instances")

    parameters: dict[str, str] = {}
    cluster_group = cluster.get("DBClusterParameterGroup")
    if cluster_group:
        logger.info("recording cluster parameter group %s", cluster_group)
        merge_parameters(
            ParameterPages(control_plane.cluster_parameter_page, cluster_group, deadline),
            parameters,
        )

    group_name = canonical_parameter_group(instances)
    if group_name:
        logger.info("recording instance parameter group %s", group_name)
        merge_parameters(
            ParameterPages(control_plane.db_parameter_page, group_name, deadline),
            parameters,
        )

    logger.debug("merged %d parameter(s)", len(parameters))
    return instances, parameters
