# src/dbcheck/core/dns.py
"""
DNS resolver — maps the logical database hostname to the alias target the
hosted zone publishes for it.
"""

import logging
from typing import Optional

from .base_provider import BaseControlPlane
from .deadline import Deadline
from .exceptions import ConfigurationError, NotFound

logger = logging.getLogger(__name__)


def _zone_name(zone: dict) -> str:
    return zone.get("Name", "").rstrip(".").lower()


def _is_suffix(host: str, zone_name: str) -> bool:
    # Label-aware: "example.com" owns "db.example.com" but not "db.myexample.com".
    return bool(zone_name) and (host == zone_name or host.endswith("." + zone_name))


def select_hosted_zone(zones: list[dict], logical_host: str) -> dict:
    """
    Pick the zone whose name is the longest suffix of `logical_host`.

    Raises NotFound when no zone matches and ConfigurationError when two
    zones tie for the longest match.
    """
    host = logical_host.rstrip(".").lower()
    candidates = [z for z in zones if _is_suffix(host, _zone_name(z))]
    for zone in candidates:
        logger.debug("zone %s matches %s", zone.get("Name"), logical_host)

    if not candidates:
        raise NotFound(f"no hosted zone found for {logical_host}")

    longest = max(len(_zone_name(z)) for z in candidates)
    best = [z for z in candidates if len(_zone_name(z)) == longest]
    if len(best) > 1:
        ids = ", ".join(z.get("Id", "?") for z in best)
        raise ConfigurationError(f"ambiguous hosted zones for {logical_host}: {ids}")
    return best[0]


def record_target(record: dict) -> Optional[str]:
    """Alias target of a record set, or its first literal value."""
    alias = record.get("AliasTarget") or {}
    if alias.get("DNSName"):
        return alias["DNSName"].rstrip(".")
    values = record.get("ResourceRecords") or []
    if values and values[0].get("Value"):
        return values[0]["Value"].rstrip(".")
    return None


def resolve_alias(
    control_plane: BaseControlPlane,
    logical_host: str,
    deadline: Optional[Deadline] = None,
) -> str:
    """Resolve `logical_host` to the alias target published in its hosted zone."""
    deadline = deadline or Deadline.unbounded()

    deadline.check("list_hosted_zones")
    zone = select_hosted_zone(control_plane.list_hosted_zones(), logical_host)
    logger.info("using hosted zone %s (%s) for %s", zone.get("Name"), zone.get("Id"), logical_host)

    deadline.check("list_resource_record_sets")
    wanted = logical_host.rstrip(".") + "."
    for record in control_plane.list_resource_record_sets(zone["Id"]):
        if record.get("Name") != wanted:
            continue
        target = record_target(record)
        if target:
            logger.info("%s is an alias for %s", logical_host, target)
            return target

    raise NotFound(f"no alias found for {logical_host}")
