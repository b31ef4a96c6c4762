# src/dbcheck/adapters/aws/route53_adapter.py
"""
AWS Route 53 adapter — hosted zones and record sets for the DNS resolver.
"""

from botocore.exceptions import BotoCoreError, ClientError

from dbcheck.core.exceptions import ProviderFailure


def fetch_hosted_zones(route53) -> list[dict]:
    """Lists every hosted zone visible to the credentials."""
    zones = []
    try:
        paginator = route53.get_paginator("list_hosted_zones")
        for page in paginator.paginate():
            zones.extend(page.get("HostedZones", []))
    except (ClientError, BotoCoreError) as e:
        raise ProviderFailure("route53:ListHostedZones", e) from e
    return zones


def fetch_record_sets(route53, zone_id: str) -> list[dict]:
    records = []
    try:
        paginator = route53.get_paginator("list_resource_record_sets")
        for page in paginator.paginate(HostedZoneId=zone_id):
            records.extend(page.get("ResourceRecordSets", []))
    except (ClientError, BotoCoreError) as e:
        raise ProviderFailure(f"route53:ListResourceRecordSets {zone_id}", e) from e
    return records
