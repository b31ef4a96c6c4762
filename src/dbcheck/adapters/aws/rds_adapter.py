# src/dbcheck/adapters/aws/rds_adapter.py
"""
AWS RDS adapter — clusters, member instances and parameter group pages.
"""

from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from dbcheck.core.exceptions import NotFound, ProviderFailure
from dbcheck.core.models import ParameterPage


def fetch_db_clusters(rds) -> list[dict]:
    clusters = []
    try:
        paginator = rds.get_paginator("describe_db_clusters")
        for page in paginator.paginate():
            clusters.extend(page.get("DBClusters", []))
    except (ClientError, BotoCoreError) as e:
        raise ProviderFailure("rds:DescribeDBClusters", e) from e
    return clusters


def fetch_db_instance(rds, identifier: str) -> dict:
    try:
        resp = rds.describe_db_instances(DBInstanceIdentifier=identifier)
    except (ClientError, BotoCoreError) as e:
        raise ProviderFailure(f"rds:DescribeDBInstances {identifier}", e) from e

    instances = resp.get("DBInstances", [])
    if not instances:
        raise NotFound(f"no instance described for {identifier}")
    return instances[0]


def _page_args(name_key: str, group_name: str, marker: Optional[str]) -> dict:
    # Only user-modified parameters.
    args = {name_key: group_name, "Source": "user"}
    if marker:
        args["Marker"] = marker
    return args


def fetch_cluster_parameter_page(rds, group_name: str, marker: Optional[str] = None) -> ParameterPage:
    try:
        resp = rds.describe_db_cluster_parameters(
            **_page_args("DBClusterParameterGroupName", group_name, marker)
        )
    except (ClientError, BotoCoreError) as e:
        raise ProviderFailure(f"rds:DescribeDBClusterParameters {group_name}", e) from e
    return ParameterPage(parameters=resp.get("Parameters", []), marker=resp.get("Marker"))


def fetch_db_parameter_page(rds, group_name: str, marker: Optional[str] = None) -> ParameterPage:
    try:
        resp = rds.describe_db_parameters(
            **_page_args("DBParameterGroupName", group_name, marker)
        )
    except (ClientError, BotoCoreError) as e:
        raise ProviderFailure(f"rds:DescribeDBParameters {group_name}", e) from e
    return ParameterPage(parameters=resp.get("Parameters", []), marker=resp.get("Marker"))
