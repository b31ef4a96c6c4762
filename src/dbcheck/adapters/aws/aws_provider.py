# src/dbcheck/adapters/aws/aws_provider.py
"""
AWS implementation of the BaseControlPlane interface.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from dbcheck.config import ProbeConfig
from dbcheck.core.base_provider import BaseControlPlane
from dbcheck.core.deadline import Deadline
from dbcheck.core.exceptions import ConfigurationError, ProviderFailure
from dbcheck.core.models import ParameterPage

from dbcheck.adapters.aws.iam_adapter import fetch_attached_role_policies
from dbcheck.adapters.aws.rds_adapter import (
    fetch_cluster_parameter_page,
    fetch_db_clusters,
    fetch_db_instance,
    fetch_db_parameter_page,
)
from dbcheck.adapters.aws.route53_adapter import fetch_hosted_zones, fetch_record_sets

logger = logging.getLogger(__name__)


class AWSControlPlane(BaseControlPlane):
    """
    boto3-backed control plane for one account and region.

    Clients are created lazily from one session and share a botocore Config
    carrying the per-call timeouts. Retries default to zero so a slow or
    failing call surfaces instead of being retried silently. When less of
    the invocation deadline is left than the configured read timeout, the
    call goes through a short-lived client whose timeouts are cut to the
    remaining budget.
    """
    provider_name = "aws"

    def __init__(
        self,
        config: ProbeConfig,
        session: Optional[boto3.Session] = None,
        deadline: Optional[Deadline] = None,
    ):
        self.config = config
        self.session = session or boto3.Session(profile_name=config.profile, region_name=config.region)
        self.deadline = deadline or Deadline.unbounded()
        self.client_config = Config(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            retries={"max_attempts": config.provider_max_retries},
        )
        self._clients: dict = {}
        self._account_id: Optional[str] = None

    def client(self, service: str):
        timeout = self.deadline.call_timeout(f"{service} call", self.config.read_timeout)
        if timeout < self.config.read_timeout:
            logger.debug("%s call limited to %.1fs by the deadline", service, timeout)
            bounded = self.client_config.merge(Config(
                connect_timeout=min(self.config.connect_timeout, timeout),
                read_timeout=timeout,
            ))
            return self.session.client(service, region_name=self.config.region, config=bounded)

        if service not in self._clients:
            self._clients[service] = self.session.client(
                service, region_name=self.config.region, config=self.client_config
            )
        return self._clients[service]

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    def get_account_id(self) -> str:
        if self.config.account_id:
            return self.config.account_id
        if self._account_id:
            return self._account_id

        try:
            identity = self.client("sts").get_caller_identity()
        except (ClientError, BotoCoreError) as e:
            raise ProviderFailure("sts:GetCallerIdentity", e) from e

        account_id = identity.get("Account") or ""
        if not account_id:
            raise ConfigurationError("caller identity carries no account id; set DBCHECK_ACCOUNT_ID")
        self._account_id = account_id
        return account_id

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------
    def list_hosted_zones(self) -> list[dict]:
        return fetch_hosted_zones(self.client("route53"))

    def list_resource_record_sets(self, zone_id: str) -> list[dict]:
        return fetch_record_sets(self.client("route53"), zone_id)

    def list_db_clusters(self) -> list[dict]:
        return fetch_db_clusters(self.client("rds"))

    def describe_db_instance(self, identifier: str) -> dict:
        return fetch_db_instance(self.client("rds"), identifier)

    def cluster_parameter_page(self, group_name: str, marker: Optional[str] = None) -> ParameterPage:
        return fetch_cluster_parameter_page(self.client("rds"), group_name, marker)

    def db_parameter_page(self, group_name: str, marker: Optional[str] = None) -> ParameterPage:
        return fetch_db_parameter_page(self.client("rds"), group_name, marker)

    def list_attached_role_policies(self, role_name: str) -> list[dict]:
        return fetch_attached_role_policies(self.client("iam"), role_name)
