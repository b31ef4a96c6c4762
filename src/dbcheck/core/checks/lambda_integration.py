# src/dbcheck/core/checks/lambda_integration.py
"""
Lambda-integration checker.

The gate has three all-or-nothing steps, run in order:
  1. the invoker principal exists in mysql.user
  2. it holds exactly "GRANT EXECUTE ON *.* TO '<invoker>'@'%'"
  3. an ACTIVE associated role of the cluster has the Lambda policy attached
Any failure raises PolicyViolation naming the step.

After the gate passes, every stored routine is diagnosed: its collation
verdict and, for routines with the reserved prefix, the account, function
and region of the Lambda ARN it calls. Diagnostics never fail the gate.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from dbcheck.config import ProbeConfig
from dbcheck.core.base_database import BaseDatabase, quote_identifier
from dbcheck.core.base_provider import BaseControlPlane
from dbcheck.core.checks.collation import is_correct_collation
from dbcheck.core.deadline import Deadline
from dbcheck.core.exceptions import PolicyViolation, QueryFailure
from dbcheck.core.models import (
    ClusterSnapshot,
    LambdaIntegrationReport,
    ProcedureRecord,
    RoutineDiagnostic,
)
from dbcheck.utils.utility import find_named_matches, role_name_from_arn

logger = logging.getLogger(__name__)

LAMBDA_ARN_PATTERN = re.compile(
    r"arn:aws:lambda:(?P<region>[a-z0-9-]+):(?P<account>\d+):function:(?P<fn>\w+)",
    re.MULTILINE,
)


class LambdaIntegrationChecker:

    def __init__(
        self,
        db: BaseDatabase,
        control_plane: BaseControlPlane,
        snapshot: ClusterSnapshot,
        config: ProbeConfig,
        deadline: Optional[Deadline] = None,
    ):
        self.db = db
        self.control_plane = control_plane
        self.snapshot = snapshot
        self.config = config
        self.deadline = deadline or Deadline.unbounded()

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------
    def check(self) -> LambdaIntegrationReport:
        invoker = self.config.lambda_invoker
        self.deadline.check("invoker check")
        self.check_invoker_exists()
        self.deadline.check("grants check")
        self.check_execute_grant()
        self.deadline.check("role check")
        role_arn = self.check_role_policy()
        return LambdaIntegrationReport(
            invoker=invoker,
            role_arn=role_arn,
            routines=self.routine_diagnostics(),
        )

    def check_invoker_exists(self) -> None:
        invoker = self.config.lambda_invoker
        if not invoker:
            raise PolicyViolation("invoker", "LAMBDA_INVOKER_USERNAME is unset")

        exists = self.db.scalar("SELECT EXISTS(SELECT 1 FROM mysql.user WHERE user = %s)", (invoker,))
        if not exists:
            raise PolicyViolation("invoker", f"LAMBDA_INVOKER_USERNAME: {invoker} does not exist")

    def check_execute_grant(self) -> None:
        invoker = self.config.lambda_invoker
        grants = self.db.column("SHOW GRANTS FOR %s", (invoker,))
        logger.info("Grants: %r", grants)

        expected = f"GRANT EXECUTE ON *.* TO '{invoker}'@'%'"
        for grant in grants:
            logger.debug("Checking: %r", grant)
            if grant == expected:
                return
        raise PolicyViolation("grants", f"LAMBDA_INVOKER_USERNAME: {invoker} does not have execute permissions")

    def check_role_policy(self) -> str:
        """Return the ARN of the first active role carrying the Lambda policy."""
        for role in self.snapshot.cluster.get("AssociatedRoles") or []:
            role_arn = role.get("RoleArn", "")
            if role.get("Status") != self.config.active_role_status:
                logger.warning("role %s not %s (%s)", role_arn, self.config.active_role_status, role.get("Status"))
                continue

            role_name = role_name_from_arn(role_arn)
            if not role_name:
                logger.error("failed to parse role arn %r", role_arn)
                continue

            self.deadline.check(f"policies of {role_name}")
            logger.info("Checking RoleArn: %s has lambda perms", role_arn)
            for policy in self.control_plane.list_attached_role_policies(role_name):
                if policy.get("PolicyArn") == self.config.lambda_policy_arn:
                    return role_arn

        raise PolicyViolation(
            "roles",
            f"Active Cluster.AssociatedRoles is missing the {self.config.lambda_policy_arn} policy",
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def list_procedures(self) -> list[ProcedureRecord]:
        """Source and metadata of every stored procedure outside system schemas."""
        try:
            statuses = self.db.rows("SHOW PROCEDURE STATUS")
        except QueryFailure as e:
            logger.error("failed to make SHOW PROCEDURE STATUS listing: %s", e)
            return []

        procedures = []
        for status in statuses:
            schema, name = status.get("Db", ""), status.get("Name", "")
            if schema in self.config.system_schemas:
                continue
            self.deadline.check(f"source of {schema}.{name}")
            try:
                rows = self.db.rows(
                    f"SHOW CREATE PROCEDURE {quote_identifier(schema)}.{quote_identifier(name)}"
                )
            except QueryFailure as e:
                logger.error("failed to get procedure source of %s.%s: %s", schema, name, e)
                continue
            if not rows:
                continue

            row = rows[0]
            procedures.append(ProcedureRecord(
                schema=schema,
                name=name,
                definer=status.get("Definer", ""),
                modified=status.get("Modified"),
                sql_mode=row.get("sql_mode") or "",
                source=row.get("Create Procedure") or "",
                character_set_client=row.get("character_set_client") or "",
                collation_connection=row.get("collation_connection") or "",
                database_collation=row.get("Database Collation") or "",
            ))
        return procedures

    def diagnose(self, procedure: ProcedureRecord) -> RoutineDiagnostic:
        diagnostic = RoutineDiagnostic(
            procedure=procedure,
            correct_collation=is_correct_collation(
                procedure.database_collation,
                procedure.character_set_client,
                self.config.expected_collation,
                self.config.expected_character_set,
            ),
        )

        if not procedure.name.startswith(self.config.lambda_routine_prefix):
            return diagnostic
        if procedure.name == self.config.lambda_bootstrap_routine:
            return diagnostic

        found = find_named_matches(LAMBDA_ARN_PATTERN, procedure.source)
        diagnostic.checked_arn = True
        diagnostic.function = found.get("fn", "")
        diagnostic.account = found.get("account", "")
        diagnostic.region = found.get("region", "")

        if diagnostic.account != self.config.account_id:
            diagnostic.issues.append(f"Account ID {diagnostic.account} != {self.config.account_id}")
        if diagnostic.function != self.config.lambda_callee:
            diagnostic.issues.append(f"Function {diagnostic.function} != {self.config.lambda_callee}")
        if diagnostic.region and diagnostic.region != self.config.region:
            diagnostic.issues.append(f"Region {diagnostic.region} != {self.config.region}")
        for issue in diagnostic.issues:
            logger.warning("%s.%s: %s", procedure.schema, procedure.name, issue)
        return diagnostic

    def routine_diagnostics(self) -> dict[str, list[RoutineDiagnostic]]:
        grouped: dict[str, list[RoutineDiagnostic]] = {}
        for procedure in self.list_procedures():
            grouped.setdefault(procedure.schema, []).append(self.diagnose(procedure))
        return grouped


def callee_arn(config: ProbeConfig) -> str:
    return f"arn:aws:lambda:{config.region}:{config.account_id}:function:{config.lambda_callee}"


def send_heartbeat(db: BaseDatabase, config: ProbeConfig, now: Optional[datetime] = None) -> str:
    """Invoke the expected callee through mysql.lambda_async; returns its ARN."""
    arn = callee_arn(config)
    payload = json.dumps({"heartbeat": (now or datetime.now(timezone.utc)).isoformat()})
    db.execute("CALL mysql.lambda_async(%s, %s)", (arn, payload))
    logger.info("heartbeat sent to %s", arn)
    return arn
