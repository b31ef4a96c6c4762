# src/dbcheck/config.py
"""
Central configuration for dbcheck.
All environment variables, policy constants and defaults live here.

Module-level values are defaults only. Everything downstream receives an
explicit ProbeConfig built once per invocation with ProbeConfig.from_env().
"""

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


# ---------------------------------------------------------------------------
# Database connection
# ---------------------------------------------------------------------------
DOMAIN: str = os.getenv("DBCHECK_DOMAIN", "")
MYSQL_HOST: str = os.getenv("DBCHECK_MYSQL_HOST", f"auroradb.{DOMAIN}" if DOMAIN else "")
MYSQL_PORT: int = int(os.getenv("DBCHECK_MYSQL_PORT", "3306"))
MYSQL_USER: str = os.getenv("DBCHECK_MYSQL_USER", "root")
MYSQL_PASSWORD: str = os.getenv("MYSQL_ROOT_PASSWORD", "")
MYSQL_DATABASE: str = os.getenv("DBCHECK_MYSQL_DATABASE", "bugzilla")

# ---------------------------------------------------------------------------
# AWS context
# ---------------------------------------------------------------------------
AWS_REGION: str = os.getenv("AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "ap-southeast-1"))
AWS_PROFILE: Optional[str] = os.getenv("AWS_PROFILE") or None
ACCOUNT_ID: str = os.getenv("DBCHECK_ACCOUNT_ID", "")
LAMBDA_INVOKER_USERNAME: str = os.getenv("LAMBDA_INVOKER_USERNAME", "")

# ---------------------------------------------------------------------------
# Deployment metadata & logging
# ---------------------------------------------------------------------------
COMMIT: str = os.getenv("DBCHECK_COMMIT", os.getenv("UP_COMMIT", "none"))
LOG_FORMAT: str = os.getenv("DBCHECK_LOG_FORMAT", "json" if os.getenv("UP_STAGE") else "text")

# ---------------------------------------------------------------------------
# Timeouts
# The deadline bounds a whole assembly; socket timeouts bound each call.
# ---------------------------------------------------------------------------
TIMEOUT_SECONDS: float = float(os.getenv("DBCHECK_TIMEOUT_SECONDS", "60"))
CONNECT_TIMEOUT: int = int(os.getenv("DBCHECK_CONNECT_TIMEOUT", "10"))
READ_TIMEOUT: int = int(os.getenv("DBCHECK_READ_TIMEOUT", "30"))
PROVIDER_MAX_RETRIES: int = int(os.getenv("DBCHECK_PROVIDER_MAX_RETRIES", "0"))

# ---------------------------------------------------------------------------
# Provider status values
# ---------------------------------------------------------------------------
IN_SYNC_STATUS: str = "in-sync"
ACTIVE_ROLE_STATUS: str = "ACTIVE"

# ---------------------------------------------------------------------------
# Unicode policy
# ---------------------------------------------------------------------------
EXPECTED_COLLATION: str = "utf8mb4_unicode_520_ci"
EXPECTED_CHARACTER_SET: str = "utf8mb4"
TRACKED_SCHEMAS: list[str] = os.getenv(
    "DBCHECK_TRACKED_SCHEMAS", "bugzilla,unee_t_enterprise"
).split(",")
SYSTEM_SCHEMAS: list[str] = ["sys", "mysql"]

# ---------------------------------------------------------------------------
# Lambda integration policy
# ---------------------------------------------------------------------------
LAMBDA_POLICY_ARN: str = "arn:aws:iam::aws:policy/AWSLambdaFullAccess"
LAMBDA_ROUTINE_PREFIX: str = "lambda"
LAMBDA_BOOTSTRAP_ROUTINE: str = "lambda_async"
LAMBDA_CALLEE: str = os.getenv("DBCHECK_LAMBDA_CALLEE", "alambda_simple")

# ---------------------------------------------------------------------------
# Application tables
# ---------------------------------------------------------------------------
SCHEMA_VERSION_TABLE: str = "ut_db_schema_version"
USER_GROUP_TABLE: str = "user_group_map"


@dataclass(frozen=True)
class ProbeConfig:
    """Everything one probe invocation needs, resolved up front."""

    mysql_host: str = MYSQL_HOST
    mysql_port: int = MYSQL_PORT
    mysql_user: str = MYSQL_USER
    mysql_password: str = field(default=MYSQL_PASSWORD, repr=False)
    mysql_database: str = MYSQL_DATABASE

    region: str = AWS_REGION
    profile: Optional[str] = AWS_PROFILE
    account_id: str = ACCOUNT_ID
    lambda_invoker: str = LAMBDA_INVOKER_USERNAME

    commit: str = COMMIT
    log_format: str = LOG_FORMAT

    timeout_seconds: float = TIMEOUT_SECONDS
    connect_timeout: int = CONNECT_TIMEOUT
    read_timeout: int = READ_TIMEOUT
    provider_max_retries: int = PROVIDER_MAX_RETRIES

    in_sync_status: str = IN_SYNC_STATUS
    active_role_status: str = ACTIVE_ROLE_STATUS
    expected_collation: str = EXPECTED_COLLATION
    expected_character_set: str = EXPECTED_CHARACTER_SET
    tracked_schemas: tuple[str, ...] = tuple(TRACKED_SCHEMAS)
    system_schemas: tuple[str, ...] = tuple(SYSTEM_SCHEMAS)

    lambda_policy_arn: str = LAMBDA_POLICY_ARN
    lambda_routine_prefix: str = LAMBDA_ROUTINE_PREFIX
    lambda_bootstrap_routine: str = LAMBDA_BOOTSTRAP_ROUTINE
    lambda_callee: str = LAMBDA_CALLEE

    schema_version_table: str = SCHEMA_VERSION_TABLE
    user_group_table: str = USER_GROUP_TABLE

    @classmethod
    def from_env(cls, **overrides) -> "ProbeConfig":
        """
        Build a config from the environment defaults above.

        Overrides whose value is None are ignored so CLI options can be passed
        straight through.
        """
        base = cls()
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(base, **changes) if changes else base

    def with_account_id(self, account_id: str) -> "ProbeConfig":
        return replace(self, account_id=account_id)
