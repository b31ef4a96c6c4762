# src/dbcheck/core/checks/database.py
"""
Live-query evaluators. Each one tolerates a failed or empty query: the
failure is logged and an empty string (or zero) is returned.
"""

import logging

from dbcheck.core.base_database import BaseDatabase, quote_identifier
from dbcheck.core.exceptions import QueryFailure
from dbcheck.core.models import PolicyResult, SignalName

logger = logging.getLogger(__name__)


def _scalar_text(db: BaseDatabase, statement: str, what: str) -> str:
    try:
        value = db.scalar(statement)
    except QueryFailure as e:
        logger.error("failed to get %s: %s", what, e)
        return ""
    if value is None:
        logger.warning("no %s returned", what)
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def schema_version(db: BaseDatabase, table: str = "ut_db_schema_version") -> str:
    """schema_version of the row with the highest id in the version table."""
    t = quote_identifier(table)
    statement = f"SELECT `schema_version` FROM {t} WHERE `id` = (SELECT MAX(`id`) FROM {t})"
    return _scalar_text(db, statement, "schema version")


def aurora_version(db: BaseDatabase) -> str:
    return _scalar_text(db, "SELECT AURORA_VERSION()", "Aurora version")


def innodb_file_format(db: BaseDatabase) -> str:
    return _scalar_text(db, "SELECT @@innodb_file_format", "innodb_file_format")


def user_group_count(db: BaseDatabase, table: str = "user_group_map") -> PolicyResult:
    result = PolicyResult(
        name=SignalName.USER_GROUP_COUNT.value,
        value=0.0,
        description="shows the number of rows in the user_group_map table.",
    )
    try:
        count = db.scalar(f"SELECT COUNT(*) FROM {quote_identifier(table)}")
    except QueryFailure as e:
        logger.error("failed to get count: %s", e)
        return result

    logger.info("Count: %s", count)
    return PolicyResult(name=result.name, value=float(count or 0), description=result.description)
