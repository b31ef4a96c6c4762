# src/dbcheck/core/checks/tables.py

import logging

from dbcheck.core.base_database import BaseDatabase, quote_identifier
from dbcheck.core.exceptions import QueryFailure
from dbcheck.core.models import TableCount

logger = logging.getLogger(__name__)


def smallint_table_counts(db: BaseDatabase) -> list[TableCount]:
    """
    Row counts of tables whose first column is a smallint, largest first.

    Listing or describing tables raises QueryFailure; a failed count is
    logged and reported as zero.
    """
    counts = []
    for table in db.column("SHOW TABLES"):
        columns = db.rows(f"DESCRIBE {quote_identifier(table)}")
        if not columns or "smallint" not in str(columns[0].get("Type", "")):
            continue
        try:
            rows = int(db.scalar(f"SELECT COUNT(*) FROM {quote_identifier(table)}") or 0)
        except QueryFailure as e:
            logger.error("failed to count table %s: %s", table, e)
            rows = 0
        counts.append(TableCount(table=table, rows=rows))

    counts.sort(key=lambda c: c.rows, reverse=True)
    return counts
