# src/dbcheck/core/checks/collation.py
"""
Character set / collation evaluators.

A schema or stored routine is correct only when its database collation AND
the client character set both match the expected values.
"""

import logging

from dbcheck.config import EXPECTED_CHARACTER_SET, EXPECTED_COLLATION, ProbeConfig
from dbcheck.core.base_database import BaseDatabase, quote_identifier
from dbcheck.core.exceptions import QueryFailure
from dbcheck.core.models import SchemaCollation, TableCollation

logger = logging.getLogger(__name__)


def is_correct_collation(
    database_collation: str,
    character_set_client: str,
    expected_collation: str = EXPECTED_COLLATION,
    expected_character_set: str = EXPECTED_CHARACTER_SET,
) -> bool:
    return database_collation == expected_collation and character_set_client == expected_character_set


def check_schema_collation(db: BaseDatabase, schema: str, config: ProbeConfig) -> SchemaCollation:
    """
    Collect the collation picture of one schema: its CREATE DATABASE
    statement, the collation/client charset pair and every table's collation.

    A failing query is recorded on the result instead of raised.
    """
    result = SchemaCollation(name=schema)
    try:
        create = db.rows(f"SHOW CREATE DATABASE {quote_identifier(schema)}")
        if create:
            result.create_statement = create[0].get("Create Database", "")

        result.database_collation = db.scalar(
            "SELECT DEFAULT_COLLATION_NAME FROM information_schema.SCHEMATA WHERE SCHEMA_NAME = %s",
            (schema,),
        ) or ""
        result.character_set_client = db.scalar("SELECT @@character_set_client") or ""

        for status in db.rows(f"SHOW TABLE STATUS FROM {quote_identifier(schema)}"):
            collation = status.get("Collation")
            result.tables.append(TableCollation(
                name=status.get("Name", ""),
                collation=collation,
                correct=collation == config.expected_collation,
            ))
    except QueryFailure as e:
        logger.error("failed to inspect collation of %s: %s", schema, e)
        result.error = str(e)
        return result

    result.correct = is_correct_collation(
        result.database_collation,
        result.character_set_client,
        config.expected_collation,
        config.expected_character_set,
    )
    if not result.correct:
        logger.warning(
            "schema %s: collation=%s character_set_client=%s",
            schema, result.database_collation, result.character_set_client,
        )
    return result


def check_unicode(db: BaseDatabase, config: ProbeConfig) -> list[SchemaCollation]:
    return [check_schema_collation(db, schema, config) for schema in config.tracked_schemas]
