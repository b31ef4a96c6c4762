# src/dbcheck/adapters/mysql/mysql_adapter.py
"""
PyMySQL implementation of the BaseDatabase capability.
"""

import logging
from typing import Any, Optional, Sequence

import pymysql
import pymysql.cursors

from dbcheck.config import ProbeConfig
from dbcheck.core.base_database import BaseDatabase
from dbcheck.core.deadline import Deadline
from dbcheck.core.exceptions import QueryFailure

logger = logging.getLogger(__name__)


class MySQLDatabase(BaseDatabase):
    """
    One lazily opened autocommit connection shared by all evaluators of an
    invocation. Autocommit keeps any evaluator from holding a transaction open
    across calls.

    Before every statement the connection's socket read and write timeouts
    are reset to the configured read timeout, cut to what is left of the
    invocation deadline.
    """

    def __init__(self, config: ProbeConfig, host: Optional[str] = None, deadline: Optional[Deadline] = None):
        self.config = config
        self.host = host or config.mysql_host
        self.deadline = deadline or Deadline.unbounded()
        self._conn: Optional[pymysql.connections.Connection] = None

    def connect(self) -> pymysql.connections.Connection:
        if self._conn is None:
            connect_timeout = self.deadline.call_timeout("connect", self.config.connect_timeout)
            read_timeout = self.deadline.call_timeout("connect", self.config.read_timeout)
            logger.debug("connecting to %s:%s/%s", self.host, self.config.mysql_port, self.config.mysql_database)
            try:
                self._conn = pymysql.connect(
                    host=self.host,
                    port=self.config.mysql_port,
                    user=self.config.mysql_user,
                    password=self.config.mysql_password,
                    database=self.config.mysql_database,
                    charset=self.config.expected_character_set,
                    connect_timeout=connect_timeout,
                    read_timeout=read_timeout,
                    write_timeout=read_timeout,
                    init_command="SET sql_mode='TRADITIONAL'",
                    autocommit=True,
                    cursorclass=pymysql.cursors.DictCursor,
                )
            except pymysql.MySQLError as e:
                raise QueryFailure("connect", e) from e
        return self._conn

    def _bounded(self, operation: str) -> pymysql.connections.Connection:
        conn = self.connect()
        timeout = self.deadline.call_timeout(operation, self.config.read_timeout)
        # PyMySQL applies these to the socket on the next read/write.
        conn._read_timeout = timeout
        conn._write_timeout = timeout
        return conn

    def rows(self, statement: str, args: Optional[Sequence[Any]] = None) -> list[dict]:
        conn = self._bounded(statement)
        try:
            with conn.cursor() as cursor:
                cursor.execute(statement, args)
                return list(cursor.fetchall())
        except pymysql.MySQLError as e:
            raise QueryFailure(statement, e) from e

    def execute(self, statement: str, args: Optional[Sequence[Any]] = None) -> None:
        conn = self._bounded(statement)
        try:
            with conn.cursor() as cursor:
                cursor.execute(statement, args)
        except pymysql.MySQLError as e:
            raise QueryFailure(statement, e) from e

    def ping(self) -> None:
        conn = self._bounded("ping")
        try:
            conn.ping(reconnect=False)
        except pymysql.MySQLError as e:
            raise QueryFailure("ping", e) from e

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            except pymysql.MySQLError as e:
                logger.debug("close failed: %s", e)
            self._conn = None
