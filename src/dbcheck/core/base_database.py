# src/dbcheck/core/base_database.py
"""
Abstract database capability consumed by the evaluators.

Implementations run each statement on an autocommit connection and raise
QueryFailure for any driver error. Rows are dicts keyed by column label.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class BaseDatabase(ABC):

    @abstractmethod
    def rows(self, statement: str, args: Optional[Sequence[Any]] = None) -> list[dict]:
        ...

    @abstractmethod
    def execute(self, statement: str, args: Optional[Sequence[Any]] = None) -> None:
        ...

    @abstractmethod
    def ping(self) -> None:
        ...

    def close(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Convenience helpers built on rows()
    # ------------------------------------------------------------------
    def scalar(self, statement: str, args: Optional[Sequence[Any]] = None) -> Any:
        """First column of the first row, or None for an empty result."""
        result = self.rows(statement, args)
        if not result:
            return None
        return next(iter(result[0].values()), None)

    def column(self, statement: str, args: Optional[Sequence[Any]] = None) -> list:
        """First column of every row."""
        return [next(iter(row.values()), None) for row in self.rows(statement, args)]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def quote_identifier(name: str) -> str:
    """Backtick-quote a schema, table or routine name."""
    return "`" + name.replace("`", "``") + "`"
