"""SQLAlchemy-backed query executor."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from core.errors import StorageError
from core.protocols import DatabaseSessionFactory, Logger
from .plan import QueryPlan


class SQLAlchemyQueryExecutor:
    """Runs query plans through a session factory and types the rows."""

    def __init__(self, session_factory: DatabaseSessionFactory,
                 logger: Logger | None = None):
        self.session_factory = session_factory
        self.logger = logger or logging.getLogger("query.executor")

    def execute(self, plan: QueryPlan, limit: int | None = None) -> list[dict[str, Any]]:
        """Execute a plan, returning at most limit rows.

        Raises:
            StorageError: If the database rejects the statement.
        """
        statement = plan.statement
        if limit is not None:
            statement = statement.limit(limit)

        try:
            with self.session_factory.get_session() as session:
                result = session.execute(statement)
                rows = [plan.manifest.coerce(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            self.logger.error(f"Query failed for {plan.label or 'plan'}: {e}")
            raise StorageError() from e

        self.logger.debug(f"Fetched {len(rows)} rows for {plan.label or 'plan'}")
        return rows
