"""Protocol definitions for dependency injection."""

from typing import Protocol, Any, Iterator
from contextlib import contextmanager


class DatabaseSession(Protocol):
    """Protocol for database session operations."""

    def execute(self, statement: Any) -> Any:
        """Execute a statement and return a result."""
        ...

    def commit(self) -> None:
        """Commit the transaction."""
        ...

    def rollback(self) -> None:
        """Rollback the transaction."""
        ...


class DatabaseSessionFactory(Protocol):
    """Protocol for database session factory."""

    @contextmanager
    def get_session(self) -> Iterator[DatabaseSession]:
        """Get a database session context manager."""
        ...


class QueryExecutor(Protocol):
    """Protocol for running compiled query plans against storage."""

    def execute(self, plan: Any, limit: int | None = None) -> list[dict[str, Any]]:
        """Run a plan and return rows typed by the plan's column manifest."""
        ...


class SecretStore(Protocol):
    """Protocol for looking up credentials by name."""

    def get(self, name: str) -> str | None:
        """Return the secret stored under name, or None if it is not set."""
        ...


class Logger(Protocol):
    """Protocol for logger implementations."""

    def info(self, msg: str, *args: Any) -> None: ...
    def warning(self, msg: str, *args: Any) -> None: ...
    def error(self, msg: str, *args: Any) -> None: ...
    def debug(self, msg: str, *args: Any) -> None: ...
