"""Base class for all data sources with dependency injection."""

from abc import ABC, abstractmethod
from typing import Any
from datetime import datetime

from core.container import Container
from core.errors import EpidataError
from query.plan import QueryPlan
from .request import EpidataRequest


class BaseDataSource(ABC):
    """Abstract base class for data sources with dependency injection."""

    # Subclasses must define these
    name: str
    description: str
    required: tuple[str, ...] = ()

    def __init__(self, container: Container):
        """Initialize with dependency container."""
        self.container = container
        self.config = container.get_config().get_source_config(self.name)
        self.logger = container.get_logger(f"sources.{self.name}")
        self.executor = container.get_query_executor()
        self.max_results = container.get_config().get_max_results()

    def authorize(self, request: EpidataRequest) -> None:
        """Reject the request if it may not read this source.

        Open sources accept every request.
        """

    @abstractmethod
    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        """Compile the request into query plans.

        Args:
            request: Parsed request parameters.

        Returns:
            Plans whose rows are concatenated, in order, into the result.
        """
        ...

    def postprocess(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Adjust typed rows before they are returned."""
        return rows

    def combine(self, results: list[tuple[QueryPlan, list[dict[str, Any]]]]) -> list[dict[str, Any]]:
        """Merge each executed plan's rows into the response.

        By default rows are concatenated in plan order.
        """
        return [row for _, rows in results for row in rows]

    def run(self, request: EpidataRequest) -> list[dict[str, Any]]:
        """Authorize, plan and execute a request.

        Returns:
            Result rows; an empty list when nothing matched.

        Raises:
            EpidataError: If the request is invalid, unauthorized or storage fails.
        """
        start_time = datetime.now()

        try:
            request.require(*self.required)
            self.authorize(request)
            plans = self.plan(request)

            results: list[tuple[QueryPlan, list[dict[str, Any]]]] = []
            fetched = 0
            for plan in plans:
                remaining = self.max_results - fetched
                if remaining <= 0:
                    self.logger.warning(f"Result limit of {self.max_results} rows reached")
                    break
                plan_rows = self.executor.execute(plan, limit=remaining)
                fetched += len(plan_rows)
                results.append((plan, plan_rows))

        except EpidataError as e:
            self.logger.warning(f"Request rejected: {e}")
            raise

        duration = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Returned {fetched} rows from {len(results)} queries in {duration:.2f}s")
        return self.postprocess(self.combine(results))
