"""Issue selection for time-versioned tables.

A versioned table keeps one physical row per (observation key, issue). Each
query picks rows by exactly one selector:

* ``Explicit`` returns every row whose issue matches the given list.
* ``Lag`` returns the row published ``n`` weeks after its epiweek.
* ``Latest`` (the default) returns, per observation key, the row with the
  highest issue.
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import and_, func, select
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.expression import FromClause

from core.errors import InvalidSelectorError
from .filters import FilterKind, FilterList, compile_filter


@dataclass(frozen=True)
class Explicit:
    issues: FilterList

    def __post_init__(self):
        if not isinstance(self.issues, FilterList):
            raise InvalidSelectorError("issues must be a filter list")
        if self.issues.kind not in (FilterKind.EPIWEEK, FilterKind.INTEGER):
            raise InvalidSelectorError(f"issues must be epiweeks, not {self.issues.kind.value}")


@dataclass(frozen=True)
class Lag:
    weeks: int

    def __post_init__(self):
        if isinstance(self.weeks, bool) or not isinstance(self.weeks, int):
            raise InvalidSelectorError(f"lag must be an integer: {self.weeks!r}")
        if self.weeks < 0:
            raise InvalidSelectorError(f"lag must not be negative: {self.weeks}")


@dataclass(frozen=True)
class Latest:
    pass


IssueSelector = Explicit | Lag | Latest

LATEST = Latest()


def select_issues(issues: FilterList | None = None, lag: int | None = None) -> IssueSelector:
    """Pick the selector for a request; explicit issues take precedence over lag."""
    if issues is not None:
        return Explicit(issues)
    if lag is not None:
        return Lag(lag)
    return LATEST


@dataclass(frozen=True)
class VersionedTable:
    """A table (or aliased table) holding several issues per observation."""

    table: FromClause
    key_columns: tuple[str, ...]
    issue_column: str = 'issue'
    lag_column: str | None = 'lag'

    def column(self, name: str) -> ColumnElement:
        return self.table.c[name]


def resolve_issues(source: VersionedTable, columns: Sequence[ColumnElement],
                   conditions: Sequence[ColumnElement], selector: IssueSelector,
                   order_by: Sequence[ColumnElement] = ()) -> Select:
    """Build the final statement for a versioned table under a selector.

    Args:
        source: The versioned table and its observation key.
        columns: Result columns, expressed over ``source.table``.
        conditions: Already compiled predicates over the observation dimensions.
        selector: One of Explicit, Lag or Latest.
        order_by: Ordering of the final rows.

    Raises:
        InvalidSelectorError: If the selector is unknown or unusable on this table.
    """
    issue = source.column(source.issue_column)

    if isinstance(selector, Explicit):
        statement = select(*columns).where(
            *conditions, compile_filter(issue, selector.issues))
    elif isinstance(selector, Lag):
        if source.lag_column is None:
            raise InvalidSelectorError("lag is not available for this source")
        statement = select(*columns).where(
            *conditions, source.column(source.lag_column) == selector.weeks)
    elif isinstance(selector, Latest):
        keys = [source.column(name) for name in source.key_columns]
        latest = (
            select(func.max(issue).label('max_issue'), *keys)
            .where(*conditions)
            .group_by(*keys)
            .subquery('x')
        )
        on = and_(
            latest.c.max_issue == issue,
            *[latest.c[name] == source.column(name) for name in source.key_columns],
        )
        statement = select(*columns).select_from(source.table.join(latest, on))
    else:
        raise InvalidSelectorError(f"unknown issue selector: {selector!r}")

    return statement.order_by(*order_by)
