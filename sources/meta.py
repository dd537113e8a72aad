"""Freshness summary of the main tables."""

from typing import Any

from sqlalchemy import distinct, func, select

from query.plan import ColumnManifest, QueryPlan
from models import Fluview, Forecast, Twitter, WikiMeta
from .base import BaseDataSource
from .registry import register
from .request import EpidataRequest


@register
class MetaSource(BaseDataSource):
    """Latest update and size of fluview, twitter, wiki and the forecasts.

    Returns a single row keyed by table; a table with no summary row maps to
    None.
    """

    name = "meta"
    description = "Latest updates of the main tables"

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        return [self.fluview(), self.twitter(), self.wiki(), self.delphi()]

    def fluview(self) -> QueryPlan:
        table = Fluview.__table__
        statement = select(
            func.max(table.c.release_date).label('latest_update'),
            func.max(table.c.issue).label('latest_issue'),
            func.count().label('table_rows'),
        ).select_from(table)
        manifest = ColumnManifest(strings=('latest_update',), integers=('latest_issue', 'table_rows'))
        return QueryPlan(statement, manifest, label='fluview')

    def twitter(self) -> QueryPlan:
        table = Twitter.__table__
        latest = select(
            func.max(table.c.date).label('date'),
            func.count().label('table_rows'),
        ).subquery('x')
        statement = (
            select(
                latest.c.date.label('latest_update'),
                latest.c.table_rows,
                func.count(distinct(table.c.state)).label('num_states'),
            )
            .select_from(latest.join(table, table.c.date == latest.c.date))
            .group_by(latest.c.date, latest.c.table_rows)
        )
        manifest = ColumnManifest(strings=('latest_update',), integers=('num_states', 'table_rows'))
        return QueryPlan(statement, manifest, label='twitter')

    def wiki(self) -> QueryPlan:
        table = WikiMeta.__table__
        statement = select(
            func.max(table.c.datetime).label('latest_update'),
            func.count().label('table_rows'),
        ).select_from(table)
        manifest = ColumnManifest(strings=('latest_update',), integers=('table_rows',))
        return QueryPlan(statement, manifest, label='wiki')

    def delphi(self) -> QueryPlan:
        table = Forecast.__table__
        statement = (
            select(
                table.c.system,
                func.min(table.c.epiweek).label('first_week'),
                func.max(table.c.epiweek).label('last_week'),
                func.count().label('num_weeks'),
            )
            .group_by(table.c.system)
            .order_by(table.c.system)
        )
        manifest = ColumnManifest(strings=('system',), integers=('first_week', 'last_week', 'num_weeks'))
        return QueryPlan(statement, manifest, label='delphi')

    def combine(self, results: list[tuple[QueryPlan, list[dict[str, Any]]]]) -> list[dict[str, Any]]:
        return [{plan.label: rows or None for plan, rows in results}]
