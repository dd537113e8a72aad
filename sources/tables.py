"""Sources backed by a single unversioned table."""

import json
from typing import Any

from sqlalchemy import select
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.expression import FromClause

from query.filters import FilterKind, compile_filter, filter_strings
from query.plan import ColumnManifest, QueryPlan
from models import GoogleFluTrends, GoogleHealthTrends, Quidel, Nowcast, DengueNowcast, DengueSensor, Forecast
from .base import BaseDataSource
from .registry import register
from .request import EpidataRequest


class TableSource(BaseDataSource):
    """Selects columns from one table, filtered by request dimensions.

    ``filters`` maps request parameters to columns as (parameter, column, kind).
    Gated sources require the source's own access token.
    """

    model: Any
    columns: tuple[str, ...]
    manifest: ColumnManifest
    filters: tuple[tuple[str, str, FilterKind], ...] = ()
    order: tuple[str, ...] = ()
    gated = False

    def authorize(self, request: EpidataRequest) -> None:
        if self.gated:
            self.container.get_source_gate().check(self.name, request.credential)

    def conditions(self, table: FromClause, request: EpidataRequest) -> list[ColumnElement]:
        return [
            compile_filter(table.c[column], getattr(request, param), kind)
            for param, column, kind in self.filters
        ]

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        table = self.model.__table__
        statement = (
            select(*[table.c[name] for name in self.columns])
            .where(*self.conditions(table, request))
            .order_by(*[table.c[name] for name in self.order])
        )
        return [QueryPlan(statement, self.manifest, label=self.name)]


@register
class GftSource(TableSource):
    name = "gft"
    description = "Google Flu Trends"
    required = ('epiweeks', 'locations')

    model = GoogleFluTrends
    columns = ('epiweek', 'location', 'num')
    manifest = ColumnManifest(strings=('location',), integers=('epiweek', 'num'))
    filters = (
        ('epiweeks', 'epiweek', FilterKind.EPIWEEK),
        ('locations', 'location', FilterKind.STRING),
    )
    order = ('epiweek', 'location')


@register
class GhtSource(TableSource):
    name = "ght"
    description = "Google Health Trends"
    required = ('auth', 'epiweeks', 'locations', 'query')
    gated = True

    model = GoogleHealthTrends
    columns = ('epiweek', 'location', 'value')
    manifest = ColumnManifest(strings=('location',), integers=('epiweek',), floats=('value',))
    filters = (
        ('epiweeks', 'epiweek', FilterKind.EPIWEEK),
        ('locations', 'location', FilterKind.STRING),
    )
    order = ('epiweek', 'location')

    def conditions(self, table: FromClause, request: EpidataRequest) -> list[ColumnElement]:
        return super().conditions(table, request) + [filter_strings(table.c.query, [request.query])]


@register
class QuidelSource(TableSource):
    name = "quidel"
    description = "Quidel influenza test volumes"
    required = ('auth', 'locations', 'epiweeks')
    gated = True

    model = Quidel
    columns = ('location', 'epiweek', 'value')
    manifest = ColumnManifest(strings=('location',), integers=('epiweek',), floats=('value',))
    filters = (
        ('locations', 'location', FilterKind.STRING),
        ('epiweeks', 'epiweek', FilterKind.EPIWEEK),
    )
    order = ('epiweek', 'location')


@register
class NowcastSource(TableSource):
    name = "nowcast"
    description = "Delphi ILI nowcasts"
    required = ('locations', 'epiweeks')

    model = Nowcast
    columns = ('location', 'epiweek', 'value', 'std')
    manifest = ColumnManifest(strings=('location',), integers=('epiweek',), floats=('value', 'std'))
    filters = (
        ('locations', 'location', FilterKind.STRING),
        ('epiweeks', 'epiweek', FilterKind.EPIWEEK),
    )
    order = ('epiweek', 'location')


@register
class DengueNowcastSource(NowcastSource):
    name = "dengue_nowcast"
    description = "Delphi dengue nowcasts"

    model = DengueNowcast


@register
class DengueSensorsSource(TableSource):
    name = "dengue_sensors"
    description = "Delphi dengue sensors"
    required = ('auth', 'names', 'locations', 'epiweeks')
    gated = True

    model = DengueSensor
    columns = ('name', 'location', 'epiweek', 'value')
    manifest = ColumnManifest(strings=('name', 'location'), integers=('epiweek',), floats=('value',))
    filters = (
        ('names', 'name', FilterKind.STRING),
        ('locations', 'location', FilterKind.STRING),
        ('epiweeks', 'epiweek', FilterKind.EPIWEEK),
    )
    order = ('epiweek', 'name', 'location')


@register
class ForecastSource(TableSource):
    """One forecasting system's output for the epiweek it was made."""

    name = "delphi"
    description = "Delphi forecasts"
    required = ('system', 'epiweek')

    model = Forecast
    columns = ('system', 'epiweek', 'json')
    manifest = ColumnManifest(strings=('system', 'json'), integers=('epiweek',))

    def conditions(self, table: FromClause, request: EpidataRequest) -> list[ColumnElement]:
        return [table.c.system == request.system, table.c.epiweek == request.epiweek]

    def postprocess(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if len(rows) == 1 and rows[0].get('json') is not None:
            row = dict(rows[0])
            row['forecast'] = json.loads(row.pop('json'))
            return [row]
        return rows
