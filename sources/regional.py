"""Location-level sources that are summed into national and regional totals."""

from sqlalchemy import String, func, literal, or_, select

from query.filters import FilterKind, compile_filter
from query.plan import ColumnManifest, QueryPlan
from query.rollup import RollupQuery
from models import CdcExtract, NidssDengue, Twitter
from .base import BaseDataSource
from .registry import register
from .request import EpidataRequest

CDC_COUNTS = ('num1', 'num2', 'num3', 'num4', 'num5', 'num6', 'num7', 'num8', 'total')

# rows above this share of matching tweets are inconsistent (low totals, num > total)
TWITTER_MAX_FRACTION = 0.019

# every nidss_dengue row also belongs to this pseudo-region
NIDSS_NATIONWIDE = 'nationwide'


class RegionalSource(BaseDataSource):
    """Gated source stored by state; regions are summed on request."""

    def authorize(self, request: EpidataRequest) -> None:
        self.container.get_source_gate().check(self.name, request.credential)

    def rollup_plans(self, query: RollupQuery, request: EpidataRequest) -> list[QueryPlan]:
        rollup = self.container.get_spatial_rollup()
        return rollup.plans(query, request.locations.values())


@register
class CdcSource(RegionalSource):
    name = "cdc"
    description = "CDC page hits"
    required = ('auth', 'epiweeks', 'locations')

    manifest = ColumnManifest(strings=('location',), integers=('epiweek',) + CDC_COUNTS)

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        table = CdcExtract.__table__
        query = RollupQuery(
            table=table,
            location_column=table.c.state,
            time_column=table.c.epiweek,
            time_name='epiweek',
            measures=[func.sum(table.c[name]).label(name) for name in CDC_COUNTS],
            manifest=self.manifest,
            conditions=[compile_filter(table.c.epiweek, request.epiweeks, FilterKind.EPIWEEK)],
        )
        return self.rollup_plans(query, request)


@register
class TwitterSource(RegionalSource):
    """Influenza tweet share, daily when ``dates`` are given, else weekly."""

    name = "twitter"
    description = "HealthTweets influenza mentions"
    required = ('auth', 'locations')

    manifest = ColumnManifest(strings=('location',), integers=('num', 'total'), floats=('percent',))

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        table = Twitter.__table__
        if request.require_any('dates', 'epiweeks') == 'dates':
            time_column, time_name = table.c.date, 'date'
            condition = compile_filter(time_column, request.dates, FilterKind.DATE)
            manifest = self.manifest.extend(strings=('date',))
        else:
            time_column, time_name = func.yearweek(table.c.date, 6), 'epiweek'
            condition = compile_filter(time_column, request.epiweeks, FilterKind.EPIWEEK)
            manifest = self.manifest.extend(integers=('epiweek',))

        num = func.sum(table.c.num)
        total = func.sum(table.c.total)
        query = RollupQuery(
            table=table,
            location_column=table.c.state,
            time_column=time_column,
            time_name=time_name,
            measures=[
                num.label('num'),
                total.label('total'),
                func.round(100 * num / total, 8).label('percent'),
            ],
            manifest=manifest,
            conditions=[table.c.num / table.c.total <= TWITTER_MAX_FRACTION, condition],
        )
        return self.rollup_plans(query, request)


@register
class NidssDengueSource(BaseDataSource):
    """Taiwan dengue counts summed per requested location, region or ``nationwide``.

    The table stores its own location to region mapping, so each requested
    name gets its own query rather than going through the configured region
    schemes.
    """

    name = "nidss_dengue"
    description = "Taiwan NIDSS dengue case counts"
    required = ('epiweeks', 'locations')

    manifest = ColumnManifest(strings=('location',), integers=('epiweek', 'count'))

    def plan_for_location(self, location: str, request: EpidataRequest) -> QueryPlan:
        table = NidssDengue.__table__
        conditions = [compile_filter(table.c.epiweek, request.epiweeks, FilterKind.EPIWEEK)]
        if location != NIDSS_NATIONWIDE:
            conditions.append(or_(table.c.location == location, table.c.region == location))

        statement = (
            select(table.c.epiweek, literal(location, String).label('location'),
                   func.sum(table.c['count']).label('count'))
            .where(*conditions)
            .group_by(table.c.epiweek)
            .order_by(table.c.epiweek)
        )
        return QueryPlan(statement, self.manifest, label=location)

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        return [self.plan_for_location(location, request)
                for location in request.locations.values()]
