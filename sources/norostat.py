"""NoroSTAT outbreak counts and release metadata, both behind the norostat token."""

from typing import Any

from sqlalchemy import and_, or_, select

from query.filters import FilterKind, compile_filter
from query.plan import ColumnManifest, QueryPlan
from models import NorostatLocation, NorostatPointDiff, NorostatRelease
from .base import BaseDataSource
from .registry import register
from .request import EpidataRequest


class NorostatGatedSource(BaseDataSource):
    gate_name = "norostat"

    def authorize(self, request: EpidataRequest) -> None:
        self.container.get_source_gate().check(self.gate_name, request.credential)


@register
class NorostatSource(NorostatGatedSource):
    """Current value of each epiweek for one published location string.

    A diff is current when no later (release_date, parse_time) diff with a
    value exists for the same location and epiweek. ``location`` is not
    echoed back in the rows.
    """

    name = "norostat"
    description = "CDC NoroSTAT norovirus outbreaks"
    required = ('auth', 'location', 'epiweeks')

    manifest = ColumnManifest(strings=('release_date',), integers=('epiweek', 'value'))

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        diffs = NorostatPointDiff.__table__
        pool = NorostatLocation.__table__
        latest = diffs.alias('latest')
        later = diffs.alias('later')

        superseded = and_(
            latest.c.location_id == later.c.location_id,
            latest.c.epiweek == later.c.epiweek,
            or_(
                latest.c.release_date < later.c.release_date,
                and_(latest.c.release_date == later.c.release_date,
                     latest.c.parse_time < later.c.parse_time),
            ),
            later.c.new_value.is_not(None),
        )
        statement = (
            select(latest.c.release_date, latest.c.epiweek, latest.c.new_value.label('value'))
            .select_from(
                latest
                .join(pool, pool.c.location_id == latest.c.location_id)
                .outerjoin(later, superseded)
            )
            .where(
                pool.c.location == request.location,
                compile_filter(latest.c.epiweek, request.epiweeks, FilterKind.EPIWEEK),
                later.c.parse_time.is_(None),
                latest.c.new_value.is_not(None),
            )
            .order_by(latest.c.epiweek)
        )
        return [QueryPlan(statement, self.manifest, label=self.name)]


@register
class NorostatMetaSource(NorostatGatedSource):
    """Distinct release dates and location strings."""

    name = "meta_norostat"
    description = "NoroSTAT releases and locations"
    required = ('auth',)

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        releases = NorostatRelease.__table__
        pool = NorostatLocation.__table__
        return [
            QueryPlan(
                select(releases.c.release_date).distinct().order_by(releases.c.release_date),
                ColumnManifest(strings=('release_date',)),
                label='releases',
            ),
            QueryPlan(
                select(pool.c.location).distinct().order_by(pool.c.location),
                ColumnManifest(strings=('location',)),
                label='locations',
            ),
        ]

    def combine(self, results: list[tuple[QueryPlan, list[dict[str, Any]]]]) -> list[dict[str, Any]]:
        return [{plan.label: rows for plan, rows in results}]
