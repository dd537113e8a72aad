"""Sources backed by versioned tables (one row per issue)."""

from typing import Any

from sqlalchemy.sql.expression import FromClause

from query.filters import FilterKind, FilterList, compile_filter
from query.issues import VersionedTable, resolve_issues, select_issues
from query.plan import ColumnManifest, QueryPlan
from models import FluviewClinical, Flusurv, PahoDengue, NidssFlu
from .base import BaseDataSource
from .registry import register
from .request import EpidataRequest


class VersionedSource(BaseDataSource):
    """A source whose rows are keyed by (epiweek, location) and versioned by issue.

    Requests may select explicit ``issues``, a fixed ``lag``, or (by default)
    the most recent issue of every observation.
    """

    model: Any
    columns: tuple[str, ...]
    manifest: ColumnManifest
    location_param = 'regions'
    location_column = 'region'
    required = ('epiweeks', 'regions')

    def build_plan(self, table: FromClause, columns: list[Any], request: EpidataRequest,
                   locations: FilterList) -> QueryPlan:
        location = table.c[self.location_column]
        source = VersionedTable(table, key_columns=('epiweek', self.location_column))
        conditions = [
            compile_filter(table.c.epiweek, request.epiweeks, FilterKind.EPIWEEK),
            compile_filter(location, locations, FilterKind.STRING),
        ]
        statement = resolve_issues(
            source,
            columns,
            conditions,
            select_issues(request.issues, request.lag),
            order_by=[table.c.epiweek, location, table.c.issue],
        )
        return QueryPlan(statement, self.manifest, label=table.name)

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        table = self.model.__table__
        columns = [table.c[name] for name in self.columns]
        return [self.build_plan(table, columns, request, getattr(request, self.location_param))]


@register
class FluviewClinicalSource(VersionedSource):
    name = "fluview_clinical"
    description = "CDC FluView clinical laboratory data"

    model = FluviewClinical
    columns = ('release_date', 'issue', 'epiweek', 'region', 'lag', 'total_specimens',
               'total_a', 'total_b', 'percent_positive', 'percent_a', 'percent_b')
    manifest = ColumnManifest(
        strings=('release_date', 'region'),
        integers=('issue', 'epiweek', 'lag', 'total_specimens', 'total_a', 'total_b'),
        floats=('percent_positive', 'percent_a', 'percent_b'),
    )


@register
class FlusurvSource(VersionedSource):
    name = "flusurv"
    description = "CDC FluSurv-NET hospitalization rates"

    model = Flusurv
    columns = ('release_date', 'issue', 'epiweek', 'location', 'lag', 'rate_age_0',
               'rate_age_1', 'rate_age_2', 'rate_age_3', 'rate_age_4', 'rate_overall')
    manifest = ColumnManifest(
        strings=('release_date', 'location'),
        integers=('issue', 'epiweek', 'lag'),
        floats=('rate_age_0', 'rate_age_1', 'rate_age_2', 'rate_age_3', 'rate_age_4',
                'rate_overall'),
    )
    location_param = 'locations'
    location_column = 'location'
    required = ('epiweeks', 'locations')


@register
class PahoDengueSource(VersionedSource):
    name = "paho_dengue"
    description = "PAHO dengue case counts"

    model = PahoDengue
    columns = ('release_date', 'issue', 'epiweek', 'region', 'lag', 'total_pop', 'serotype',
               'num_dengue', 'incidence_rate', 'num_severe', 'num_deaths')
    manifest = ColumnManifest(
        strings=('release_date', 'region', 'serotype'),
        integers=('issue', 'epiweek', 'lag', 'total_pop', 'num_dengue', 'num_severe',
                  'num_deaths'),
        floats=('incidence_rate',),
    )


@register
class NidssFluSource(VersionedSource):
    name = "nidss_flu"
    description = "Taiwan NIDSS influenza-like illness"

    model = NidssFlu
    columns = ('release_date', 'issue', 'epiweek', 'region', 'lag', 'visits', 'ili')
    manifest = ColumnManifest(
        strings=('release_date', 'region'),
        integers=('issue', 'epiweek', 'lag', 'visits'),
        floats=('ili',),
    )
