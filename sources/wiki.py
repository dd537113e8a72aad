"""Wikipedia article access counts, normalized by total hourly traffic."""

from sqlalchemy import extract, func, literal, select

from query.filters import FilterKind, compile_filter
from query.plan import ColumnManifest, QueryPlan
from models import WikiAccess, WikiMeta
from .base import BaseDataSource
from .registry import register
from .request import EpidataRequest

# a handful of hours report glitched totals
MAX_HOURLY_TOTAL = 100000000


@register
class WikiSource(BaseDataSource):
    """Article counts per day or epiweek, optionally split by hour of day.

    Without ``hours`` every hour is summed and ``hour`` is reported as -1.
    """

    name = "wiki"
    description = "Wikipedia article access counts"
    required = ('articles', 'language')

    manifest = ColumnManifest(strings=('article',), integers=('count', 'total', 'hour'),
                              floats=('value',))

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        wiki, meta = WikiAccess.__table__, WikiMeta.__table__
        w = select(wiki).where(wiki.c.language == request.language).subquery('w')
        m = (
            select(meta)
            .where(meta.c.total < MAX_HOURLY_TOTAL, meta.c.language == request.language)
            .subquery('m')
        )

        if request.require_any('dates', 'epiweeks') == 'dates':
            time_column, time_name = m.c.date, 'date'
            condition = compile_filter(time_column, request.dates, FilterKind.DATE)
            manifest = self.manifest.extend(strings=('date',))
        else:
            time_column, time_name = m.c.epiweek, 'epiweek'
            condition = compile_filter(time_column, request.epiweeks, FilterKind.EPIWEEK)
            manifest = self.manifest.extend(integers=('epiweek',))

        count = func.sum(w.c['count'])
        total = func.sum(m.c.total)
        fields = [
            time_column.label(time_name),
            w.c.article,
            count.label('count'),
            total.label('total'),
            func.round(count / (total * 1e-6), 8).label('value'),
        ]
        conditions = [condition, compile_filter(w.c.article, request.articles, FilterKind.STRING)]
        grouping = [time_column, w.c.article]

        if request.hours is not None:
            hour = extract('hour', m.c.datetime)
            fields.append(hour.label('hour'))
            conditions.append(compile_filter(hour, request.hours, FilterKind.INTEGER))
            grouping.append(hour)
        else:
            fields.append(literal(-1).label('hour'))

        statement = (
            select(*fields)
            .select_from(w.join(m, m.c.datetime == w.c.datetime))
            .where(*conditions)
            .group_by(*grouping)
            .order_by(*grouping)
        )
        return [QueryPlan(statement, manifest, label=self.name)]
