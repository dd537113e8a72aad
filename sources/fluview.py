"""FluView ILINet, a public table overlaid with privileged imputed locations."""

from sqlalchemy import null

from query.filters import FilterKind, FilterList
from query.plan import ColumnManifest, QueryPlan
from models import Fluview, FluviewImputed
from .registry import register
from .request import EpidataRequest
from .versioned import VersionedSource


@register
class FluviewSource(VersionedSource):
    """ILINet by region, with imputed locations for authorized callers.

    The imputed table has no release dates or age groups, and reports ILI in
    place of weighted ILI.
    """

    name = "fluview"
    description = "CDC FluView ILINet"

    model = Fluview
    columns = ('release_date', 'issue', 'epiweek', 'region', 'lag', 'num_ili', 'num_patients',
               'num_providers', 'wili', 'ili', 'num_age_0', 'num_age_1', 'num_age_2',
               'num_age_3', 'num_age_4', 'num_age_5')
    manifest = ColumnManifest(
        strings=('release_date', 'region'),
        integers=('issue', 'epiweek', 'lag', 'num_ili', 'num_patients', 'num_providers',
                  'num_age_0', 'num_age_1', 'num_age_2', 'num_age_3', 'num_age_4', 'num_age_5'),
        floats=('wili', 'ili'),
    )

    def privileged_regions(self, request: EpidataRequest) -> FilterList | None:
        """Regions to read from the imputed table, or None when not permitted.

        New York is a weighted sum of two public locations (``ny_minus_jfk``
        and ``jfk``), so it is released without a token; only that region is
        then read from the imputed table.
        """
        gate = self.container.get_source_gate()
        if gate.is_authorized(self.name, request.credential):
            return request.regions

        exception = self.config.get('privileged_exception_region')
        if exception and exception in (region.lower() for region in request.regions.values()):
            self.logger.info(f"Granting imputed data for public recombination '{exception}'")
            return FilterList.of(FilterKind.STRING, exception)
        return None

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        plans = super().plan(request)

        regions = self.privileged_regions(request)
        if regions is not None:
            table = FluviewImputed.__table__
            columns = [
                null().label('release_date'), table.c.issue, table.c.epiweek, table.c.region,
                table.c.lag, table.c.num_ili, table.c.num_patients, table.c.num_providers,
                table.c.ili.label('wili'), table.c.ili,
                *[null().label(f'num_age_{i}') for i in range(6)],
            ]
            plans.append(self.build_plan(table, columns, request, regions))
        return plans
