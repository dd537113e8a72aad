"""Digital surveillance sensors, readable per sensor under tiered tokens."""

from sqlalchemy import select

from query.filters import FilterKind, compile_filter
from query.plan import ColumnManifest, QueryPlan
from models import Sensor
from .base import BaseDataSource
from .registry import register
from .request import EpidataRequest


@register
class SensorsSource(BaseDataSource):
    """Sensor values by name, location and epiweek.

    Each requested sensor must be open, or covered by the presented global or
    granular token; see ``auth.sensors``.
    """

    name = "sensors"
    description = "Delphi digital surveillance sensors"
    required = ('names', 'locations', 'epiweeks')

    manifest = ColumnManifest(strings=('name', 'location'), integers=('epiweek',), floats=('value',))

    def authorize(self, request: EpidataRequest) -> None:
        authorizer = self.container.get_sensor_authorizer()
        authorizer.authorize(request.names.values(), request.credentials)

    def plan(self, request: EpidataRequest) -> list[QueryPlan]:
        table = Sensor.__table__
        statement = (
            select(table.c.name, table.c.location, table.c.epiweek, table.c.value)
            .where(
                compile_filter(table.c.name, request.names, FilterKind.STRING),
                compile_filter(table.c.location, request.locations, FilterKind.STRING),
                compile_filter(table.c.epiweek, request.epiweeks, FilterKind.EPIWEEK),
            )
            .order_by(table.c.epiweek, table.c.name, table.c.location)
        )
        return [QueryPlan(statement, self.manifest, label=self.name)]
