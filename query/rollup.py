"""Spatial rollup of state-level rows into national and regional sums."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from sqlalchemy import String, literal, select
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.expression import FromClause

from .filters import filter_strings
from .plan import ColumnManifest, QueryPlan


class RegionMap:
    """Aggregate region codes and the locations each one covers.

    Regions are grouped into schemes (e.g. HHS and census); within a scheme a
    location belongs to at most one region. The national code covers every
    member location.
    """

    def __init__(self, schemes: Mapping[str, Mapping[str, Iterable[str]]],
                 national: str = 'nat'):
        regions: dict[str, frozenset[str]] = {}
        for scheme, scheme_regions in schemes.items():
            seen: dict[str, str] = {}
            for region, members in scheme_regions.items():
                region = region.lower()
                members = frozenset(member.lower() for member in members)
                for member in members:
                    if member in seen:
                        raise ValueError(
                            f"'{member}' is in both {seen[member]} and {region} ({scheme})")
                    seen[member] = region
                if region in regions or region == national:
                    raise ValueError(f"Region '{region}' is defined more than once")
                regions[region] = members

        self.national = national.lower()
        all_members = frozenset().union(*regions.values())
        regions[self.national] = all_members
        self._regions = MappingProxyType(regions)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'RegionMap':
        return cls(config.get('schemes', {}), national=config.get('national', 'nat'))

    @property
    def codes(self) -> frozenset[str]:
        return frozenset(self._regions)

    def is_aggregate(self, location: str) -> bool:
        return location.lower() in self._regions

    def is_national(self, region: str) -> bool:
        return region.lower() == self.national

    def members(self, region: str) -> frozenset[str]:
        return self._regions[region.lower()]


@dataclass(frozen=True)
class RollupQuery:
    """A state-level table and the columns needed to sum it by region.

    ``time_column`` is labelled ``time_name`` in results; measures are labelled
    aggregate expressions (e.g. ``func.sum(t.c.total).label("total")``).
    """

    table: FromClause
    location_column: ColumnElement
    time_column: ColumnElement
    time_name: str
    measures: Sequence[ColumnElement]
    manifest: ColumnManifest
    conditions: Sequence[ColumnElement] = field(default_factory=tuple)


class SpatialRollup:
    """Plans one query per aggregate region and one for all raw locations."""

    def __init__(self, region_map: RegionMap):
        self.region_map = region_map

    def classify(self, locations: Iterable[str]) -> tuple[list[str], list[str]]:
        """Split locations into aggregate regions and raw locations.

        Locations are lower-cased; order is kept and duplicates dropped.
        """
        regions: list[str] = []
        raw: list[str] = []
        for location in locations:
            location = location.lower()
            target = regions if self.region_map.is_aggregate(location) else raw
            if location not in target:
                target.append(location)
        return regions, raw

    def plan_for_region(self, query: RollupQuery, region: str) -> QueryPlan:
        region = region.lower()
        conditions = list(query.conditions)
        if not self.region_map.is_national(region):
            members = sorted(self.region_map.members(region))
            conditions.append(query.location_column.in_(members))

        statement = (
            select(literal(region, String).label('location'),
                   query.time_column.label(query.time_name), *query.measures)
            .select_from(query.table)
            .where(*conditions)
            .group_by(query.time_column)
            .order_by(query.time_column)
        )
        return QueryPlan(statement, query.manifest, label=region)

    def plan_for_locations(self, query: RollupQuery, locations: Sequence[str]) -> QueryPlan:
        location = query.location_column
        statement = (
            select(location.label('location'),
                   query.time_column.label(query.time_name), *query.measures)
            .select_from(query.table)
            .where(*query.conditions, filter_strings(location, locations))
            .group_by(query.time_column, location)
            .order_by(query.time_column, location)
        )
        return QueryPlan(statement, query.manifest, label=','.join(locations))

    def plans(self, query: RollupQuery, locations: Iterable[str]) -> list[QueryPlan]:
        regions, raw = self.classify(locations)
        plans = [self.plan_for_region(query, region) for region in regions]
        if raw:
            plans.append(self.plan_for_locations(query, raw))
        return plans
