from .filters import FilterKind, FilterSpec, FilterList, compile_filter
from .issues import Explicit, Lag, Latest, LATEST, VersionedTable, select_issues, resolve_issues
from .plan import ColumnManifest, QueryPlan
from .rollup import RegionMap, RollupQuery, SpatialRollup
from .executor import SQLAlchemyQueryExecutor

__all__ = [
    'FilterKind',
    'FilterSpec',
    'FilterList',
    'compile_filter',
    'Explicit',
    'Lag',
    'Latest',
    'LATEST',
    'VersionedTable',
    'select_issues',
    'resolve_issues',
    'ColumnManifest',
    'QueryPlan',
    'RegionMap',
    'RollupQuery',
    'SpatialRollup',
    'SQLAlchemyQueryExecutor',
]
