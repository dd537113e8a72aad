"""Range filter compiler.

Turns a list of scalar and range filter values into a single SQLAlchemy
predicate. Every value is validated against the list's kind and bound as a
parameter; nothing is interpolated into SQL text.
"""

import enum
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Iterator

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

from core.errors import EmptyFilterError, InvalidFilterError

_INTEGER_PATTERN = re.compile(r'^-?\d+$')


class FilterKind(enum.Enum):
    """Value domains a filter list may hold."""

    INTEGER = 'integer'
    STRING = 'string'
    DATE = 'date'
    EPIWEEK = 'epiweek'


def _as_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidFilterError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_PATTERN.match(value.strip()):
        return int(value.strip())
    raise InvalidFilterError(f"not an integer: {value!r}")


def _as_epiweek(value: Any) -> int:
    epiweek = _as_integer(value)
    year, week = divmod(epiweek, 100)
    if not (1000 <= year <= 9999 and 1 <= week <= 53):
        raise InvalidFilterError(f"not an epiweek (YYYYWW): {value!r}")
    return epiweek


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(_as_integer(value))
    if len(text) != 8:
        raise InvalidFilterError(f"not a date (YYYYMMDD): {value!r}")
    try:
        return datetime.strptime(text, '%Y%m%d').date()
    except ValueError as e:
        raise InvalidFilterError(f"not a date (YYYYMMDD): {value!r}") from e


def _as_string(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidFilterError(f"not a string: {value!r}")
    return value


_COERCERS = {
    FilterKind.INTEGER: _as_integer,
    FilterKind.EPIWEEK: _as_epiweek,
    FilterKind.DATE: _as_date,
    FilterKind.STRING: _as_string,
}


@dataclass(frozen=True)
class FilterSpec:
    """A single value, or a closed range [low, high] when high is set."""

    low: Any
    high: Any = None

    @property
    def is_range(self) -> bool:
        return self.high is not None

    def contains(self, value: Any) -> bool:
        if self.is_range:
            return self.low <= value <= self.high
        return value == self.low

    def coerce(self, kind: FilterKind) -> 'FilterSpec':
        coerce = _COERCERS[kind]
        low = coerce(self.low)
        if not self.is_range:
            return FilterSpec(low)
        if kind is FilterKind.STRING:
            raise InvalidFilterError("string filters do not support ranges")
        high = coerce(self.high)
        if low > high:
            raise InvalidFilterError(f"range is reversed: {self.low}-{self.high}")
        return FilterSpec(low, high)


@dataclass(frozen=True)
class FilterList:
    """A non-empty, ordered list of filter specs sharing one kind."""

    kind: FilterKind
    specs: tuple[FilterSpec, ...]

    def __post_init__(self):
        specs = tuple(self.specs)
        if not specs:
            raise EmptyFilterError()
        for spec in specs:
            if not isinstance(spec, FilterSpec):
                raise InvalidFilterError(f"not a filter spec: {spec!r}")
        object.__setattr__(self, 'specs', tuple(spec.coerce(self.kind) for spec in specs))

    @classmethod
    def of(cls, kind: FilterKind, *values: Any) -> 'FilterList':
        """Build a list from scalars and (low, high) tuples."""
        specs = []
        for value in values:
            if isinstance(value, FilterSpec):
                specs.append(value)
            elif isinstance(value, tuple):
                if len(value) != 2 or None in value:
                    raise InvalidFilterError(f"range must have two bounds: {value!r}")
                specs.append(FilterSpec(*value))
            else:
                specs.append(FilterSpec(value))
        return cls(kind, tuple(specs))

    @classmethod
    def parse(cls, text: str, kind: FilterKind) -> 'FilterList':
        """Parse the comma separated wire notation, e.g. ``201440-201510,201520``."""
        specs = []
        for item in text.split(','):
            item = item.strip()
            if not item:
                continue
            low, sep, high = item.partition('-')
            if kind is FilterKind.STRING or not sep or not low:
                specs.append(FilterSpec(item))
            else:
                specs.append(FilterSpec(low, high))
        return cls(kind, tuple(specs))

    def contains(self, value: Any) -> bool:
        return any(spec.contains(value) for spec in self.specs)

    def values(self) -> list[Any]:
        """Scalar values only; raises if the list holds a range."""
        if any(spec.is_range for spec in self.specs):
            raise InvalidFilterError("ranges are not allowed here")
        return [spec.low for spec in self.specs]

    def __iter__(self) -> Iterator[FilterSpec]:
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)


def compile_filter(column: ColumnElement, filters: FilterList,
                   kind: FilterKind | None = None) -> ColumnElement:
    """Compile a filter list into one OR predicate over column.

    Scalars become equality clauses and ranges become inclusive BETWEEN
    clauses. SQLAlchemy parenthesizes the OR when it is combined under AND.
    """
    if filters is None or len(filters) == 0:
        raise EmptyFilterError()
    if kind is not None and filters.kind is not kind:
        raise InvalidFilterError(
            f"expected {kind.value} filter, got {filters.kind.value} filter")

    clauses = []
    for spec in filters:
        if spec.is_range:
            clauses.append(column.between(spec.low, spec.high))
        else:
            clauses.append(column == spec.low)
    return or_(*clauses)


def filter_strings(column: ColumnElement, values: Iterable[str]) -> ColumnElement:
    """Shorthand for a string filter built from plain values."""
    return compile_filter(column, FilterList.of(FilterKind.STRING, *values))
