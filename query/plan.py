"""Compiled query plans handed to the executor."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

from sqlalchemy.sql import Select


@dataclass(frozen=True)
class ColumnManifest:
    """Which result columns are returned, and as which Python type."""

    strings: tuple[str, ...] = ()
    integers: tuple[str, ...] = ()
    floats: tuple[str, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return self.strings + self.integers + self.floats

    def extend(self, strings: tuple[str, ...] = (), integers: tuple[str, ...] = (),
               floats: tuple[str, ...] = ()) -> 'ColumnManifest':
        return ColumnManifest(self.strings + strings, self.integers + integers,
                              self.floats + floats)

    def coerce(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Type a result row; columns missing from the manifest are dropped."""
        typed = {}
        for name, value in row.items():
            if value is None:
                if name in self.names:
                    typed[name] = None
            elif name in self.strings:
                if isinstance(value, (date, datetime)):
                    value = value.isoformat()
                typed[name] = str(value)
            elif name in self.integers:
                typed[name] = int(value)
            elif name in self.floats:
                typed[name] = float(value)
        return typed


@dataclass(frozen=True)
class QueryPlan:
    """One statement plus the manifest used to type its rows."""

    statement: Select
    manifest: ColumnManifest
    label: str = field(default='')
