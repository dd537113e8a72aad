"""Typed request parameters consumed by data source handlers."""

from dataclasses import dataclass

from core.errors import MissingParameterError, TooManyCredentialsError
from query.filters import FilterList


@dataclass(frozen=True)
class EpidataRequest:
    """Already-parsed request values; filter dimensions are FilterLists."""

    source: str
    epiweeks: FilterList | None = None
    dates: FilterList | None = None
    regions: FilterList | None = None
    locations: FilterList | None = None
    location: str | None = None
    names: FilterList | None = None
    issues: FilterList | None = None
    lag: int | None = None
    hours: FilterList | None = None
    articles: FilterList | None = None
    credentials: tuple[str, ...] = ()
    query: str | None = None
    language: str | None = None
    system: str | None = None
    epiweek: int | None = None

    def has(self, name: str) -> bool:
        if name == 'auth':
            return bool(self.credentials)
        return getattr(self, name, None) is not None

    def require(self, *names: str) -> None:
        """Raise MissingParameterError unless every named parameter is present."""
        if not all(self.has(name) for name in names):
            raise MissingParameterError(*names)

    def require_any(self, *names: str) -> str:
        """Return the first present parameter among names."""
        for name in names:
            if self.has(name):
                return name
        raise MissingParameterError(*names)

    @property
    def credential(self) -> str | None:
        """The single presented credential, if any."""
        presented = set(self.credentials)
        if len(presented) > 1:
            raise TooManyCredentialsError()
        return next(iter(presented), None)
