"""Error taxonomy for the query layer.

Every error raised by filter compilation, issue resolution, rollup planning or
authorization is terminal for the request that caused it.
"""


class EpidataError(Exception):
    """Base class for all query layer errors."""

    message = "query failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return self.args[0]


class InvalidFilterError(EpidataError, ValueError):
    message = "invalid filter value"


class EmptyFilterError(InvalidFilterError):
    message = "filter list is empty"


class InvalidSelectorError(EpidataError, ValueError):
    message = "invalid issue selector"


class MissingParameterError(EpidataError):
    """A required request parameter was not supplied."""

    def __init__(self, *names: str):
        self.names = list(names)
        super().__init__(f"missing parameter: need [{', '.join(names)}]")


class UnknownSourceError(EpidataError, KeyError):
    message = "no data source specified"

    def __str__(self) -> str:
        return self.detail


class RetiredSourceError(UnknownSourceError):
    """A source name that was folded into another source."""

    def __init__(self, replacement: str):
        self.replacement = replacement
        super().__init__(f"use {replacement} instead")


class UnauthenticatedError(EpidataError):
    message = "unauthenticated"


class NoSensorsRequestedError(EpidataError):
    message = "no sensor names provided"


class TooManyCredentialsError(EpidataError):
    message = (
        "currently, only a single auth token is allowed to be presented at a time; "
        "please issue a separate query for each sensor name using only the corresponding token"
    )


class QueryTooExpensiveError(EpidataError):
    message = (
        "too many sensors requested and/or auth tokens presented; please divide sensors "
        "into batches and/or use only the tokens needed for the sensors requested"
    )


class UnauthorizedSensorError(EpidataError):
    """Raised with every sensor that failed, whether or not it exists."""

    def __init__(self, names: list[str]):
        self.names = list(names)
        super().__init__(f"unauthenticated/nonexistent sensor(s): {','.join(self.names)}")


class StorageError(EpidataError):
    message = "database error"
