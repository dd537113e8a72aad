"""Tiered authorization for sensor queries.

A sensor is readable when it is open, when the request presents the global
sensors token, or when it presents one of the granular tokens registered for
that sensor. Failures never distinguish unknown sensors from wrong tokens.
"""

import logging
import secrets
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from core.errors import (
    NoSensorsRequestedError,
    QueryTooExpensiveError,
    TooManyCredentialsError,
    UnauthorizedSensorError,
)
from core.protocols import Logger, SecretStore


@dataclass(frozen=True)
class AuthLimits:
    """Per-request limits on presented tokens and token comparisons."""

    max_credentials: int = 1
    max_global_checks: int = 1
    max_granular_checks: int = 30

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'AuthLimits':
        return cls(**{k: int(v) for k, v in config.items() if k in cls.__dataclass_fields__})


class SensorAuthRegistry:
    """Immutable sensor to token mapping, plus open sensors and the global token."""

    def __init__(self, granular: Mapping[str, Iterable[str | None]],
                 open_sensors: Iterable[str] = (), global_token: str | None = None):
        self._granular = MappingProxyType({
            name: frozenset(token for token in tokens if token)
            for name, tokens in granular.items()
        })
        self._open = frozenset(open_sensors)
        self._global_token = global_token or None

    @classmethod
    def from_config(cls, config: Mapping[str, Any], secret_store: SecretStore) -> 'SensorAuthRegistry':
        """Build the registry from secret names, resolving each through the store."""
        granular = {
            name: [secret_store.get(secret) for secret in secret_names]
            for name, secret_names in config.get('granular', {}).items()
        }
        global_secret = config.get('global')
        return cls(
            granular,
            open_sensors=config.get('open', []),
            global_token=secret_store.get(global_secret) if global_secret else None,
        )

    @property
    def max_tokens_per_sensor(self) -> int:
        return max((len(tokens) for tokens in self._granular.values()), default=0)

    def is_open(self, name: str) -> bool:
        return name in self._open

    def tokens_for(self, name: str) -> frozenset[str]:
        return self._granular.get(name, frozenset())

    @property
    def global_token(self) -> str | None:
        return self._global_token


@dataclass(frozen=True)
class CredentialPresentation:
    """Credentials supplied with a request; duplicates collapse."""

    sensors: tuple[str, ...]
    credentials: frozenset[str]

    @classmethod
    def of(cls, sensors: Iterable[str],
           credentials: str | Iterable[str] | None = None) -> 'CredentialPresentation':
        if credentials is None:
            credentials = ()
        elif isinstance(credentials, str):
            credentials = (credentials,)
        return cls(tuple(sensors), frozenset(credentials))


def _capped_product(factors: Sequence[int], ceiling: int) -> int:
    """Multiply non-negative factors, returning ceiling + 1 once the product passes ceiling."""
    product = 1
    for factor in factors:
        if factor == 0:
            return 0
        if product > ceiling // factor:
            return ceiling + 1
        product *= factor
    return product


def _matches(presented: str, expected: str) -> bool:
    return secrets.compare_digest(presented.encode('utf-8'), expected.encode('utf-8'))


class SensorAuthorizer:
    """Decides, all or nothing, whether a request may read its sensors."""

    def __init__(self, registry: SensorAuthRegistry, limits: AuthLimits | None = None,
                 logger: Logger | None = None):
        self.registry = registry
        self.limits = limits or AuthLimits()
        self.logger = logger or logging.getLogger("auth.sensors")

    def check_cost(self, sensor_count: int, credential_count: int) -> None:
        """Reject requests that could force too many token comparisons.

        Every requested sensor is counted as gated, so the bound depends only on
        the number of names and never on which of them exist.
        """
        if credential_count > self.limits.max_global_checks:
            raise QueryTooExpensiveError()
        per_sensor = max(1, self.registry.max_tokens_per_sensor)
        ceiling = self.limits.max_granular_checks
        comparisons = _capped_product([credential_count, sensor_count, per_sensor], ceiling)
        if comparisons > ceiling:
            raise QueryTooExpensiveError()

    def is_authorized(self, name: str, credentials: frozenset[str]) -> bool:
        if self.registry.is_open(name):
            return True
        global_token = self.registry.global_token
        if global_token and any(_matches(c, global_token) for c in credentials):
            return True
        return any(
            _matches(c, token)
            for token in self.registry.tokens_for(name)
            for c in credentials
        )

    def authorize(self, sensors: Sequence[str],
                  credentials: str | Iterable[str] | None = None) -> list[str]:
        """Authorize every requested sensor or fail.

        Returns:
            The requested sensor names, in request order.

        Raises:
            NoSensorsRequestedError: If no sensors were requested.
            TooManyCredentialsError: If more credentials were presented than allowed.
            QueryTooExpensiveError: If the comparison bound is exceeded.
            UnauthorizedSensorError: Naming every sensor that failed.
        """
        presentation = CredentialPresentation.of(sensors, credentials)
        names = list(presentation.sensors)

        if not names:
            raise NoSensorsRequestedError()
        if len(presentation.credentials) > self.limits.max_credentials:
            raise TooManyCredentialsError()
        self.check_cost(len(names), len(presentation.credentials))

        failed = [name for name in names if not self.is_authorized(name, presentation.credentials)]
        if failed:
            self.logger.warning(f"Rejected sensor request: {len(failed)} of {len(names)} sensors unauthorized")
            raise UnauthorizedSensorError(failed)

        return names
