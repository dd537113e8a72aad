"""Single-token gates for restricted data sources."""

import secrets
from types import MappingProxyType
from typing import Any, Mapping

from core.errors import UnauthenticatedError
from core.protocols import SecretStore


class SourceGate:
    """Holds the one access token of each restricted source."""

    def __init__(self, tokens: Mapping[str, str | None]):
        self._tokens = MappingProxyType({name: token for name, token in tokens.items() if token})

    @classmethod
    def from_config(cls, config: Mapping[str, Any], secret_store: SecretStore) -> 'SourceGate':
        return cls({source: secret_store.get(secret) for source, secret in config.items()})

    def is_authorized(self, source: str, credential: str | None) -> bool:
        token = self._tokens.get(source)
        if not token or not credential:
            return False
        return secrets.compare_digest(credential.encode('utf-8'), token.encode('utf-8'))

    def check(self, source: str, credential: str | None) -> None:
        """Raise UnauthenticatedError unless credential is the source's token."""
        if not self.is_authorized(source, credential):
            raise UnauthenticatedError()
