from .config import Config
from .errors import EpidataError
from .protocols import DatabaseSession, QueryExecutor, SecretStore

__all__ = ['Config', 'EpidataError', 'DatabaseSession', 'QueryExecutor', 'SecretStore']
