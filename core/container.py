"""Dependency injection container."""

import os
import logging
from typing import Any, Iterator
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import Config
from .protocols import DatabaseSessionFactory, QueryExecutor, SecretStore
from auth import AuthLimits, SensorAuthRegistry, SensorAuthorizer, SourceGate
from query import RegionMap, SpatialRollup, SQLAlchemyQueryExecutor


class EnvironmentSecretStore:
    """Secret store backed by environment variables."""

    def get(self, name: str) -> str | None:
        return os.getenv(name) or None


class SQLAlchemySessionFactory:
    """Database session factory using SQLAlchemy."""

    def __init__(self, database_url: str | None = None, pool_pre_ping: bool = True,
                 engine: Engine | None = None):
        if engine is None:
            if database_url is None:
                database_url = os.getenv('DATABASE_URL')
                if not database_url:
                    raise ValueError("DATABASE_URL environment variable not set")
            engine = create_engine(database_url, pool_pre_ping=pool_pre_ping)

        self.engine = engine
        self._session_maker = sessionmaker(bind=self.engine)

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        """Get a database session with automatic commit/rollback."""
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_tables(self, base: Any) -> None:
        """Create all tables from SQLAlchemy base."""
        base.metadata.create_all(self.engine)


class Container:
    """Dependency injection container for managing application dependencies."""

    def __init__(self, config: Config | None = None):
        self._config = config or Config()
        self._instances: dict[str, Any] = {}
        self._factories: dict[str, Any] = {}

        # Register default implementations
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default dependency implementations."""
        global_config = self._config.get_global_config()
        auth_config = self._config.get_auth_config()

        # Logger factory
        def create_logger(name: str) -> logging.Logger:
            log_config = global_config.get('logging', {})
            logging.basicConfig(
                level=getattr(logging, log_config.get('level', 'INFO')),
                format=log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            )
            return logging.getLogger(name)

        self._factories['logger'] = create_logger

        self._factories['secret_store'] = lambda: EnvironmentSecretStore()

        # Database session factory (singleton)
        db_config = global_config.get('database', {})
        self._factories['db_session_factory'] = lambda: SQLAlchemySessionFactory(
            pool_pre_ping=db_config.get('pool_pre_ping', True)
        )

        self._factories['query_executor'] = lambda: SQLAlchemyQueryExecutor(
            self.get_db_session_factory(),
            logger=self.get_logger('query.executor'),
        )

        # Static registries, built once from configuration
        self._factories['spatial_rollup'] = lambda: SpatialRollup(
            RegionMap.from_config(self._config.get_regions_config())
        )

        sensor_config = auth_config.get('sensors', {})
        self._factories['sensor_authorizer'] = lambda: SensorAuthorizer(
            SensorAuthRegistry.from_config(sensor_config, self.get_secret_store()),
            limits=AuthLimits.from_config(sensor_config.get('limits', {})),
            logger=self.get_logger('auth.sensors'),
        )

        self._factories['source_gate'] = lambda: SourceGate.from_config(
            auth_config.get('sources', {}), self.get_secret_store()
        )

    def _singleton(self, name: str) -> Any:
        if name not in self._instances:
            self._instances[name] = self._factories[name]()
        return self._instances[name]

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger instance for the given name."""
        return self._factories['logger'](name)

    def get_secret_store(self) -> SecretStore:
        return self._singleton('secret_store')

    def get_db_session_factory(self) -> SQLAlchemySessionFactory:
        """Get the database session factory."""
        return self._singleton('db_session_factory')

    def get_query_executor(self) -> QueryExecutor:
        return self._singleton('query_executor')

    def get_spatial_rollup(self) -> SpatialRollup:
        return self._singleton('spatial_rollup')

    def get_sensor_authorizer(self) -> SensorAuthorizer:
        return self._singleton('sensor_authorizer')

    def get_source_gate(self) -> SourceGate:
        return self._singleton('source_gate')

    def get_config(self) -> Config:
        """Get the configuration instance."""
        return self._config

    # Methods for testing - allow overriding dependencies
    def set_secret_store(self, store: SecretStore) -> None:
        """Override the secret store (useful for testing)."""
        self._instances['secret_store'] = store

    def set_db_session_factory(self, factory: DatabaseSessionFactory) -> None:
        """Override the database session factory (useful for testing)."""
        self._instances['db_session_factory'] = factory
