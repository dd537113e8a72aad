"""
Shared pytest fixtures for the epidata query test suite.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from core.config import Config
from core.container import Container, SQLAlchemySessionFactory
from models import Base

TOKENS = {
    'EPIDATA_AUTH_FLUVIEW': 'fluview-token',
    'EPIDATA_AUTH_GHT': 'ght-token',
    'EPIDATA_AUTH_TWITTER': 'twitter-token',
    'EPIDATA_AUTH_CDC': 'cdc-token',
    'EPIDATA_AUTH_QUIDEL': 'quidel-token',
    'EPIDATA_AUTH_NOROSTAT': 'norostat-token',
    'EPIDATA_AUTH_SENSORS': 'global-sensors-token',
    'EPIDATA_AUTH_TWTR_SENSOR': 'twtr-token',
    'EPIDATA_AUTH_GFT_SENSOR': 'gft-token',
    'EPIDATA_AUTH_GHT_SENSORS': 'ght-sensors-token',
    'EPIDATA_AUTH_CDC_SENSOR': 'cdc-sensor-token',
    'EPIDATA_AUTH_QUID_SENSOR': 'quid-token',
    'EPIDATA_AUTH_WIKI_SENSOR': 'wiki-token',
}


class DictSecretStore:
    """Secret store over a plain dict."""

    def __init__(self, secrets: dict[str, str]):
        self.secrets = dict(secrets)

    def get(self, name: str) -> str | None:
        return self.secrets.get(name)


@pytest.fixture
def session_factory() -> SQLAlchemySessionFactory:
    """In-memory SQLite database with every table created."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    factory = SQLAlchemySessionFactory(engine=engine)
    factory.init_tables(Base)
    yield factory
    engine.dispose()


@pytest.fixture
def container(session_factory) -> Container:
    """Container wired to the default config, the SQLite database and test tokens."""
    container = Container(Config())
    container.set_secret_store(DictSecretStore(TOKENS))
    container.set_db_session_factory(session_factory)
    return container


@pytest.fixture
def insert(session_factory):
    """Insert ORM rows into the test database."""

    def _insert(*rows):
        with session_factory.get_session() as session:
            session.add_all(rows)

    return _insert
