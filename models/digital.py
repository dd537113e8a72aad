"""Digital surveillance tables (search, social media, page views)."""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Index

from .base import Base


class GoogleFluTrends(Base):
    __tablename__ = 'gft'

    id = Column(Integer, primary_key=True, autoincrement=True)
    epiweek = Column(Integer, nullable=False)
    location = Column(String(64), nullable=False)
    num = Column(Integer)


class GoogleHealthTrends(Base):
    __tablename__ = 'ght'

    id = Column(Integer, primary_key=True, autoincrement=True)
    query = Column(String(128), nullable=False)
    location = Column(String(8), nullable=False)
    epiweek = Column(Integer, nullable=False)
    value = Column(Float)


class Twitter(Base):
    """Daily influenza-related tweet counts by state."""
    __tablename__ = 'twitter'

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    state = Column(String(2), nullable=False)
    num = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)

    __table_args__ = (
        Index('idx_twitter_date_state', 'date', 'state'),
    )


class CdcExtract(Base):
    """Weekly CDC page hit counts by state."""
    __tablename__ = 'cdc_extract'

    id = Column(Integer, primary_key=True, autoincrement=True)
    epiweek = Column(Integer, nullable=False)
    state = Column(String(2), nullable=False)
    num1 = Column(Integer)
    num2 = Column(Integer)
    num3 = Column(Integer)
    num4 = Column(Integer)
    num5 = Column(Integer)
    num6 = Column(Integer)
    num7 = Column(Integer)
    num8 = Column(Integer)
    total = Column(Integer)

    __table_args__ = (
        Index('idx_cdc_extract_epiweek_state', 'epiweek', 'state'),
    )


class Quidel(Base):
    __tablename__ = 'quidel'

    id = Column(Integer, primary_key=True, autoincrement=True)
    location = Column(String(8), nullable=False)
    epiweek = Column(Integer, nullable=False)
    value = Column(Float)


class WikiAccess(Base):
    """Hourly article access counts."""
    __tablename__ = 'wiki'

    id = Column(Integer, primary_key=True, autoincrement=True)
    datetime = Column(DateTime, nullable=False)
    article = Column(String(64), nullable=False)
    count = Column(Integer, nullable=False)
    language = Column(String(2), nullable=False, default='en')


class WikiMeta(Base):
    """Total hourly access counts, used to normalize article counts."""
    __tablename__ = 'wiki_meta'

    id = Column(Integer, primary_key=True, autoincrement=True)
    datetime = Column(DateTime, nullable=False)
    date = Column(Date, nullable=False)
    epiweek = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)
    language = Column(String(2), nullable=False, default='en')
