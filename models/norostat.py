"""NoroSTAT outbreak counts, revised in place by successive releases.

Every parse of a release records the points that changed; a point's current
value is its most recent (release_date, parse_time) diff.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Index

from .base import Base


class NorostatLocation(Base):
    """Location strings as published (lists of included states)."""
    __tablename__ = 'norostat_raw_datatable_location_pool'

    location_id = Column(Integer, primary_key=True, autoincrement=True)
    location = Column(String(255), nullable=False, unique=True)


class NorostatRelease(Base):
    __tablename__ = 'norostat_raw_datatable_version_list'

    release_date = Column(Date, primary_key=True)
    parse_time = Column(DateTime, primary_key=True)


class NorostatPointDiff(Base):
    __tablename__ = 'norostat_point_diffs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    release_date = Column(Date, nullable=False)
    parse_time = Column(DateTime, nullable=False)
    location_id = Column(Integer, ForeignKey('norostat_raw_datatable_location_pool.location_id'),
                         nullable=False)
    epiweek = Column(Integer, nullable=False)
    new_value = Column(Integer)

    __table_args__ = (
        Index('idx_norostat_point_diffs_location_epiweek', 'location_id', 'epiweek'),
    )
