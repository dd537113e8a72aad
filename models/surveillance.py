"""Versioned surveillance tables.

Each table holds one row per (issue, epiweek, location); ``lag`` is the number
of weeks between the epiweek and the issue that reported it.
"""

from sqlalchemy import Column, Integer, String, Float, Date, Index, UniqueConstraint

from .base import Base


class Fluview(Base):
    """Public ILINet data, including age groups and weighted ILI."""
    __tablename__ = 'fluview'

    id = Column(Integer, primary_key=True, autoincrement=True)
    release_date = Column(Date, nullable=False)
    issue = Column(Integer, nullable=False)
    epiweek = Column(Integer, nullable=False)
    region = Column(String(12), nullable=False)
    lag = Column(Integer, nullable=False)
    num_ili = Column(Integer)
    num_patients = Column(Integer)
    num_providers = Column(Integer)
    wili = Column(Float)
    ili = Column(Float)
    num_age_0 = Column(Integer)
    num_age_1 = Column(Integer)
    num_age_2 = Column(Integer)
    num_age_3 = Column(Integer)
    num_age_4 = Column(Integer)
    num_age_5 = Column(Integer)

    __table_args__ = (
        UniqueConstraint('issue', 'epiweek', 'region', name='uq_fluview'),
        Index('idx_fluview_epiweek_region', 'epiweek', 'region'),
    )


class FluviewImputed(Base):
    """Privileged ILINet locations imputed from public ones.

    No release date or age groups, and weighted ILI is not reported.
    """
    __tablename__ = 'fluview_imputed'

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue = Column(Integer, nullable=False)
    epiweek = Column(Integer, nullable=False)
    region = Column(String(12), nullable=False)
    lag = Column(Integer, nullable=False)
    num_ili = Column(Integer)
    num_patients = Column(Integer)
    num_providers = Column(Integer)
    ili = Column(Float)

    __table_args__ = (
        UniqueConstraint('issue', 'epiweek', 'region', name='uq_fluview_imputed'),
    )


class FluviewClinical(Base):
    __tablename__ = 'fluview_clinical'

    id = Column(Integer, primary_key=True, autoincrement=True)
    release_date = Column(Date, nullable=False)
    issue = Column(Integer, nullable=False)
    epiweek = Column(Integer, nullable=False)
    region = Column(String(12), nullable=False)
    lag = Column(Integer, nullable=False)
    total_specimens = Column(Integer)
    total_a = Column(Integer)
    total_b = Column(Integer)
    percent_positive = Column(Float)
    percent_a = Column(Float)
    percent_b = Column(Float)

    __table_args__ = (
        UniqueConstraint('issue', 'epiweek', 'region', name='uq_fluview_clinical'),
    )


class Flusurv(Base):
    """FluSurv-NET hospitalization rates per 100k, by age group."""
    __tablename__ = 'flusurv'

    id = Column(Integer, primary_key=True, autoincrement=True)
    release_date = Column(Date, nullable=False)
    issue = Column(Integer, nullable=False)
    epiweek = Column(Integer, nullable=False)
    location = Column(String(32), nullable=False)
    lag = Column(Integer, nullable=False)
    rate_age_0 = Column(Float)
    rate_age_1 = Column(Float)
    rate_age_2 = Column(Float)
    rate_age_3 = Column(Float)
    rate_age_4 = Column(Float)
    rate_overall = Column(Float)

    __table_args__ = (
        UniqueConstraint('issue', 'epiweek', 'location', name='uq_flusurv'),
    )


class PahoDengue(Base):
    __tablename__ = 'paho_dengue'

    id = Column(Integer, primary_key=True, autoincrement=True)
    release_date = Column(Date, nullable=False)
    issue = Column(Integer, nullable=False)
    epiweek = Column(Integer, nullable=False)
    region = Column(String(12), nullable=False)
    lag = Column(Integer, nullable=False)
    total_pop = Column(Integer)
    serotype = Column(String(32))
    num_dengue = Column(Integer)
    incidence_rate = Column(Float)
    num_severe = Column(Integer)
    num_deaths = Column(Integer)

    __table_args__ = (
        UniqueConstraint('issue', 'epiweek', 'region', name='uq_paho_dengue'),
    )


class NidssFlu(Base):
    """Taiwan NIDSS outpatient ILI."""
    __tablename__ = 'nidss_flu'

    id = Column(Integer, primary_key=True, autoincrement=True)
    release_date = Column(Date, nullable=False)
    issue = Column(Integer, nullable=False)
    epiweek = Column(Integer, nullable=False)
    region = Column(String(12), nullable=False)
    lag = Column(Integer, nullable=False)
    visits = Column(Integer)
    ili = Column(Float)

    __table_args__ = (
        UniqueConstraint('issue', 'epiweek', 'region', name='uq_nidss_flu'),
    )


class NidssDengue(Base):
    """Taiwan NIDSS dengue case counts by city/county, unversioned.

    Each location also names its region, so counts can be summed per
    location, per region or nationwide.
    """
    __tablename__ = 'nidss_dengue'

    id = Column(Integer, primary_key=True, autoincrement=True)
    epiweek = Column(Integer, nullable=False)
    location = Column(String(32), nullable=False)
    region = Column(String(12), nullable=False)
    count = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint('epiweek', 'location', name='uq_nidss_dengue'),
    )
