"""Model outputs: sensors, nowcasts and forecasts."""

from sqlalchemy import Column, Integer, String, Float, Text, UniqueConstraint

from .base import Base


class Sensor(Base):
    __tablename__ = 'sensors'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(8), nullable=False)
    location = Column(String(12), nullable=False)
    epiweek = Column(Integer, nullable=False)
    value = Column(Float)

    __table_args__ = (
        UniqueConstraint('name', 'location', 'epiweek', name='uq_sensors'),
    )


class DengueSensor(Base):
    __tablename__ = 'dengue_sensors'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(8), nullable=False)
    location = Column(String(12), nullable=False)
    epiweek = Column(Integer, nullable=False)
    value = Column(Float)


class Nowcast(Base):
    __tablename__ = 'nowcasts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    location = Column(String(12), nullable=False)
    epiweek = Column(Integer, nullable=False)
    value = Column(Float)
    std = Column(Float)


class DengueNowcast(Base):
    __tablename__ = 'dengue_nowcasts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    location = Column(String(12), nullable=False)
    epiweek = Column(Integer, nullable=False)
    value = Column(Float)
    std = Column(Float)


class Forecast(Base):
    """A forecasting system's output for one epiweek, stored as JSON text."""
    __tablename__ = 'forecasts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    system = Column(String(64), nullable=False)
    epiweek = Column(Integer, nullable=False)
    json = Column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint('system', 'epiweek', name='uq_forecasts'),
    )
