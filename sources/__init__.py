from .base import BaseDataSource
from .request import EpidataRequest
from .registry import SourceRegistry, get_registry

# Import source modules to register them
from . import fluview, versioned, tables, sensors, regional, wiki, norostat, meta

__all__ = ['BaseDataSource', 'EpidataRequest', 'SourceRegistry', 'get_registry']
