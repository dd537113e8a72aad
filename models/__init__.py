from .base import Base
from .surveillance import Fluview, FluviewImputed, FluviewClinical, Flusurv, PahoDengue, NidssFlu, NidssDengue
from .norostat import NorostatLocation, NorostatRelease, NorostatPointDiff
from .digital import GoogleFluTrends, GoogleHealthTrends, Twitter, CdcExtract, Quidel, WikiAccess, WikiMeta
from .modeling import Sensor, DengueSensor, Nowcast, DengueNowcast, Forecast

__all__ = [
    'Base',
    'Fluview',
    'FluviewImputed',
    'FluviewClinical',
    'Flusurv',
    'PahoDengue',
    'NidssFlu',
    'NidssDengue',
    'NorostatLocation',
    'NorostatRelease',
    'NorostatPointDiff',
    'GoogleFluTrends',
    'GoogleHealthTrends',
    'Twitter',
    'CdcExtract',
    'Quidel',
    'WikiAccess',
    'WikiMeta',
    'Sensor',
    'DengueSensor',
    'Nowcast',
    'DengueNowcast',
    'Forecast',
]
