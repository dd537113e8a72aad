from .sensors import AuthLimits, CredentialPresentation, SensorAuthRegistry, SensorAuthorizer
from .gates import SourceGate

__all__ = [
    'AuthLimits',
    'CredentialPresentation',
    'SensorAuthRegistry',
    'SensorAuthorizer',
    'SourceGate',
]
