"""
I/O Module: Device location API and reverse geocoding providers.

- DeviceLocationSource: one-shot position requests (timeouts, no cancel)
- ReplayLocationSource: scripted readings for the CLI and tests
- ReverseGeocoder: ordered provider chain with coordinate fallback
"""

from .device_source import (
    DeviceLocationSource,
    PositionUnavailableError,
    ReplayLocationSource,
    ScriptedReading,
)
from .geocoding import (
    DEFAULT_USER_AGENT,
    NOMINATIM_REVERSE_URL,
    PHOTON_REVERSE_URL,
    GeocodeProvider,
    GeocodingProviderError,
    NominatimProvider,
    PhotonProvider,
    ReverseGeocoder,
    default_providers,
    format_coordinate_fallback,
)

__all__ = [
    'DeviceLocationSource',
    'PositionUnavailableError',
    'ReplayLocationSource',
    'ScriptedReading',
    'DEFAULT_USER_AGENT',
    'NOMINATIM_REVERSE_URL',
    'PHOTON_REVERSE_URL',
    'GeocodeProvider',
    'GeocodingProviderError',
    'NominatimProvider',
    'PhotonProvider',
    'ReverseGeocoder',
    'default_providers',
    'format_coordinate_fallback',
]
