"""
Manual location selection (map click / pin-drop).

The fallback path whenever calibration fails: the user clicks the map and
the clicked point is reverse geocoded. No accuracy is attached and no
fence is applied.
"""

from typing import Optional, Tuple

from geoloc_core.proto.location_result import LocationResult
from geoloc_core.io.geocoding import ReverseGeocoder

# Surabaya
DEFAULT_MAP_CENTER: Tuple[float, float] = (-7.250445, 112.768845)


def initial_map_center(initial: Optional[LocationResult] = None) -> Tuple[float, float]:
    """
    Seed coordinate for the map.
    
    Args:
        initial: Location the caller selected earlier, if any
        
    Returns:
        (latitude, longitude) of the previous selection, else the default
    """
    if initial is None:
        return DEFAULT_MAP_CENTER
    return (initial.latitude, initial.longitude)


async def select_manual_location(
    latitude: float,
    longitude: float,
    geocoder: Optional[ReverseGeocoder] = None
) -> LocationResult:
    """
    Build a LocationResult for a point picked on the map.
    
    Raises:
        ValueError: If the point is not a valid WGS84 coordinate
    """
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValueError(f"Invalid coordinate: ({latitude}, {longitude})")
    
    geocoder = geocoder or ReverseGeocoder()
    address = await geocoder.resolve_address(latitude, longitude)
    
    return LocationResult(
        latitude=latitude,
        longitude=longitude,
        address=address,
        accuracy_m=None,
        num_readings=0,
    )
