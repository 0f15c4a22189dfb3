"""
Device Position Sample Schema.

A GeoSample is one reading from the device location API. Readings are
accumulated into a SampleSet during a single acquisition run and are
never persisted.
"""

from dataclasses import dataclass
from typing import List, Optional
import math
import time


@dataclass(frozen=True)
class GeoSample:
    """
    One device position reading.
    
    Attributes:
        latitude: WGS84 latitude (degrees)
        longitude: WGS84 longitude (degrees)
        accuracy_m: Reported horizontal accuracy radius (m), lower is better
        captured_at_ms: Capture time, milliseconds since epoch
    """
    
    latitude: float
    longitude: float
    accuracy_m: float
    captured_at_ms: int
    
    def __post_init__(self):
        """Validate sample."""
        if not math.isfinite(self.latitude) or not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        
        if not math.isfinite(self.longitude) or not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")
        
        if not math.isfinite(self.accuracy_m) or self.accuracy_m < 0:
            raise ValueError(f"Accuracy must be finite and non-negative: {self.accuracy_m}")
    
    @property
    def position(self):
        """(latitude, longitude) tuple."""
        return (self.latitude, self.longitude)
    
    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'accuracy_m': self.accuracy_m,
            'captured_at_ms': self.captured_at_ms,
        }


# Ordered readings of one acquisition run, in collection order
SampleSet = List[GeoSample]


def create_sample(
    latitude: float,
    longitude: float,
    accuracy_m: float,
    captured_at_ms: Optional[int] = None
) -> GeoSample:
    """
    Create a GeoSample, stamping it with the current time if needed.
    
    Args:
        latitude: Latitude (degrees)
        longitude: Longitude (degrees)
        accuracy_m: Reported accuracy (m)
        captured_at_ms: Capture time in ms (default: now)
        
    Returns:
        GeoSample
    """
    if captured_at_ms is None:
        captured_at_ms = int(time.time() * 1000)
    
    return GeoSample(
        latitude=float(latitude),
        longitude=float(longitude),
        accuracy_m=float(accuracy_m),
        captured_at_ms=int(captured_at_ms),
    )
