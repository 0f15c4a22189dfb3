"""
Geographic Fence (bounding box) check.

Rejects calibrated coordinates that are physically implausible for the
service territory, e.g. due to device or browser location bugs. Binary
gate with inclusive edges.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    """
    Rectangular lat/lon inclusion region.
    
    Attributes:
        lat_min: Southern edge (degrees)
        lat_max: Northern edge (degrees)
        lon_min: Western edge (degrees)
        lon_max: Eastern edge (degrees)
    """
    
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float
    
    def __post_init__(self):
        """Validate box edges."""
        if self.lat_min > self.lat_max:
            raise ValueError(f"lat_min {self.lat_min} > lat_max {self.lat_max}")
        if self.lon_min > self.lon_max:
            raise ValueError(f"lon_min {self.lon_min} > lon_max {self.lon_max}")
    
    def contains(self, latitude: float, longitude: float) -> bool:
        """Inclusive containment test."""
        return (self.lat_min <= latitude <= self.lat_max
                and self.lon_min <= longitude <= self.lon_max)
    
    @classmethod
    def from_dict(cls, data: dict) -> "BoundingBox":
        """Build from a {'lat_min', 'lat_max', 'lon_min', 'lon_max'} mapping."""
        return cls(
            lat_min=float(data['lat_min']),
            lat_max=float(data['lat_max']),
            lon_min=float(data['lon_min']),
            lon_max=float(data['lon_max']),
        )


# Indonesia mainland + archipelago envelope
INDONESIA_BOUNDS = BoundingBox(lat_min=-11.0, lat_max=6.0, lon_min=95.0, lon_max=141.0)


def is_within_bounds(coord, box: BoundingBox = INDONESIA_BOUNDS) -> bool:
    """
    Check a coordinate against the fence.
    
    Args:
        coord: Any object with ``latitude`` and ``longitude`` attributes
        box: Geographic fence (default: Indonesia envelope)
        
    Returns:
        True if box.lat_min <= lat <= box.lat_max and
        box.lon_min <= lon <= box.lon_max
    """
    return box.contains(coord.latitude, coord.longitude)
