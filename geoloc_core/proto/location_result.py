"""
Calibrated Location Output Schema.

CalibratedCoordinate is the one-shot output of the calibration stage.
LocationResult is the terminal artifact handed to the caller
(registration form) after the bounds check and reverse geocoding.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CalibratedCoordinate:
    """
    Fused coordinate derived from a SampleSet.
    
    Attributes:
        latitude: Calibrated latitude (degrees)
        longitude: Calibrated longitude (degrees)
        accuracy_m: Final accuracy estimate (m)
        num_samples_used: Samples that survived outlier filtering
        num_outliers_dropped: Samples rejected by the outlier filter
    """
    
    latitude: float
    longitude: float
    accuracy_m: float
    num_samples_used: int = 1
    num_outliers_dropped: int = 0


@dataclass
class LocationResult:
    """
    Final location handed to the caller.
    
    Attributes:
        latitude: Latitude (degrees)
        longitude: Longitude (degrees)
        address: Human-readable address or "Koordinat: ..." fallback
        accuracy_m: Rounded accuracy (m); None for a manual pin-drop
        num_readings: Device readings collected for this result
    """
    
    latitude: float
    longitude: float
    address: str
    accuracy_m: Optional[int] = None
    num_readings: int = 0
    
    @property
    def is_manual(self) -> bool:
        """True if the location was picked on the map, not calibrated."""
        return self.accuracy_m is None
    
    @property
    def accuracy_level(self) -> Optional[str]:
        """Accuracy label shown to the user."""
        if self.accuracy_m is None:
            return None
        return accuracy_level(self.accuracy_m)
    
    @property
    def suggested_zoom(self) -> int:
        """Map zoom level for centering on this result."""
        if self.accuracy_m is None:
            return 18
        return suggested_zoom(self.accuracy_m)
    
    def to_form_fields(self) -> dict:
        """Fields as stored by the registration form (8-decimal coordinates)."""
        return {
            'latitude': round(self.latitude, 8),
            'longitude': round(self.longitude, 8),
            'address': self.address,
        }
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'address': self.address,
            'accuracy_m': self.accuracy_m,
            'accuracy_level': self.accuracy_level,
            'num_readings': self.num_readings,
        }


def accuracy_level(accuracy_m: float) -> str:
    """
    Map an accuracy radius to the label shown after calibration.
    
    Args:
        accuracy_m: Accuracy (m)
        
    Returns:
        Label, from 'SANGAT PRESISI' (<= 3m) to 'AKURAT RENDAH' (> 100m)
    """
    if accuracy_m <= 3:
        return 'SANGAT PRESISI'
    elif accuracy_m <= 8:
        return 'PRESISI TINGGI'
    elif accuracy_m <= 20:
        return 'AKURAT'
    elif accuracy_m <= 100:
        return 'CUKUP AKURAT'
    else:
        return 'AKURAT RENDAH'


def suggested_zoom(accuracy_m: float) -> int:
    """Zoom 18 for <= 10m, 16 for <= 50m, otherwise 14."""
    if accuracy_m <= 10:
        return 18
    elif accuracy_m <= 50:
        return 16
    return 14
