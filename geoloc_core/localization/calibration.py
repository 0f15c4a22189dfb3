"""
Calibration Aggregator.

Fuses the readings of one acquisition run into a single coordinate:

1. IQR outlier filtering (see outlier_filter)
2. Accuracy-weighted mean, weight = 1 / (accuracy_m + 1)
3. Accuracy estimate = max(best reading, 2 * residual spread, floor)

Pure functions: no I/O, no metrics, no shared state.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import numpy as np

from geoloc_core.proto.geo_sample import GeoSample
from geoloc_core.proto.location_result import CalibratedCoordinate
from geoloc_core.localization.outlier_filter import filter_outliers, planar_distances


@dataclass
class CalibrationConfig:
    """
    Configuration for the calibration aggregator.
    
    Attributes:
        iqr_multiplier: k in the Q3 + k * IQR outlier bound
        accuracy_floor_m: Lowest accuracy the calibration may claim (m)
        meters_per_degree: Flat degree-to-meter factor for the spread term
    """
    
    iqr_multiplier: float = 1.5
    accuracy_floor_m: float = 5.0
    # 1 degree ~ 111 km; ignores longitude compression away from the equator
    meters_per_degree: float = 111000.0
    
    def __post_init__(self):
        """Validate configuration."""
        if self.iqr_multiplier < 0:
            raise ValueError("iqr_multiplier must be non-negative")
        if self.accuracy_floor_m < 0:
            raise ValueError("accuracy_floor_m must be non-negative")
        if self.meters_per_degree <= 0:
            raise ValueError("meters_per_degree must be positive")


def accuracy_weights(samples: Sequence[GeoSample]) -> np.ndarray:
    """Weight 1 / (accuracy_m + 1) per sample; lower accuracy value weighs more."""
    accuracies = np.array([s.accuracy_m for s in samples], dtype=float)
    return 1.0 / (accuracies + 1.0)


def consistency_m(
    samples: Sequence[GeoSample],
    center_lat: float,
    center_lon: float,
    meters_per_degree: float = 111000.0
) -> float:
    """
    Spread penalty: 2 * population std of sample distances to the center (m).
    
    Args:
        samples: Surviving samples
        center_lat: Calibrated latitude
        center_lon: Calibrated longitude
        meters_per_degree: Degree-to-meter factor
        
    Returns:
        Consistency term in meters (0 for a single sample)
    """
    distances_m = planar_distances(samples, center_lat, center_lon) * meters_per_degree
    return float(np.std(distances_m) * 2.0)


def calibrate_samples(
    samples: Sequence[GeoSample],
    config: Optional[CalibrationConfig] = None
) -> CalibratedCoordinate:
    """
    Fuse a SampleSet into one CalibratedCoordinate.
    
    Args:
        samples: Readings in collection order (size >= 1)
        config: Calibration configuration (uses defaults if None)
        
    Returns:
        CalibratedCoordinate. A single sample is returned as-is, without
        filtering, weighting or the accuracy floor.
        
    Raises:
        ValueError: If samples is empty
    """
    config = config or CalibrationConfig()
    
    if len(samples) == 0:
        raise ValueError("Cannot calibrate an empty sample set")
    
    if len(samples) == 1:
        only = samples[0]
        return CalibratedCoordinate(
            latitude=only.latitude,
            longitude=only.longitude,
            accuracy_m=only.accuracy_m,
            num_samples_used=1,
            num_outliers_dropped=0,
        )
    
    survivors = filter_outliers(samples, config.iqr_multiplier)
    
    lats = np.array([s.latitude for s in survivors], dtype=float)
    lons = np.array([s.longitude for s in survivors], dtype=float)
    weights = accuracy_weights(survivors)
    
    calibrated_lat = float(np.sum(lats * weights) / np.sum(weights))
    calibrated_lon = float(np.sum(lons * weights) / np.sum(weights))
    
    min_accuracy = min(s.accuracy_m for s in survivors)
    consistency = consistency_m(
        survivors, calibrated_lat, calibrated_lon, config.meters_per_degree
    )
    final_accuracy = max(min_accuracy, consistency, config.accuracy_floor_m)
    
    return CalibratedCoordinate(
        latitude=calibrated_lat,
        longitude=calibrated_lon,
        accuracy_m=float(final_accuracy),
        num_samples_used=len(survivors),
        num_outliers_dropped=len(samples) - len(survivors),
    )
