"""
IQR Outlier Filter for Device Position Samples.

Rejects readings whose planar distance from the sample centroid is
statistically anomalous. Distances are in raw degrees with no projection
correction; the filter only compares samples against each other.
"""

from typing import List, Sequence, Tuple
import numpy as np

from geoloc_core.proto.geo_sample import GeoSample

# Below this many samples the quartiles carry no information
MIN_SAMPLES_FOR_FILTERING = 3


def sample_centroid(samples: Sequence[GeoSample]) -> Tuple[float, float]:
    """Arithmetic mean (latitude, longitude) of the samples."""
    lats = np.array([s.latitude for s in samples], dtype=float)
    lons = np.array([s.longitude for s in samples], dtype=float)
    return float(lats.mean()), float(lons.mean())


def planar_distances(
    samples: Sequence[GeoSample],
    center_lat: float,
    center_lon: float
) -> np.ndarray:
    """
    Planar distance of each sample to a point.
    
    Args:
        samples: Samples in collection order
        center_lat: Reference latitude (degrees)
        center_lon: Reference longitude (degrees)
        
    Returns:
        Array of sqrt(dlat^2 + dlon^2) in degrees, same order as samples
    """
    lats = np.array([s.latitude for s in samples], dtype=float)
    lons = np.array([s.longitude for s in samples], dtype=float)
    return np.sqrt((lats - center_lat) ** 2 + (lons - center_lon) ** 2)


def iqr_threshold(distances: np.ndarray, iqr_multiplier: float = 1.5) -> float:
    """
    Upper acceptance bound Q3 + k * IQR.
    
    Quartiles are taken by index into the ascending sort:
    Q1 = d[floor(0.25 n)], Q3 = d[floor(0.75 n)].
    """
    sorted_d = np.sort(distances)
    n = len(sorted_d)
    q1 = sorted_d[int(np.floor(0.25 * n))]
    q3 = sorted_d[int(np.floor(0.75 * n))]
    return float(q3 + iqr_multiplier * (q3 - q1))


def filter_outliers(
    samples: Sequence[GeoSample],
    iqr_multiplier: float = 1.5
) -> List[GeoSample]:
    """
    Drop samples lying too far from the centroid (IQR rule).
    
    Args:
        samples: SampleSet (size >= 1)
        iqr_multiplier: k in Q3 + k * IQR
        
    Returns:
        Surviving samples in original order. Never empty: the sample
        defining Q3 always satisfies d <= Q3 + k * IQR.
        
    Notes:
        - Two or fewer samples pass through unchanged
    """
    if len(samples) < MIN_SAMPLES_FOR_FILTERING:
        return list(samples)
    
    center_lat, center_lon = sample_centroid(samples)
    distances = planar_distances(samples, center_lat, center_lon)
    threshold = iqr_threshold(distances, iqr_multiplier)
    
    return [s for s, d in zip(samples, distances) if d <= threshold]
