"""
Localization Module: Sample filtering, calibration and fence checks.

Key pieces:
- filter_outliers: IQR rejection of readings far from the centroid
- calibrate_samples: Accuracy-weighted fusion + accuracy estimate
- BoundingBox / is_within_bounds: Geographic fence
"""

from .outlier_filter import (
    filter_outliers,
    iqr_threshold,
    planar_distances,
    sample_centroid,
)
from .calibration import (
    CalibrationConfig,
    accuracy_weights,
    calibrate_samples,
    consistency_m,
)
from .bounds_validator import (
    BoundingBox,
    INDONESIA_BOUNDS,
    is_within_bounds,
)

__all__ = [
    # Outlier filtering
    'filter_outliers',
    'iqr_threshold',
    'planar_distances',
    'sample_centroid',
    # Calibration
    'CalibrationConfig',
    'accuracy_weights',
    'calibrate_samples',
    'consistency_m',
    # Fence
    'BoundingBox',
    'INDONESIA_BOUNDS',
    'is_within_bounds',
]
