"""
Protocol Module: Data types exchanged between pipeline stages.

- GeoSample: one device reading (immutable)
- SampleSet: readings of one acquisition run
- CalibratedCoordinate: fused coordinate + accuracy estimate
- LocationResult: terminal artifact returned to the caller
"""

from .geo_sample import (
    GeoSample,
    SampleSet,
    create_sample,
)
from .location_result import (
    CalibratedCoordinate,
    LocationResult,
    accuracy_level,
    suggested_zoom,
)

__all__ = [
    'GeoSample',
    'SampleSet',
    'create_sample',
    'CalibratedCoordinate',
    'LocationResult',
    'accuracy_level',
    'suggested_zoom',
]
