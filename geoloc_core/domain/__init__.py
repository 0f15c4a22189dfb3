"""
Domain Module: Location acquisition for customer registration.

Implements:
- Calibrated GPS acquisition (sampling, calibration, fence, geocoding)
- Fatal error taxonomy with manual-selection hint
- Manual map selection and map seeding
"""

from .errors import (
    LocationAcquisitionError,
    InsufficientSamplesError,
    AcquisitionTimeoutError,
    OutOfBoundsError,
    MANUAL_SELECTION_HINT,
)
from .acquisition import (
    AcquisitionConfig,
    AcquisitionController,
    acquire_calibrated_location,
    create_default_controller,
)
from .manual_selection import (
    DEFAULT_MAP_CENTER,
    initial_map_center,
    select_manual_location,
)

__all__ = [
    'LocationAcquisitionError',
    'InsufficientSamplesError',
    'AcquisitionTimeoutError',
    'OutOfBoundsError',
    'MANUAL_SELECTION_HINT',
    'AcquisitionConfig',
    'AcquisitionController',
    'acquire_calibrated_location',
    'create_default_controller',
    'DEFAULT_MAP_CENTER',
    'initial_map_center',
    'select_manual_location',
]
